"""Unit tests for the SearchIndex facade."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from docs_search_engine.config import ScoringConfig, Settings
from docs_search_engine.errors import DuplicateLocationError, InvalidRecordError
from docs_search_engine.search.indexer import build_index
from docs_search_engine.search.search_index import SearchHit, SearchIndex
from docs_search_engine.search.storage import serialize


pytestmark = pytest.mark.unit


def test_from_records_builds_and_hydrates(ecoli_records):
    engine = SearchIndex.from_records(ecoli_records)

    hits = engine.search("bacterium")

    assert all(isinstance(hit, SearchHit) for hit in hits)
    assert [hit.location for hit in hits] == ["a", "b"]
    assert hits[0].document.title == "E. coli overview"
    assert hits[0].document.page == "p1"
    assert hits[0].score == hits[0].result.score > hits[1].score


def test_search_accepts_options(ecoli_records):
    engine = SearchIndex.from_records(ecoli_records)

    assert [hit.location for hit in engine.search("bacterium", {"offset": 1})] == ["b"]
    assert engine.search("   ") == []


def test_from_records_strict_mode_reports_position(ecoli_records):
    records = [*ecoli_records, {"title": "no location"}]

    with pytest.raises(InvalidRecordError) as excinfo:
        SearchIndex.from_records(records)

    assert excinfo.value.position == 2


def test_from_records_lenient_mode_skips_bad_records(ecoli_records):
    records = [ecoli_records[0], {"location": ""}, ecoli_records[1]]

    engine = SearchIndex.from_records(records, lenient=True)

    assert engine.index.doc_count == 2
    assert engine.index.document(1).location == "b"


def test_from_records_rejects_duplicate_locations(ecoli_records):
    with pytest.raises(DuplicateLocationError):
        SearchIndex.from_records([*ecoli_records, ecoli_records[0]])


def test_from_corpus_file(corpus_path):
    engine = SearchIndex.from_corpus_file(corpus_path)

    hits = engine.search("plotting", {"limit": 2})

    assert [hit.document.title for hit in hits] == ["Plotting", "Plotting"]


def test_scoring_config_is_applied(ecoli_records):
    default = SearchIndex.from_records(ecoli_records)
    flat = SearchIndex.from_records(ecoli_records, scoring=ScoringConfig(title_weight=1.0))

    assert flat.search("coli")[0].score < default.search("coli")[0].score


def test_from_settings_reads_environment(monkeypatch, corpus_path):
    monkeypatch.setenv("DOCS_SEARCH_STOPWORDS", "the,and")
    monkeypatch.setenv("DOCS_SEARCH_TITLE_WEIGHT", "2.5")

    engine = SearchIndex.from_settings(corpus_path)

    assert engine.index.config.stopwords == frozenset({"the", "and"})
    assert engine.scoring.title_weight == 2.5
    assert "the" not in engine.index


def test_from_settings_with_explicit_settings(corpus_path):
    engine = SearchIndex.from_settings(corpus_path, Settings(min_token_length=3))

    assert engine.index.config.min_token_length == 3
    assert "jl" not in engine.index


def test_save_and_load(tmp_path, corpus_path):
    engine = SearchIndex.from_corpus_file(corpus_path)
    target = engine.save(tmp_path / "index.json")

    loaded = SearchIndex.load(target)

    assert serialize(loaded.index) == serialize(engine.index)
    assert [hit.location for hit in loaded.search("distances")] == [hit.location for hit in engine.search("distances")]


def test_swap_publishes_new_index(ecoli_records):
    engine = SearchIndex.from_records(ecoli_records)
    original = engine.index
    replacement = build_index([])

    previous = engine.swap(replacement)

    assert previous is original
    assert engine.index is replacement
    assert engine.search("bacterium") == []


def test_concurrent_queries_see_old_or_new_index(ecoli_records, corpus_index):
    engine = SearchIndex.from_records(ecoli_records)
    old_index = engine.index
    old_hits = [hit.location for hit in engine.search("bacterium plotting")]
    new_hits = [hit.location for hit in SearchIndex(corpus_index).search("bacterium plotting")]
    assert old_hits != new_hits

    def query(_: int) -> list[str]:
        return [hit.location for hit in engine.search("bacterium plotting")]

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [pool.submit(query, i) for i in range(200)]
        for step in range(20):
            engine.swap(corpus_index if step % 2 == 0 else old_index)
        results = [future.result() for future in futures]

    assert all(result in (old_hits, new_hits) for result in results)

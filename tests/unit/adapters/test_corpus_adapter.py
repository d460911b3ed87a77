"""Unit tests for the corpus adapter."""

from __future__ import annotations

import logging

import pytest

from docs_search_engine.adapters.corpus import (
    AdaptResult,
    RejectedRecord,
    adapt,
    adapt_records,
    load_corpus,
    parse_search_index_js,
)
from docs_search_engine.domain.model import Document
from docs_search_engine.errors import InvalidRecordError
from docs_search_engine.search.indexer import build_index
from docs_search_engine.search.storage import serialize


@pytest.mark.unit
class TestAdapt:
    def test_maps_all_fields(self):
        document = adapt(
            {
                "location": "index.html#Installation-1",
                "page": "Home",
                "title": "Installation",
                "category": "section",
                "text": "Install Microbiome",
            }
        )

        assert document == Document(
            location="index.html#Installation-1",
            page="Home",
            title="Installation",
            category="section",
            text="Install Microbiome",
        )
        assert document.id is None

    def test_missing_and_null_fields_default_to_empty(self):
        document = adapt({"location": "index.html#", "title": None})

        assert (document.page, document.title, document.category, document.text) == ("", "", "", "")

    def test_unknown_keys_are_ignored(self):
        assert adapt({"location": "x", "score": 3}).location == "x"

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ({"title": "No location"}, "missing"),
            ({"location": ""}, "empty"),
            ({"location": "   "}, "empty"),
            ({"location": 12}, "must be a string"),
            ({"location": "x", "text": ["a", "b"]}, "'text' must be a string"),
            ({"location": "x", "text": "bad \ud800 text"}, "'text' is not valid UTF-8"),
            ({"location": "x\udfff"}, "'location' is not valid UTF-8"),
            (["location", "x"], "expected an object"),
            (None, "expected an object"),
        ],
    )
    def test_invalid_records(self, raw, message):
        with pytest.raises(InvalidRecordError, match=message):
            adapt(raw)


@pytest.mark.unit
class TestAdaptRecords:
    def test_preserves_order(self, ecoli_records):
        result = adapt_records(ecoli_records)

        assert isinstance(result, AdaptResult)
        assert result.ok
        assert [document.location for document in result.documents] == ["a", "b"]

    def test_strict_mode_raises_with_position(self, ecoli_records):
        records = [ecoli_records[0], {"location": None}, ecoli_records[1]]

        with pytest.raises(InvalidRecordError, match="record 1") as excinfo:
            adapt_records(records)

        assert excinfo.value.position == 1

    def test_lenient_mode_collects_rejects(self, ecoli_records, caplog):
        records = [{"location": 5, "title": "bad"}, ecoli_records[0], "junk", {"location": "c", "text": 1}]

        with caplog.at_level(logging.WARNING, logger="docs_search_engine.adapters.corpus"):
            result = adapt_records(records, lenient=True)

        assert not result.ok
        assert [document.location for document in result.documents] == ["a"]
        assert [rejected.position for rejected in result.rejected] == [0, 2, 3]
        assert result.rejected[2] == RejectedRecord(
            position=3,
            reason="field 'text' must be a string, got int",
            location="c",
        )
        assert result.rejected[0].location is None
        assert "Skipping corpus record 2" in caplog.text

    def test_undecodable_text_is_rejected_before_indexing(self, ecoli_records):
        records = [ecoli_records[0], {"location": "x", "title": "T", "text": "bad \ud800 text"}, ecoli_records[1]]

        with pytest.raises(InvalidRecordError, match="record 1"):
            adapt_records(records)

        result = adapt_records(records, lenient=True)
        index = build_index(result.documents)

        assert [rejected.position for rejected in result.rejected] == [1]
        assert [entry.location for entry in index.documents] == ["a", "b"]
        assert serialize(index)

    def test_empty_input(self):
        assert adapt_records([]) == AdaptResult(documents=())


@pytest.mark.unit
class TestParseSearchIndexJs:
    def test_documenter_bundle(self, corpus_path):
        records = parse_search_index_js(corpus_path.read_text(encoding="utf-8"))

        assert len(records) == 14
        assert records[0] == {"location": "index.html#", "page": "Home", "title": "Home", "category": "page", "text": ""}
        assert "there's a convenience function" in records[5]["text"]
        assert sum(1 for record in records if record["category"] == "page") == 4

    def test_bare_array(self):
        assert parse_search_index_js('[{"location": "a"}]') == [{"location": "a"}]

    def test_docs_object_without_assignment(self):
        assert parse_search_index_js('{"docs": []}') == []

    def test_assignment_with_semicolon_and_bom(self):
        text = '\ufeffconst searchIndex = {"docs": [{"location": "a"}]};\n'

        assert parse_search_index_js(text) == [{"location": "a"}]

    def test_escaped_backslash_before_quote_is_kept(self):
        text = '[{"location": "a", "text": "C:\\\\\'"}]'

        assert parse_search_index_js(text)[0]["text"] == "C:\\'"

    @pytest.mark.parametrize(
        "text",
        [
            "var x = not json",
            "",
            '{"pages": []}',
            '"just a string"',
            '{"docs": {"location": "a"}}',
        ],
    )
    def test_rejects_malformed_corpus(self, text):
        with pytest.raises(InvalidRecordError):
            parse_search_index_js(text)


@pytest.mark.unit
def test_load_corpus_reads_file(tmp_path):
    path = tmp_path / "search_index.js"
    path.write_text('var documenterSearchIndex = {"docs": [\n{"location": "a", "title": "A"},\n]}\n', encoding="utf-8")

    assert load_corpus(path) == [{"location": "a", "title": "A"}]

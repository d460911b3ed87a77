"""Simplified search facade - deep module consolidation.

``SearchIndex`` hides tokenization, BM25 scoring and result hydration behind a
single ``search()`` method, and owns the reference to the active index so a
host can rebuild in the background and publish the new index with ``swap()``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

from docs_search_engine.adapters.corpus import adapt_records, load_corpus
from docs_search_engine.config import AnalyzerConfig, ScoringConfig, Settings
from docs_search_engine.domain.search import ScoredResult, SearchOptions
from docs_search_engine.search.bm25_engine import BM25SearchEngine
from docs_search_engine.search.index import InvertedIndex
from docs_search_engine.search.indexer import build_index
from docs_search_engine.search.models import DocumentEntry
from docs_search_engine.search.storage import read_index, write_index


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    """A ranked result joined with the stored document metadata."""

    result: ScoredResult
    document: DocumentEntry

    @property
    def score(self) -> float:
        return self.result.score

    @property
    def location(self) -> str:
        return self.document.location


class SearchIndex:
    """Holder for the active ``InvertedIndex`` with a simple query interface.

    Readers grab the current index reference once per query, and ``swap()``
    replaces that reference in a single assignment. A concurrent query
    therefore runs entirely against either the old or the new index.
    """

    def __init__(self, index: InvertedIndex, scoring: ScoringConfig | None = None) -> None:
        self._engine = BM25SearchEngine(index, scoring)
        self.scoring = scoring or ScoringConfig()

    @classmethod
    def from_records(
        cls,
        records: Iterable[Any],
        *,
        config: AnalyzerConfig | None = None,
        scoring: ScoringConfig | None = None,
        lenient: bool = False,
    ) -> SearchIndex:
        """Adapt raw corpus records and build a fresh index from them."""
        adapted = adapt_records(records, lenient=lenient)
        return cls(build_index(adapted.documents, config), scoring)

    @classmethod
    def from_corpus_file(
        cls,
        path: Path,
        *,
        config: AnalyzerConfig | None = None,
        scoring: ScoringConfig | None = None,
        lenient: bool = False,
    ) -> SearchIndex:
        """Build from a ``search_index.js`` bundle or a JSON corpus file."""
        return cls.from_records(load_corpus(path), config=config, scoring=scoring, lenient=lenient)

    @classmethod
    def from_settings(cls, path: Path, settings: Settings | None = None) -> SearchIndex:
        """Build from a corpus file using environment-driven settings."""
        settings = settings or Settings()
        return cls.from_corpus_file(
            path,
            config=settings.analyzer_config(),
            scoring=settings.scoring_config(),
            lenient=settings.lenient_records,
        )

    @classmethod
    def load(cls, path: Path, scoring: ScoringConfig | None = None) -> SearchIndex:
        return cls(read_index(path), scoring)

    @property
    def index(self) -> InvertedIndex:
        return self._engine.index

    def swap(self, index: InvertedIndex) -> InvertedIndex:
        """Publish ``index`` as the active index and return the previous one."""
        previous = self._engine.index
        self._engine = BM25SearchEngine(index, self.scoring)
        logger.info(
            "Swapped active index %s -> %s (%d documents)",
            previous.fingerprint[:12],
            index.fingerprint[:12],
            index.doc_count,
        )
        return previous

    def save(self, path: Path) -> Path:
        return write_index(self._engine.index, path)

    def search(self, query: str, options: SearchOptions | Mapping[str, Any] | None = None) -> list[SearchHit]:
        """Search the active index and hydrate results with document metadata."""
        engine = self._engine
        results = engine.search(query, options)
        return [SearchHit(result=result, document=engine.index.document(result.doc_id)) for result in results]

"""BM25 query evaluation over an ``InvertedIndex``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import heapq
import logging
from typing import Any

from docs_search_engine.config import ScoringConfig
from docs_search_engine.domain.search import ScoredResult, SearchOptions
from docs_search_engine.observability.context import corpus_context
from docs_search_engine.observability.metrics import EMPTY_QUERIES, SEARCH_LATENCY, SEARCH_RESULTS, track_latency
from docs_search_engine.observability.tracing import create_span
from docs_search_engine.search.index import InvertedIndex
from docs_search_engine.search.schema import FIELD_ORDER, FieldKind
from docs_search_engine.search.stats import bm25, calculate_idf


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryTokens:
    """Immutable snapshot of the distinct terms of a query, in query order."""

    terms: tuple[str, ...]
    seed_text: str

    @classmethod
    def empty(cls) -> QueryTokens:
        return cls((), "")

    def is_empty(self) -> bool:
        return not self.terms


@dataclass
class _Accumulator:
    score: float = 0.0
    matched: set[str] | None = None

    def add(self, term: str, amount: float) -> None:
        self.score += amount
        if self.matched is None:
            self.matched = set()
        self.matched.add(term)


class BM25SearchEngine:
    """Compute per-field BM25 scores and rank documents of one index.

    The engine never re-creates a tokenizer from its own settings. Queries
    are analyzed with the index's tokenizer so query terms always match the
    normalization used at build time.
    """

    def __init__(self, index: InvertedIndex, scoring: ScoringConfig | None = None) -> None:
        self.index = index
        self.scoring = scoring or ScoringConfig()

    def tokenize_query(self, query: str) -> QueryTokens:
        """Return distinct query terms in first-occurrence order."""

        seed = (query or "").strip()
        if not seed:
            return QueryTokens.empty()

        seen: set[str] = set()
        ordered: list[str] = []
        for term in self.index.tokenizer.tokenize(seed, FieldKind.TEXT):
            if term in seen:
                continue
            seen.add(term)
            ordered.append(term)

        if not ordered:
            return QueryTokens.empty()
        return QueryTokens(tuple(ordered), seed)

    def score(
        self,
        query_tokens: QueryTokens,
        *,
        field_weights: Mapping[str, float] | None = None,
    ) -> dict[int, ScoredResult]:
        """Score every document matching at least one query term."""

        if query_tokens.is_empty():
            return {}

        weights = self.scoring.field_weights()
        if field_weights:
            weights.update(field_weights)

        total_docs = self.index.doc_count
        accumulators: dict[int, _Accumulator] = {}

        for term in query_tokens.terms:
            if term not in self.index:
                continue

            for kind in FIELD_ORDER:
                field_postings = self.index.field_postings(term, kind)
                if not field_postings:
                    continue
                stats = self.index.stats_for(kind)
                idf = calculate_idf(len(field_postings), total_docs)
                weight = weights.get(kind.value, 1.0)
                for posting in field_postings:
                    doc_length = self.index.documents[posting.doc_id].field_length(kind)
                    tf_weight = bm25(
                        posting.frequency,
                        doc_length,
                        stats.average_length,
                        k1=self.scoring.k1,
                        b=self.scoring.b,
                        max_length_ratio=self.scoring.max_length_ratio,
                    )
                    accumulators.setdefault(posting.doc_id, _Accumulator()).add(term, weight * idf * tf_weight)

        return {
            doc_id: ScoredResult(doc_id=doc_id, score=acc.score, matched_terms=frozenset(acc.matched or ()))
            for doc_id, acc in accumulators.items()
        }

    def search(self, query: str, options: SearchOptions | Mapping[str, Any] | None = None) -> list[ScoredResult]:
        """Rank documents for ``query`` and apply result windowing.

        Ordering is by descending score, then ascending document id.
        ``offset``/``limit`` slice the fully ranked list.
        """

        opts = _coerce_options(options)
        with corpus_context(self.index.fingerprint), create_span("index.search") as span, track_latency(SEARCH_LATENCY):
            query_tokens = self.tokenize_query(query)
            if query_tokens.is_empty():
                EMPTY_QUERIES.inc()
                return []

            scored = self.score(query_tokens, field_weights=opts.field_weights)
            if opts.categories is not None:
                scored = {
                    doc_id: result
                    for doc_id, result in scored.items()
                    if self.index.documents[doc_id].category in opts.categories
                }
            SEARCH_RESULTS.observe(len(scored))
            span.set_attribute("search.terms", len(query_tokens.terms))
            span.set_attribute("search.matches", len(scored))
            logger.debug("Query %r matched %d documents", query_tokens.seed_text, len(scored))

            return _window(list(scored.values()), offset=opts.offset, limit=opts.limit)


def search(
    index: InvertedIndex,
    query: str,
    options: SearchOptions | Mapping[str, Any] | None = None,
    *,
    scoring: ScoringConfig | None = None,
) -> list[ScoredResult]:
    """Rank documents of ``index`` for ``query``.

    Returns an empty list when the query yields no terms. Never raises for a
    string query.
    """
    return BM25SearchEngine(index, scoring).search(query, options)


def _rank_key(result: ScoredResult) -> tuple[float, int]:
    return (-result.score, result.doc_id)


def _window(results: list[ScoredResult], *, offset: int, limit: int | None) -> list[ScoredResult]:
    if limit is None:
        return sorted(results, key=_rank_key)[offset:]
    if limit == 0:
        return []
    end = offset + limit
    if end < len(results):
        top_items = heapq.nsmallest(end, results, key=_rank_key)
        return top_items[offset:]
    return sorted(results, key=_rank_key)[offset:end]


def _coerce_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    if options is None:
        return SearchOptions()
    if isinstance(options, SearchOptions):
        return options
    return SearchOptions.model_validate(dict(options))

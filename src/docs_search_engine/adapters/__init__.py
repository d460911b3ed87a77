"""Adapters between external corpus formats and the domain model."""

from docs_search_engine.adapters.corpus import (
    AdaptResult,
    RejectedRecord,
    adapt,
    adapt_records,
    load_corpus,
    parse_search_index_js,
)


__all__ = [
    "AdaptResult",
    "RejectedRecord",
    "adapt",
    "adapt_records",
    "load_corpus",
    "parse_search_index_js",
]

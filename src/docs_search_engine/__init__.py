"""Embeddable full-text search for static documentation corpora.

Typical flow::

    records = load_corpus("build/search_index.js")
    index = build_index(adapt_records(records).documents)
    payload = serialize(index)          # ship alongside the site
    results = search(deserialize(payload), "abundance table", {"limit": 10})
"""

from docs_search_engine.adapters.corpus import AdaptResult, adapt, adapt_records, load_corpus, parse_search_index_js
from docs_search_engine.config import AnalyzerConfig, ScoringConfig, Settings
from docs_search_engine.domain import Document, ScoredResult, SearchOptions
from docs_search_engine.errors import (
    CorruptIndexError,
    DuplicateLocationError,
    InvalidRecordError,
    SearchEngineError,
    UnsupportedVersionError,
)
from docs_search_engine.search.analyzers import Tokenizer, tokenize
from docs_search_engine.search.bm25_engine import BM25SearchEngine, search
from docs_search_engine.search.index import InvertedIndex
from docs_search_engine.search.indexer import IndexBuilder, build_index
from docs_search_engine.search.schema import FieldKind
from docs_search_engine.search.search_index import SearchHit, SearchIndex
from docs_search_engine.search.storage import FORMAT_VERSION, deserialize, read_index, serialize, write_index


__all__ = [
    "FORMAT_VERSION",
    "AdaptResult",
    "AnalyzerConfig",
    "BM25SearchEngine",
    "CorruptIndexError",
    "Document",
    "DuplicateLocationError",
    "FieldKind",
    "IndexBuilder",
    "InvalidRecordError",
    "InvertedIndex",
    "ScoredResult",
    "ScoringConfig",
    "SearchEngineError",
    "SearchHit",
    "SearchIndex",
    "SearchOptions",
    "Settings",
    "Tokenizer",
    "UnsupportedVersionError",
    "adapt",
    "adapt_records",
    "build_index",
    "deserialize",
    "load_corpus",
    "parse_search_index_js",
    "read_index",
    "search",
    "serialize",
    "tokenize",
    "write_index",
]

"""
Search indexing and query engine package.

This package provides a pure-Python search stack:
- schema: Indexed field kinds
- analyzers: Tokenizers and filters (normalize, case-fold, stop, stemming)
- index: Immutable inverted index value
- stats: BM25 scoring statistics
- indexer: Corpus indexing
- bm25_engine: Query scoring engine
- storage: Versioned (de)serialization
- search_index: Facade holding the active index
"""

"""Domain layer - pure data with no infrastructure dependencies.

This layer contains:
- Entities: the indexable Document
- Value Objects: search options and scored results
"""

from docs_search_engine.domain.model import Document
from docs_search_engine.domain.search import ScoredResult, SearchOptions


__all__ = [
    "Document",
    "ScoredResult",
    "SearchOptions",
]

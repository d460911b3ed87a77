"""Immutable inverted index value.

An ``InvertedIndex`` is produced once per corpus snapshot (by the builder or
by deserialization) and never mutated afterwards. All containers are tuples or
read-only mapping proxies, so one instance can be shared by any number of
concurrent readers without locking.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType

from docs_search_engine.config import AnalyzerConfig
from docs_search_engine.search.analyzers import Tokenizer
from docs_search_engine.search.models import DocumentEntry, Posting
from docs_search_engine.search.schema import FIELD_ORDER, FieldKind
from docs_search_engine.search.stats import FieldLengthStats


@dataclass(frozen=True)
class InvertedIndex:
    """Term dictionary, document table and field statistics for one corpus."""

    config: AnalyzerConfig
    documents: tuple[DocumentEntry, ...]
    terms: Mapping[str, tuple[Posting, ...]]
    field_stats: Mapping[FieldKind, FieldLengthStats]
    fingerprint: str = ""
    _by_location: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.terms, MappingProxyType):
            object.__setattr__(self, "terms", MappingProxyType(dict(self.terms)))
        if not isinstance(self.field_stats, MappingProxyType):
            object.__setattr__(self, "field_stats", MappingProxyType(dict(self.field_stats)))
        object.__setattr__(self, "documents", tuple(self.documents))
        by_location = MappingProxyType({entry.location: entry.doc_id for entry in self.documents})
        object.__setattr__(self, "_by_location", by_location)

    @property
    def doc_count(self) -> int:
        return len(self.documents)

    @property
    def term_count(self) -> int:
        return len(self.terms)

    @property
    def posting_count(self) -> int:
        return sum(len(postings) for postings in self.terms.values())

    @cached_property
    def tokenizer(self) -> Tokenizer:
        """Tokenizer built from the configuration the index was built with."""
        return Tokenizer(self.config)

    def __contains__(self, term: object) -> bool:
        return term in self.terms

    def vocabulary(self) -> Iterator[str]:
        """Iterate indexed terms in sorted order."""
        return iter(sorted(self.terms))

    def postings(self, term: str) -> tuple[Posting, ...]:
        """Return every posting for ``term`` (ascending doc id), or ``()``."""
        return self.terms.get(term, ())

    def field_postings(self, term: str, field: FieldKind) -> tuple[Posting, ...]:
        return tuple(posting for posting in self.postings(term) if posting.field is field)

    def document(self, doc_id: int) -> DocumentEntry:
        """Return stored metadata for ``doc_id``.

        Raises:
            KeyError: When ``doc_id`` is not part of this index.
        """
        if doc_id < 0 or doc_id >= len(self.documents):
            raise KeyError(doc_id)
        return self.documents[doc_id]

    def document_by_location(self, location: str) -> DocumentEntry | None:
        doc_id = self._by_location.get(location)
        if doc_id is None:
            return None
        return self.documents[doc_id]

    def stats_for(self, field: FieldKind) -> FieldLengthStats:
        return self.field_stats.get(field) or FieldLengthStats(field=field.value, total_terms=0, document_count=0)

    def describe(self) -> dict[str, object]:
        """Small summary used in logs and diagnostics."""
        return {
            "documents": self.doc_count,
            "terms": self.term_count,
            "postings": self.posting_count,
            "fingerprint": self.fingerprint,
            "fields": {kind.value: self.stats_for(kind).to_dict() for kind in FIELD_ORDER},
        }

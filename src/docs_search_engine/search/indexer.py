"""Build-time indexing of a documentation corpus.

The builder makes a single forward pass over documents supplied in their final
order. Identifiers are assigned from input position, postings are appended in
ascending document order, and the resulting ``InvertedIndex`` is fully
deterministic for a given corpus and analyzer configuration.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
import hashlib
import logging

import orjson

from docs_search_engine.config import AnalyzerConfig
from docs_search_engine.domain.model import Document
from docs_search_engine.errors import DuplicateLocationError
from docs_search_engine.observability.context import corpus_context
from docs_search_engine.observability.metrics import BUILD_LATENCY, INDEX_BUILDS, INDEX_DOC_COUNT, track_latency
from docs_search_engine.observability.tracing import create_span
from docs_search_engine.search.analyzers import Tokenizer
from docs_search_engine.search.index import InvertedIndex
from docs_search_engine.search.models import DocumentEntry, Posting
from docs_search_engine.search.schema import FIELD_ORDER, FieldKind
from docs_search_engine.search.stats import compute_field_length_stats
from docs_search_engine.search.storage import FORMAT_VERSION


logger = logging.getLogger(__name__)


class IndexBuilder:
    """Accumulate documents into postings and produce an immutable index."""

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()
        self.tokenizer = Tokenizer(self.config)
        self._postings: dict[str, list[Posting]] = {}
        self._documents: list[DocumentEntry] = []
        self._locations: dict[str, int] = {}
        self._fingerprinter = _CorpusFingerprintBuilder(self.config)

    @property
    def doc_count(self) -> int:
        return len(self._documents)

    def add_document(self, document: Document) -> int:
        """Index ``document`` and return the id assigned to it.

        Raises:
            DuplicateLocationError: A previously added document has the same
                location.
        """
        doc_id = len(self._documents)
        first_id = self._locations.get(document.location)
        if first_id is not None:
            raise DuplicateLocationError(document.location, first_id=first_id, duplicate_position=doc_id)

        document = document.with_id(doc_id)
        lengths: dict[FieldKind, int] = {}
        for kind, value in ((FieldKind.TITLE, document.title), (FieldKind.TEXT, document.text)):
            counts = Counter(self.tokenizer.tokenize(value, kind))
            lengths[kind] = sum(counts.values())
            for term, frequency in counts.items():
                self._postings.setdefault(term, []).append(Posting(doc_id=doc_id, frequency=frequency, field=kind))

        self._locations[document.location] = doc_id
        self._documents.append(
            DocumentEntry(
                doc_id=doc_id,
                location=document.location,
                page=document.page,
                title=document.title,
                category=document.category,
                title_length=lengths[FieldKind.TITLE],
                text_length=lengths[FieldKind.TEXT],
            )
        )
        self._fingerprinter.add_document(document)
        return doc_id

    def add_documents(self, documents: Iterable[Document]) -> None:
        for document in documents:
            self.add_document(document)

    def build(self) -> InvertedIndex:
        """Freeze accumulated state into an ``InvertedIndex``."""
        field_stats = {
            kind: compute_field_length_stats(kind.value, (entry.field_length(kind) for entry in self._documents))
            for kind in FIELD_ORDER
        }
        terms = {term: tuple(self._postings[term]) for term in sorted(self._postings)}
        return InvertedIndex(
            config=self.config,
            documents=tuple(self._documents),
            terms=terms,
            field_stats=field_stats,
            fingerprint=self._fingerprinter.digest(),
        )


def build_index(documents: Iterable[Document], config: AnalyzerConfig | None = None) -> InvertedIndex:
    """Build an index from documents supplied in their final order.

    Raises:
        DuplicateLocationError: Two documents share a location. No index is
            produced in that case.
    """
    builder = IndexBuilder(config)
    with create_span("index.build") as span, track_latency(BUILD_LATENCY):
        try:
            builder.add_documents(documents)
        except DuplicateLocationError:
            INDEX_BUILDS.labels(status="duplicate_location").inc()
            raise
        index = builder.build()
        span.set_attribute("index.documents", index.doc_count)
        span.set_attribute("index.terms", index.term_count)

    INDEX_BUILDS.labels(status="success").inc()
    INDEX_DOC_COUNT.set(index.doc_count)
    with corpus_context(index.fingerprint):
        logger.info(
            "Built index with %d documents, %d terms, %d postings",
            index.doc_count,
            index.term_count,
            index.posting_count,
        )
    return index


class _CorpusFingerprintBuilder:
    """Deterministically hash indexed documents + analyzer config."""

    def __init__(self, config: AnalyzerConfig) -> None:
        serialized_config = orjson.dumps(config.to_dict(), option=orjson.OPT_SORT_KEYS)
        self._config_digest = hashlib.sha256(serialized_config).hexdigest()
        self._format_digest = hashlib.sha256(f"v{FORMAT_VERSION}".encode()).hexdigest()
        self._doc_digests: list[tuple[int, str]] = []

    def add_document(self, document: Document) -> None:
        serialized_record = orjson.dumps(document.to_record(), option=orjson.OPT_SORT_KEYS)
        self._doc_digests.append((document.id, hashlib.sha256(serialized_record).hexdigest()))

    def digest(self) -> str:
        root = hashlib.sha256()
        root.update(self._format_digest.encode("ascii"))
        root.update(self._config_digest.encode("ascii"))
        for doc_id, digest in self._doc_digests:
            root.update(str(doc_id).encode("ascii"))
            root.update(digest.encode("ascii"))
        return root.hexdigest()

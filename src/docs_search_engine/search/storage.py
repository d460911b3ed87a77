"""Index (de)serialization for shipping a built index to clients.

The serialized form is minified JSON with sorted keys, so building the same
corpus twice yields byte-identical payloads that can be cached and diffed.
Layout::

    {
      "version": 1,
      "analyzer": {"min_token_length": 1, "stemming": false, "stopwords": []},
      "fields": {"text": {...}, "title": {...}},
      "documents": [{"id": 0, "location": "...", "page": "...", "title": "...",
                     "category": "...", "lengths": [title_len, text_len]}],
      "terms": {"coli": [[0, "title", 1], [0, "text", 1]]},
      "term_count": 1,
      "posting_count": 2,
      "fingerprint": "..."
    }

Loading validates the whole structure eagerly. A corrupt index is rejected
with ``CorruptIndexError`` rather than partially recovered.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import math
import os
from pathlib import Path
import tempfile
from typing import Any

import orjson
from pydantic import ValidationError

from docs_search_engine.config import AnalyzerConfig
from docs_search_engine.errors import CorruptIndexError, UnsupportedVersionError
from docs_search_engine.observability.metrics import INDEX_DOC_COUNT, INDEX_LOADS
from docs_search_engine.search.index import InvertedIndex
from docs_search_engine.search.models import DocumentEntry, Posting
from docs_search_engine.search.schema import FIELD_ORDER, FIELD_RANK, FieldKind
from docs_search_engine.search.stats import FieldLengthStats, compute_field_length_stats


logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_REQUIRED_SECTIONS = ("analyzer", "fields", "documents", "terms", "term_count", "posting_count")


def index_to_dict(index: InvertedIndex) -> dict[str, Any]:
    """Return the JSON-ready representation of ``index``."""
    return {
        "version": FORMAT_VERSION,
        "analyzer": index.config.to_dict(),
        "fields": {kind.value: index.stats_for(kind).to_dict() for kind in FIELD_ORDER},
        "documents": [entry.to_dict() for entry in index.documents],
        "terms": {term: [posting.to_list() for posting in index.terms[term]] for term in sorted(index.terms)},
        "term_count": index.term_count,
        "posting_count": index.posting_count,
        "fingerprint": index.fingerprint,
    }


def serialize(index: InvertedIndex) -> bytes:
    """Encode ``index`` as deterministic, minified JSON bytes."""
    return orjson.dumps(index_to_dict(index), option=orjson.OPT_SORT_KEYS)


def deserialize(data: bytes | bytearray | memoryview | str) -> InvertedIndex:
    """Decode bytes produced by :func:`serialize`.

    Raises:
        UnsupportedVersionError: The payload declares a format version this
            library does not know.
        CorruptIndexError: The payload is not a structurally valid index.
    """
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        INDEX_LOADS.labels(status="corrupt").inc()
        raise CorruptIndexError(f"Index payload is not valid JSON: {exc}") from exc

    try:
        index = index_from_dict(payload)
    except UnsupportedVersionError:
        INDEX_LOADS.labels(status="unsupported").inc()
        raise
    except CorruptIndexError:
        INDEX_LOADS.labels(status="corrupt").inc()
        raise

    INDEX_LOADS.labels(status="success").inc()
    INDEX_DOC_COUNT.set(index.doc_count)
    logger.debug("Loaded index with %d documents and %d terms", index.doc_count, index.term_count)
    return index


def index_from_dict(payload: Any) -> InvertedIndex:
    """Validate a decoded payload and rebuild the index it describes."""
    _require(isinstance(payload, Mapping), "index payload must be a JSON object")

    if "version" not in payload:
        raise CorruptIndexError("index payload is missing the 'version' section")
    version = payload["version"]
    if not _is_int(version) or version != FORMAT_VERSION:
        raise UnsupportedVersionError(version, FORMAT_VERSION)

    missing = [section for section in _REQUIRED_SECTIONS if section not in payload]
    if missing:
        raise CorruptIndexError(f"index payload is missing sections: {', '.join(missing)}")

    config = _load_analyzer(payload["analyzer"])
    documents = _load_documents(payload["documents"])
    terms = _load_terms(payload["terms"], len(documents))

    term_count = payload["term_count"]
    _require(_is_int(term_count) and term_count == len(terms), "term_count does not match the term dictionary")
    posting_count = payload["posting_count"]
    actual_postings = sum(len(postings) for postings in terms.values())
    _require(
        _is_int(posting_count) and posting_count == actual_postings,
        "posting_count does not match the term dictionary",
    )

    _check_lengths_against_postings(documents, terms)
    field_stats = _load_field_stats(payload["fields"], documents)

    fingerprint = payload.get("fingerprint", "")
    _require(isinstance(fingerprint, str), "fingerprint must be a string")

    return InvertedIndex(
        config=config,
        documents=tuple(documents),
        terms=terms,
        field_stats=field_stats,
        fingerprint=fingerprint,
    )


def write_index(index: InvertedIndex, path: Path) -> Path:
    """Persist ``index`` to ``path`` atomically (temporary file + rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = serialize(index)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote index to %s (%d bytes)", path, len(data))
    return path


def read_index(path: Path) -> InvertedIndex:
    """Load an index previously written by :func:`write_index`."""
    return deserialize(Path(path).read_bytes())


# --- validation helpers ------------------------------------------------


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise CorruptIndexError(message)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _load_analyzer(raw: Any) -> AnalyzerConfig:
    _require(isinstance(raw, Mapping), "analyzer section must be an object")
    try:
        return AnalyzerConfig.from_dict(dict(raw))
    except ValidationError as exc:
        raise CorruptIndexError(f"analyzer section is invalid: {exc}") from exc


def _load_documents(raw: Any) -> list[DocumentEntry]:
    _require(isinstance(raw, list), "documents section must be a list")
    documents: list[DocumentEntry] = []
    seen_locations: set[str] = set()
    for position, entry in enumerate(raw):
        _require(isinstance(entry, Mapping), f"document {position} must be an object")
        for key in ("location", "page", "title", "category"):
            _require(isinstance(entry.get(key), str), f"document {position} field '{key}' must be a string")
        _require(entry.get("id") == position and _is_int(entry.get("id")), f"document {position} has id out of order")
        location = entry["location"]
        _require(bool(location), f"document {position} has an empty location")
        _require(location not in seen_locations, f"document {position} repeats location '{location}'")
        seen_locations.add(location)
        lengths = entry.get("lengths")
        _require(
            isinstance(lengths, list) and len(lengths) == 2 and all(_is_int(n) and n >= 0 for n in lengths),
            f"document {position} has invalid field lengths",
        )
        documents.append(DocumentEntry.from_dict(dict(entry)))
    return documents


def _load_terms(raw: Any, doc_count: int) -> dict[str, tuple[Posting, ...]]:
    _require(isinstance(raw, Mapping), "terms section must be an object")
    terms: dict[str, tuple[Posting, ...]] = {}
    for term in sorted(raw):
        entries = raw[term]
        _require(isinstance(term, str) and bool(term), "term keys must be non-empty strings")
        _require(isinstance(entries, list) and bool(entries), f"term '{term}' has no postings")
        postings: list[Posting] = []
        previous: tuple[int, int] | None = None
        for entry in entries:
            _require(isinstance(entry, list) and len(entry) == 3, f"term '{term}' has a malformed posting")
            doc_id, field_name, frequency = entry
            _require(_is_int(doc_id) and 0 <= doc_id < doc_count, f"term '{term}' references unknown document")
            _require(_is_int(frequency) and frequency >= 1, f"term '{term}' has a non-positive frequency")
            _require(field_name in (kind.value for kind in FieldKind), f"term '{term}' has unknown field")
            posting = Posting.from_list(entry)
            order_key = (posting.doc_id, FIELD_RANK[posting.field])
            _require(previous is None or order_key > previous, f"term '{term}' postings are not strictly ascending")
            previous = order_key
            postings.append(posting)
        terms[term] = tuple(postings)
    return terms


def _check_lengths_against_postings(documents: list[DocumentEntry], terms: Mapping[str, tuple[Posting, ...]]) -> None:
    totals: dict[tuple[int, FieldKind], int] = {}
    for postings in terms.values():
        for posting in postings:
            key = (posting.doc_id, posting.field)
            totals[key] = totals.get(key, 0) + posting.frequency
    for entry in documents:
        for kind in FIELD_ORDER:
            _require(
                totals.get((entry.doc_id, kind), 0) == entry.field_length(kind),
                f"document {entry.doc_id} {kind.value} length disagrees with its postings",
            )


def _load_field_stats(raw: Any, documents: list[DocumentEntry]) -> dict[FieldKind, FieldLengthStats]:
    _require(isinstance(raw, Mapping), "fields section must be an object")
    stats: dict[FieldKind, FieldLengthStats] = {}
    for kind in FIELD_ORDER:
        section = raw.get(kind.value)
        _require(isinstance(section, Mapping), f"fields section is missing '{kind.value}'")
        expected = compute_field_length_stats(kind.value, (entry.field_length(kind) for entry in documents))
        _require(
            section.get("document_count") == expected.document_count
            and section.get("total_terms") == expected.total_terms,
            f"'{kind.value}' statistics disagree with the document table",
        )
        average = section.get("average_length")
        _require(
            isinstance(average, (int, float))
            and not isinstance(average, bool)
            and math.isclose(average, expected.average_length, rel_tol=1e-9, abs_tol=1e-12),
            f"'{kind.value}' average length disagrees with the document table",
        )
        stats[kind] = expected
    return stats

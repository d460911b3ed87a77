"""Corpus adapter - raw documentation records to Documents.

Documentation generators publish their search corpus as a JavaScript bundle::

    var documenterSearchIndex = {"docs": [
    {
        "location": "index.html#Installation-1",
        "page": "Home",
        "title": "Installation",
        "category": "section",
        "text": "Install Microbiome from the Julia REPL: ..."
    },
    ...
    ]}

This module decodes such bundles (or plain JSON) and maps each record onto the
strict ``Document`` entity. Validation is strict by default: the first bad
record aborts. Lenient mode collects rejected records for untrusted producers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from typing import Any

import orjson
from pydantic import ValidationError

from docs_search_engine.domain.model import Document
from docs_search_engine.errors import InvalidRecordError


logger = logging.getLogger(__name__)

RECORD_FIELDS = ("location", "page", "title", "category", "text")
_OPTIONAL_FIELDS = ("page", "title", "category", "text")

# `var documenterSearchIndex = ` (or `window.x =`, `const x =`) prefix of a JS bundle
_JS_ASSIGNMENT = re.compile(r"^\s*(?:(?:var|let|const)\s+)?[\w$.]+\s*=\s*", re.UNICODE)
# JS string literals may contain \' which JSON rejects; an even run of backslashes before it is left alone
_JS_SINGLE_QUOTE_ESCAPE = re.compile(r"(?<!\\)((?:\\\\)*)\\'")
# Generators leave a comma after the last record: `},\n\n]}`
_TRAILING_COMMA = re.compile(r",(\s*\])(\s*\}?)\s*$")


@dataclass(frozen=True)
class RejectedRecord:
    """A record skipped in lenient mode, with the reason it was rejected."""

    position: int
    reason: str
    location: str | None = None


@dataclass(frozen=True)
class AdaptResult:
    """Outcome of adapting a batch of raw records."""

    documents: tuple[Document, ...]
    rejected: tuple[RejectedRecord, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.rejected


def adapt(raw_record: Any) -> Document:
    """Map one raw ``{location, page, title, category, text}`` record.

    Missing display fields default to ``""``. ``category`` is kept as metadata
    only.

    Raises:
        InvalidRecordError: The record is not an object, ``location`` is
            missing or empty, or a field is not a string of valid UTF-8 text.
    """
    if not isinstance(raw_record, Mapping):
        raise InvalidRecordError(f"expected an object, got {type(raw_record).__name__}")

    location = raw_record.get("location")
    if location is None:
        raise InvalidRecordError("missing required field 'location'")
    if not isinstance(location, str):
        raise InvalidRecordError(f"field 'location' must be a string, got {type(location).__name__}")
    if not location.strip():
        raise InvalidRecordError("field 'location' is empty")
    _require_utf8("location", location)

    values: dict[str, str] = {}
    for name in _OPTIONAL_FIELDS:
        value = raw_record.get(name)
        if value is None:
            values[name] = ""
            continue
        if not isinstance(value, str):
            raise InvalidRecordError(f"field '{name}' must be a string, got {type(value).__name__}")
        _require_utf8(name, value)
        values[name] = value

    try:
        return Document(location=location, **values)
    except ValidationError as exc:  # pragma: no cover - guarded by the checks above
        raise InvalidRecordError(str(exc)) from exc


def _require_utf8(name: str, value: str) -> None:
    # Lone surrogates survive json.loads but cannot be hashed or serialized
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidRecordError(f"field '{name}' is not valid UTF-8 text: {exc.reason}") from exc


def adapt_records(records: Iterable[Any], *, lenient: bool = False) -> AdaptResult:
    """Adapt records in order.

    In strict mode (default) the first invalid record raises
    ``InvalidRecordError`` carrying its position. In lenient mode invalid
    records are logged, collected in ``AdaptResult.rejected`` and skipped.
    """
    documents: list[Document] = []
    rejected: list[RejectedRecord] = []
    for position, raw_record in enumerate(records):
        try:
            documents.append(adapt(raw_record))
        except InvalidRecordError as exc:
            if not lenient:
                raise InvalidRecordError(str(exc), position=position) from exc
            location = raw_record.get("location") if isinstance(raw_record, Mapping) else None
            logger.warning("Skipping corpus record %d: %s", position, exc)
            rejected.append(
                RejectedRecord(
                    position=position,
                    reason=str(exc),
                    location=location if isinstance(location, str) else None,
                )
            )

    if rejected:
        logger.info("Adapted %d records, rejected %d", len(documents), len(rejected))
    return AdaptResult(documents=tuple(documents), rejected=tuple(rejected))


def parse_search_index_js(text: str) -> list[Any]:
    """Decode a ``search_index.js`` bundle or a JSON corpus into raw records.

    Accepts ``var name = {"docs": [...]}`` (optionally followed by ``;``), a
    bare ``{"docs": [...]}`` object, or a bare JSON array of records. JS-only
    ``\\'`` escapes and a trailing comma after the last record are tolerated.

    Raises:
        InvalidRecordError: The payload cannot be decoded into a record list.
    """
    body = _JS_ASSIGNMENT.sub("", text.lstrip("\ufeff"), count=1).strip()
    body = body.removesuffix(";").rstrip()
    body = _JS_SINGLE_QUOTE_ESCAPE.sub(r"\1'", body)
    body = _TRAILING_COMMA.sub(r"\1\2", body)
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise InvalidRecordError(f"corpus is not valid JSON: {exc}") from exc

    if isinstance(payload, Mapping):
        payload = payload.get("docs")
    if not isinstance(payload, list):
        raise InvalidRecordError("corpus must be a list of records or an object with a 'docs' list")
    return payload


def load_corpus(path: Path) -> list[Any]:
    """Read and decode a corpus file (see :func:`parse_search_index_js`)."""
    path = Path(path)
    records = parse_search_index_js(path.read_text(encoding="utf-8"))
    logger.debug("Loaded %d corpus records from %s", len(records), path)
    return records

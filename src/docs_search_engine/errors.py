"""Error taxonomy for index build and load failures.

Every error here is raised at build or load time for deterministic,
input-dependent problems. Query-time operations on a valid index never raise.
"""

from __future__ import annotations


class SearchEngineError(ValueError):
    """Base class for all search engine failures."""


class InvalidRecordError(SearchEngineError):
    """Raised when a raw corpus record cannot be converted into a Document."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        self.position = position
        if position is not None:
            message = f"record {position}: {message}"
        super().__init__(message)


class DuplicateLocationError(SearchEngineError):
    """Raised when two documents in one corpus share the same location."""

    def __init__(self, location: str, *, first_id: int, duplicate_position: int) -> None:
        self.location = location
        self.first_id = first_id
        self.duplicate_position = duplicate_position
        super().__init__(
            f"Duplicate location '{location}' at position {duplicate_position} (first seen as document {first_id})"
        )


class CorruptIndexError(SearchEngineError):
    """Raised when a serialized index is structurally invalid."""


class UnsupportedVersionError(SearchEngineError):
    """Raised when a serialized index carries an unknown format version."""

    def __init__(self, version: object, supported: int) -> None:
        self.version = version
        self.supported = supported
        super().__init__(f"Unsupported index format version {version!r} (supported: {supported})")

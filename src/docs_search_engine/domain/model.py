"""Domain model - the indexable Document entity.

Following Cosmic Python principles:
- Domain model has NO dependencies on infrastructure
- Value objects are immutable and validated at construction
- Uses Pydantic dataclasses for validation
"""

from __future__ import annotations

import dataclasses
from typing import Any

from pydantic import Field, field_validator
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class Document:
    """One indexable unit of a documentation corpus.

    ``location`` is the external key (a URI fragment such as
    ``"index.html#Installation-1"``). ``id`` stays ``None`` until the index
    builder assigns it from the document's position in the corpus.
    """

    location: str = Field(min_length=1)
    page: str = ""
    title: str = ""
    category: str = ""
    text: str = ""
    id: int | None = Field(default=None, ge=0)

    @field_validator("location")
    @classmethod
    def _require_location(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("location must not be blank")
        return value

    @field_validator("location", "page", "title", "category", "text")
    @classmethod
    def _require_utf8(cls, value: str) -> str:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(f"text is not valid UTF-8: {exc.reason}") from exc
        return value

    def with_id(self, doc_id: int) -> Document:
        """Return a copy carrying the build-time identifier."""
        return dataclasses.replace(self, id=doc_id)

    def to_record(self) -> dict[str, Any]:
        """Return the external record shape (without the id)."""
        return {
            "location": self.location,
            "page": self.page,
            "title": self.title,
            "category": self.category,
            "text": self.text,
        }

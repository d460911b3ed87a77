"""Search data models."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from docs_search_engine.search.schema import FieldKind


@dataclass(frozen=True, slots=True)
class Posting:
    """A posting records how often a term occurs in one field of a document."""

    doc_id: int
    frequency: int
    field: FieldKind

    def __post_init__(self) -> None:
        if self.frequency < 1:
            raise ValueError(f"Posting frequency must be >= 1, got {self.frequency}")
        if self.doc_id < 0:
            raise ValueError(f"Posting doc_id must be >= 0, got {self.doc_id}")

    def to_list(self) -> list[Any]:
        """Compact ``[doc_id, field, frequency]`` form used for serialization."""
        return [self.doc_id, self.field.value, self.frequency]

    @classmethod
    def from_list(cls, data: Sequence[Any]) -> Posting:
        doc_id, field_name, frequency = data
        return cls(doc_id=int(doc_id), frequency=int(frequency), field=FieldKind.parse(field_name))


@dataclass(frozen=True, slots=True)
class DocumentEntry:
    """Stored document metadata used to hydrate results.

    The body text is not kept; ``title_length`` and ``text_length`` hold the
    token counts needed for length normalization.
    """

    doc_id: int
    location: str
    page: str
    title: str
    category: str
    title_length: int = 0
    text_length: int = 0

    def field_length(self, field: FieldKind) -> int:
        if field is FieldKind.TITLE:
            return self.title_length
        return self.text_length

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.doc_id,
            "location": self.location,
            "page": self.page,
            "title": self.title,
            "category": self.category,
            "lengths": [self.title_length, self.text_length],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentEntry:
        title_length, text_length = data["lengths"]
        return cls(
            doc_id=int(data["id"]),
            location=str(data["location"]),
            page=str(data["page"]),
            title=str(data["title"]),
            category=str(data["category"]),
            title_length=int(title_length),
            text_length=int(text_length),
        )

"""Indexed field definitions.

Documents carry two analyzed fields. ``title`` is short and weighted heavily
at query time, ``text`` is the page body. ``page`` and ``category`` are stored
for result hydration but never tokenized.
"""

from __future__ import annotations

from enum import Enum


class FieldKind(str, Enum):
    """Analyzed fields of a Document."""

    TITLE = "title"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str) -> FieldKind:
        try:
            return cls(value)
        except ValueError:
            msg = f"Unknown field '{value}'. Available: {[kind.value for kind in cls]}"
            raise ValueError(msg) from None


# Postings for one document list the title entry before the text entry.
FIELD_ORDER: tuple[FieldKind, ...] = (FieldKind.TITLE, FieldKind.TEXT)
FIELD_RANK: dict[FieldKind, int] = {kind: rank for rank, kind in enumerate(FIELD_ORDER)}

# Letters and digits only. Underscores, apostrophes and dots split words.
WORD_PATTERN = r"[^\W_]+"

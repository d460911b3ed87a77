"""Domain models for search requests and results.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchOptions(BaseModel):
    """Value object describing result windowing and scoring overrides.

    ``limit`` and ``offset`` are applied after full ranking. ``field_weights``
    overrides the engine's per-field multipliers for a single call, and
    ``categories`` keeps only documents whose category is listed.
    """

    model_config = ConfigDict(frozen=True)

    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    field_weights: dict[str, float] | None = None
    categories: frozenset[str] | None = None

    @field_validator("field_weights")
    @classmethod
    def _check_weights(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        if value is None:
            return None
        for name, weight in value.items():
            if name not in ("title", "text"):
                raise ValueError(f"Unknown field '{name}' in field_weights")
            if weight < 0:
                raise ValueError(f"Field weight for '{name}' must be non-negative")
        return value


class ScoredResult(BaseModel):
    """Value object for a single ranked document."""

    model_config = ConfigDict(frozen=True)

    doc_id: int
    score: float
    matched_terms: frozenset[str] = Field(default_factory=frozenset)

"""Centralized configuration for docs-search-engine using Pydantic Settings."""

from __future__ import annotations

import re
from typing import Any
import unicodedata

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docs_search_engine.search.schema import WORD_PATTERN


_WORD = re.compile(WORD_PATTERN)


class AnalyzerConfig(BaseModel):
    """Tokenizer configuration shared by index build and query parsing.

    One instance is stored on every built index and reused verbatim by the
    query engine, so indexed terms and query terms are always normalized the
    same way.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_token_length: int = Field(default=1, ge=1, description="Tokens shorter than this are dropped")
    stopwords: frozenset[str] = Field(default_factory=frozenset, description="Terms dropped after normalization")
    stemming: bool = Field(default=False, description="Apply light suffix stemming to every token")

    @field_validator("stopwords", mode="before")
    @classmethod
    def _normalize_stopwords(cls, value: Any) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        words = set()
        for word in value:
            if not isinstance(word, str):
                raise ValueError(f"Stopwords must be strings, got {type(word).__name__}")
            if not word.strip():
                continue
            # Same normalization tokens get before the stop filter runs
            normalized = unicodedata.normalize("NFKC", word.strip()).casefold()
            if not _WORD.fullmatch(normalized):
                raise ValueError(f"Stopword {word!r} is not a single term and could never match")
            words.add(normalized)
        return frozenset(words)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with a stable stopword ordering."""
        return {
            "min_token_length": self.min_token_length,
            "stopwords": sorted(self.stopwords),
            "stemming": self.stemming,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalyzerConfig:
        return cls.model_validate(data)


class ScoringConfig(BaseModel):
    """BM25 parameters and per-field weights."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    k1: float = Field(default=1.2, ge=0.0, description="BM25 term frequency saturation")
    b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization strength")
    title_weight: float = Field(default=4.0, ge=0.0, description="Multiplier for title field scores")
    text_weight: float = Field(default=1.0, ge=0.0, description="Multiplier for text field scores")
    max_length_ratio: float = Field(
        default=4.0,
        gt=0.0,
        description="Cap on document length / average length when normalizing",
    )

    def field_weights(self) -> dict[str, float]:
        return {"title": self.title_weight, "text": self.text_weight}


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Hosts that embed the engine can read tunables from ``DOCS_SEARCH_*``
    variables (or a ``.env`` file) and turn them into the immutable config
    values consumed by the builder and the query engine.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCS_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Analyzer settings
    min_token_length: int = Field(default=1, ge=1, description="Minimum token length kept by the tokenizer")
    stopwords: str = Field(default="", description="Comma-separated stop-words dropped at index and query time")
    stemming: bool = Field(default=False, description="Enable light suffix stemming")

    # Scoring settings
    bm25_k1: float = Field(default=1.2, ge=0.0, description="BM25 k1 parameter")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 b parameter")
    title_weight: float = Field(default=4.0, ge=0.0, description="Title field weight")
    text_weight: float = Field(default=1.0, ge=0.0, description="Text field weight")
    max_length_ratio: float = Field(default=4.0, gt=0.0, description="Length normalization cap")

    # Corpus settings
    lenient_records: bool = Field(default=False, description="Collect invalid corpus records instead of failing")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    def get_stopwords(self) -> list[str]:
        """Get list of configured stop-words."""
        if not self.stopwords:
            return []
        return [word.strip() for word in self.stopwords.split(",") if word.strip()]

    def analyzer_config(self) -> AnalyzerConfig:
        return AnalyzerConfig(
            min_token_length=self.min_token_length,
            stopwords=self.get_stopwords(),
            stemming=self.stemming,
        )

    def scoring_config(self) -> ScoringConfig:
        return ScoringConfig(
            k1=self.bm25_k1,
            b=self.bm25_b,
            title_weight=self.title_weight,
            text_weight=self.text_weight,
            max_length_ratio=self.max_length_ratio,
        )

"""Analyzer utilities for the search stack.

This module mirrors Whoosh's composable tokenizer/filter design without
pulling in heavy dependencies. ``Tokenizer`` wires the pieces together from a
single ``AnalyzerConfig`` so that index build and query parsing always agree
on what a term is.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
import re
from typing import Any, Protocol
import unicodedata

from docs_search_engine.config import AnalyzerConfig
from docs_search_engine.search.schema import WORD_PATTERN, FieldKind


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int
    boost: float = 1.0
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "boost": self.boost,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class CharFilter(Protocol):
    """Protocol implemented by filters applied to raw text before tokenizing."""

    def __call__(self, text: str) -> str:  # pragma: no cover - interface definition
        ...


class TokenSource(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...



class UnicodeNormalizer:
    """Char filter applying Unicode normalization (NFKC by default)."""

    def __init__(self, form: str = "NFKC") -> None:
        self.form = form

    def __call__(self, text: str) -> str:
        return unicodedata.normalize(self.form, text)


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = WORD_PATTERN, flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that case-folds token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = token.text.casefold()
            if folded == token.text:
                yield token
            else:
                yield token.copy_with(text=folded)


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = 1) -> None:
        self.min_length = max(1, min_length)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


ENGLISH_STOPWORDS = [
    "a",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "but",
    "by",
    "for",
    "if",
    "in",
    "into",
    "is",
    "it",
    "no",
    "not",
    "of",
    "on",
    "or",
    "such",
    "that",
    "the",
    "their",
    "then",
    "there",
    "these",
    "they",
    "this",
    "to",
    "was",
    "will",
    "with",
]

_SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("ization", "ize"),
    ("ational", "ate"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("iveness", "ive"),
    ("tional", "tion"),
    ("biliti", "ble"),
    ("lessli", "less"),
    ("entli", "ent"),
    ("enci", "ence"),
    ("anci", "ance"),
    ("izer", "ize"),
    ("abli", "able"),
    ("alli", "al"),
    ("ator", "ate"),
    ("alism", "al"),
    ("aliti", "al"),
    ("ousli", "ous"),
    ("ration", "rate"),
    ("ation", "ate"),
    ("ness", ""),
    ("ment", ""),
    ("ance", "an"),
    ("ence", "en"),
    ("able", ""),
    ("ible", ""),
)

_SIMPLE_SUFFIXES: tuple[str, ...] = ("ingly", "edly", "ing", "ed", "ly", "es", "s")


class StopFilter:
    """Removes stopwords from the stream.

    The stop list is empty unless the caller supplies one: documentation
    corpora are full of short domain terms that general lists would drop.
    """

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self.stopwords = frozenset(word.casefold() for word in (stopwords or ()))

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        if not self.stopwords:
            yield from tokens
            return
        for token in tokens:
            if token.text.casefold() not in self.stopwords:
                yield token


class PorterStemFilter:
    """Applies a minimal Porter-style stemming routine."""

    def __init__(self) -> None:
        self._stem = _build_porter_stemmer()

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield token.copy_with(text=self._stem(token.text))


def _build_porter_stemmer() -> Callable[[str], str]:
    """Return a very small Porter-like stemmer suited for docs search."""

    def stem(word: str) -> str:
        lower = word.lower()
        candidate = _strip_complex_suffix(lower)
        if candidate:
            return candidate
        fallback = _strip_simple_suffix(lower)
        if fallback:
            return fallback
        return lower

    return stem


def _strip_complex_suffix(lower: str) -> str | None:
    for suffix, replacement in _SUFFIX_RULES:
        if lower.endswith(suffix) and len(lower) - len(suffix) >= 2:
            candidate = lower[: -len(suffix)] + replacement
            if len(candidate) >= 2:
                return candidate
    return None


def _strip_simple_suffix(lower: str) -> str | None:
    for suffix in _SIMPLE_SUFFIXES:
        if lower.endswith(suffix) and len(lower) - len(suffix) >= 2:
            candidate = lower[: -len(suffix)]
            if len(candidate) >= 2:
                return candidate
    return None


class AnalyzerPipeline:
    """Composable analyzer pipeline (char filters + tokenizer + filters)."""

    def __init__(
        self,
        tokenizer: TokenSource,
        filters: Sequence[TokenFilter] | None = None,
        *,
        char_filters: Sequence[CharFilter] | None = None,
    ) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])
        self.char_filters = list(char_filters or [])

    def stream(self, text: str) -> Iterator[Token]:
        """Lazily yield tokens with positions renumbered after filtering."""
        for char_filter in self.char_filters:
            text = char_filter(text)
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        for idx, token in enumerate(stream):
            if token.position != idx:
                token = token.copy_with(position=idx)
            yield token

    def __call__(self, text: str) -> list[Token]:
        return list(self.stream(text))


class TokenStream:
    """Lazy, restartable sequence of terms produced from one input string.

    Each iteration re-runs the analyzer pipeline, so a stream can be consumed
    any number of times and always yields the same terms in the same order.
    """

    __slots__ = ("_pipeline", "_text", "field")

    def __init__(self, pipeline: AnalyzerPipeline, text: str, field: FieldKind) -> None:
        self._pipeline = pipeline
        self._text = text
        self.field = field

    def __iter__(self) -> Iterator[str]:
        for token in self._pipeline.stream(self._text):
            yield token.text

    def tokens(self) -> Iterator[Token]:
        """Yield full tokens (positions and offsets into the normalized text)."""
        return self._pipeline.stream(self._text)

    def __repr__(self) -> str:
        preview = self._text if len(self._text) <= 40 else self._text[:40] + "..."
        return f"TokenStream(field={self.field.value!r}, text={preview!r})"


class Tokenizer:
    """Turn raw text into normalized terms according to an ``AnalyzerConfig``.

    The pipeline is: NFKC normalization, split on runs of non letter/digit
    characters, case folding, minimum length, stop-words, optional stemming.
    ``"E. coli"`` becomes ``["e", "coli"]``.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()
        filters: list[TokenFilter] = [
            LowercaseFilter(),
            MinLengthFilter(self.config.min_token_length),
            StopFilter(self.config.stopwords),
        ]
        if self.config.stemming:
            filters.append(PorterStemFilter())
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), filters, char_filters=[UnicodeNormalizer()])

    def tokenize(self, text: str, field: FieldKind = FieldKind.TEXT) -> TokenStream:
        """Return the lazy term sequence for ``text`` analyzed as ``field``."""
        return TokenStream(self.pipeline, text or "", field)

    def terms(self, text: str, field: FieldKind = FieldKind.TEXT) -> list[str]:
        return list(self.tokenize(text, field))


def tokenize(text: str, field: FieldKind = FieldKind.TEXT, config: AnalyzerConfig | None = None) -> TokenStream:
    """Convenience wrapper around ``Tokenizer(config).tokenize``."""
    return Tokenizer(config).tokenize(text, field)

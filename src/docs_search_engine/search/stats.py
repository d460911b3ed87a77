"""Statistical helpers for BM25 style scoring.

The functions here stay independent of the index layout so they can be unit
tested in isolation and reused by any scorer.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated term statistics for a field."""

    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count

    def to_dict(self) -> dict[str, float | int]:
        return {
            "document_count": self.document_count,
            "total_terms": self.total_terms,
            "average_length": self.average_length,
        }


def compute_field_length_stats(field: str, lengths: Iterable[int]) -> FieldLengthStats:
    """Return aggregate stats for one field given per-document lengths."""

    doc_count = 0
    total_terms = 0
    for length in lengths:
        doc_count += 1
        total_terms += max(length, 0)
    return FieldLengthStats(field=field, total_terms=total_terms, document_count=doc_count)


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return the BM25 inverse document frequency.

    Uses the ``ln(1 + (N - df + 0.5) / (df + 0.5))`` form, which stays
    positive even for terms present in every document of a small corpus.
    """

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    df = min(doc_freq, total_docs)
    return math.log(1.0 + (total_docs - df + 0.5) / (df + 0.5))


def bm25(
    tf: int,
    doc_length: int,
    avg_doc_length: float,
    *,
    k1: float = 1.2,
    b: float = 0.75,
    max_length_ratio: float = 4.0,
) -> float:
    """Compute the BM25 term weight without IDF.

    The length ratio ``dl / avgdl`` is capped at ``max_length_ratio`` so very
    long pages are not pushed to the bottom for a single long body.
    """

    if tf <= 0:
        return 0.0
    if avg_doc_length <= 0:
        normalized_length = 1.0
    else:
        normalized_length = min(doc_length / avg_doc_length, max_length_ratio)
    denominator = tf + k1 * (1 - b + b * normalized_length)
    return (tf * (k1 + 1)) / denominator

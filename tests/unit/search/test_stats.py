"""Unit tests for search stats helpers."""

from __future__ import annotations

import math

import pytest

from docs_search_engine.search.stats import (
    FieldLengthStats,
    bm25,
    calculate_idf,
    compute_field_length_stats,
)


pytestmark = pytest.mark.unit


def test_compute_field_length_stats_returns_averages() -> None:
    stats = compute_field_length_stats("text", [100, 50])

    assert isinstance(stats, FieldLengthStats)
    assert stats.document_count == 2
    assert stats.total_terms == 150
    assert stats.average_length == 75


def test_average_length_of_empty_field_is_zero() -> None:
    assert compute_field_length_stats("title", []).average_length == 0.0


def test_calculate_idf_prefers_rare_terms() -> None:
    idf_high = calculate_idf(doc_freq=1, total_docs=10)
    idf_low = calculate_idf(doc_freq=5, total_docs=10)

    assert idf_high > idf_low > 0


def test_calculate_idf_stays_positive_for_ubiquitous_terms() -> None:
    assert calculate_idf(doc_freq=2, total_docs=2) == pytest.approx(math.log(1.2))
    assert calculate_idf(doc_freq=0, total_docs=2) == 0.0
    assert calculate_idf(doc_freq=1, total_docs=0) == 0.0


def test_bm25_respects_term_frequency() -> None:
    tf_one = bm25(tf=1, doc_length=100, avg_doc_length=80)
    tf_three = bm25(tf=3, doc_length=100, avg_doc_length=80)

    assert tf_three > tf_one


def test_bm25_penalizes_long_documents_up_to_cap() -> None:
    short = bm25(tf=1, doc_length=5, avg_doc_length=10)
    average = bm25(tf=1, doc_length=10, avg_doc_length=10)
    capped = bm25(tf=1, doc_length=40, avg_doc_length=10)
    huge = bm25(tf=1, doc_length=1000, avg_doc_length=10)

    assert short > average > capped
    assert capped == huge


def test_bm25_average_length_document_is_unit_weight_for_single_hit() -> None:
    assert bm25(tf=1, doc_length=7, avg_doc_length=7, k1=1.2, b=0.75) == pytest.approx(1.0)


def test_bm25_zero_frequency_contributes_nothing() -> None:
    assert bm25(tf=0, doc_length=10, avg_doc_length=10) == 0.0

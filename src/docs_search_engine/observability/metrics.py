"""Prometheus metrics for index builds and queries."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


INDEX_BUILDS = Counter(
    "docs_search_index_builds_total",
    "Index build attempts",
    ["status"],
)

INDEX_LOADS = Counter(
    "docs_search_index_loads_total",
    "Serialized index load attempts",
    ["status"],
)

INDEX_DOC_COUNT = Gauge(
    "docs_search_index_document_count",
    "Documents in the most recently built or loaded index",
)

BUILD_LATENCY = Histogram(
    "docs_search_build_latency_seconds",
    "Index build latency",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

SEARCH_LATENCY = Histogram(
    "docs_search_query_latency_seconds",
    "Search query latency",
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

SEARCH_RESULTS = Histogram(
    "docs_search_query_matches",
    "Matching documents per query before windowing",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 1000),
)

EMPTY_QUERIES = Counter(
    "docs_search_empty_queries_total",
    "Queries that produced no terms after analysis",
)


@contextmanager
def track_latency(histogram: Histogram) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()

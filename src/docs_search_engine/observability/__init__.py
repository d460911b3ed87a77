"""Observability module for structured logging, tracing, and metrics."""

from docs_search_engine.observability.context import (
    LogContext,
    corpus_context,
    get_trace_context,
    set_trace_context,
    trace_context,
)
from docs_search_engine.observability.logging import JsonFormatter, configure_logging
from docs_search_engine.observability.metrics import (
    BUILD_LATENCY,
    EMPTY_QUERIES,
    INDEX_BUILDS,
    INDEX_DOC_COUNT,
    INDEX_LOADS,
    SEARCH_LATENCY,
    SEARCH_RESULTS,
    get_metrics,
    track_latency,
)
from docs_search_engine.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "BUILD_LATENCY",
    "EMPTY_QUERIES",
    "INDEX_BUILDS",
    "INDEX_DOC_COUNT",
    "INDEX_LOADS",
    "SEARCH_LATENCY",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "LogContext",
    "configure_logging",
    "corpus_context",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]

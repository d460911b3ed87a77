"""Log correlation state for the current call.

Every log line carries the active trace and span ids. While an index is being
built or searched, lines also carry a short tag of the corpus fingerprint so
logs from several indexes living in one process can be told apart.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from uuid import uuid4


CORPUS_TAG_LENGTH = 12


@dataclass(frozen=True)
class LogContext:
    """Identifiers attached to log records emitted in the current context."""

    trace_id: str
    span_id: str
    corpus: str = ""

    @classmethod
    def fresh(cls) -> LogContext:
        return cls(trace_id=uuid4().hex, span_id=uuid4().hex[:16])


trace_context: ContextVar[LogContext | None] = ContextVar("trace_context", default=None)


def get_trace_context() -> LogContext:
    """Return the current context, creating fresh ids on first use."""
    ctx = trace_context.get()
    if ctx is None:
        ctx = LogContext.fresh()
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, *, corpus: str = "") -> None:
    trace_context.set(LogContext(trace_id=trace_id, span_id=span_id, corpus=corpus))


def update_span_id(span_id: str) -> None:
    """Switch to a new span, keeping the trace id and corpus tag."""
    trace_context.set(replace(get_trace_context(), span_id=span_id))


def corpus_tag(fingerprint: str) -> str:
    return fingerprint[:CORPUS_TAG_LENGTH]


@contextmanager
def corpus_context(fingerprint: str) -> Iterator[LogContext]:
    """Tag log lines emitted inside the block with ``fingerprint``.

    The previous context is restored on exit, span changes made inside the
    block included.
    """
    tagged = replace(get_trace_context(), corpus=corpus_tag(fingerprint))
    token = trace_context.set(tagged)
    try:
        yield tagged
    finally:
        trace_context.reset(token)

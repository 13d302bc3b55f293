"""Correlation ids attached to every log line.

Log records carry ``trace_id``/``span_id`` and, once known, the ``site``
being searched. The values live in a ``ContextVar``, so threads answering
concurrent queries never see each other's ids.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
import secrets
from typing import TYPE_CHECKING, TypedDict


if TYPE_CHECKING:
    from opentelemetry.trace import Span


class LogCorrelation(TypedDict, total=False):
    trace_id: str
    span_id: str
    site: str


trace_context: ContextVar[LogCorrelation | None] = ContextVar("docsite_trace_context", default=None)


def get_trace_context() -> LogCorrelation:
    """Return the current ids, minting a fresh pair on first use."""
    current = trace_context.get()
    if current and current.get("trace_id"):
        return current
    current = {"trace_id": secrets.token_hex(16), "span_id": secrets.token_hex(8)}
    trace_context.set(current)
    return current


def set_trace_context(trace_id: str, span_id: str, *, site: str | None = None) -> None:
    correlation: LogCorrelation = {"trace_id": trace_id, "span_id": span_id}
    if site:
        correlation["site"] = site
    trace_context.set(correlation)


def bind_span(span: Span, *, site: str | None = None) -> Token[LogCorrelation | None]:
    """Point the log context at ``span`` and return the token that undoes it.

    Trace and span ids always come from the span, so log lines match the
    exported trace. A site already in the context is kept unless ``site``
    replaces it.
    """
    span_context = span.get_span_context()
    correlation: LogCorrelation = {
        "trace_id": format(span_context.trace_id, "032x"),
        "span_id": format(span_context.span_id, "016x"),
    }
    site = site or (trace_context.get() or {}).get("site")
    if site:
        correlation["site"] = site
    return trace_context.set(correlation)

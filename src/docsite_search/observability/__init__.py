"""Observability: structured logging, metrics and tracing."""

from docsite_search.observability.context import (
    bind_span,
    get_trace_context,
    set_trace_context,
    trace_context,
)
from docsite_search.observability.logging import JsonFormatter, configure_logging
from docsite_search.observability.metrics import (
    INDEX_ENTRY_COUNT,
    INDEX_TOKEN_COUNT,
    SEARCH_LATENCY,
    SEARCH_QUERIES,
    MetricBridge,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from docsite_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_ENTRY_COUNT",
    "INDEX_TOKEN_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_QUERIES",
    "JsonFormatter",
    "MetricBridge",
    "bind_span",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]

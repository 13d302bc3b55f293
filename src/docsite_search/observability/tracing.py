"""Spans around index builds and queries.

The tracer provider stays local to this package rather than being installed
globally, so an application embedding the engine keeps control of its own
OpenTelemetry setup. Hand ``init_tracing`` a configured provider to export
spans.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind

from docsite_search.observability.context import bind_span, trace_context


if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Span, Tracer


_state: dict[str, Any] = {"provider": None, "tracer": None}


def init_tracing(
    service_name: str = "docsite-search",
    resource_attributes: dict[str, str] | None = None,
    provider: TracerProvider | None = None,
) -> TracerProvider:
    if provider is None:
        resource = Resource.create({"service.name": service_name, **(resource_attributes or {})})
        provider = TracerProvider(resource=resource)
    _state["provider"] = provider
    _state["tracer"] = provider.get_tracer("docsite_search")
    return provider


def get_tracer() -> Tracer:
    if _state["tracer"] is None:
        init_tracing()
    return _state["tracer"]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    *,
    site: str | None = None,
) -> Iterator[Span]:
    """Run the ``with`` body inside a new current span.

    Log lines written in the body carry the span's trace and span ids (and
    ``site`` when given); the previous log context returns on exit.
    Exceptions are recorded on the span and marked as its error status
    before they propagate.
    """
    with get_tracer().start_as_current_span(name, kind=kind, attributes=attributes) as span:
        token = bind_span(span, site=site)
        try:
            yield span
        finally:
            trace_context.reset(token)

"""Search metrics.

Every measurement lands twice: in the prometheus_client registry (exposed by
``get_metrics``) and on an OpenTelemetry instrument from a local meter
provider, which callers can give their own readers via ``init_metrics``.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import threading
import time
from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from opentelemetry.metrics import Meter
    from opentelemetry.sdk.metrics.export import MetricReader


_state: dict[str, Any] = {"provider": None, "meter": None}
_state_lock = threading.Lock()

# Gauges map onto up-down counters fed with the change since the last value.
_OTEL_FACTORIES = {
    Counter: "create_counter",
    Histogram: "create_histogram",
    Gauge: "create_up_down_counter",
}


def init_metrics(
    service_name: str = "docsite-search",
    resource_attributes: dict[str, str] | None = None,
    metric_readers: Sequence[MetricReader] | None = None,
) -> MeterProvider:
    """Create the meter provider on first call and return it afterwards."""
    with _state_lock:
        if _state["provider"] is None:
            resource = Resource.create({"service.name": service_name, **(resource_attributes or {})})
            provider = MeterProvider(resource=resource, metric_readers=list(metric_readers or ()))
            _state["provider"] = provider
            _state["meter"] = provider.get_meter("docsite_search")
        return _state["provider"]


def _meter() -> Meter:
    if _state["meter"] is None:
        init_metrics()
    return _state["meter"]


@dataclass(frozen=True)
class BoundMetric:
    """A ``MetricBridge`` with its label values filled in."""

    metric: MetricBridge
    labels: dict[str, str]

    def inc(self, amount: float = 1.0) -> None:
        self.metric.inc(self.labels, amount)

    def observe(self, value: float) -> None:
        self.metric.observe(self.labels, value)

    def set(self, value: float) -> None:
        self.metric.set(self.labels, value)


class MetricBridge:
    """A Prometheus metric mirrored onto an OpenTelemetry instrument."""

    def __init__(
        self,
        name: str,
        documentation: str,
        kind: type[Counter] | type[Histogram] | type[Gauge],
        labelnames: Sequence[str] = (),
        **prometheus_options: Any,
    ) -> None:
        self.name = name
        self.documentation = documentation
        self.prometheus_metric = kind(name, documentation, list(labelnames), **prometheus_options)
        self._factory = _OTEL_FACTORIES[kind]
        self._instrument: Any = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}
        self._lock = threading.Lock()

    def labels(self, **labels: str) -> BoundMetric:
        return BoundMetric(self, labels)

    def _otel(self) -> Any:
        with self._lock:
            if self._instrument is None:
                create = getattr(_meter(), self._factory)
                self._instrument = create(self.name, description=self.documentation)
            return self._instrument

    def inc(self, labels: dict[str, str], amount: float = 1.0) -> None:
        self.prometheus_metric.labels(**labels).inc(amount)
        self._otel().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self.prometheus_metric.labels(**labels).observe(value)
        self._otel().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self.prometheus_metric.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        with self._lock:
            delta = value - self._gauge_values.get(key, 0.0)
            self._gauge_values[key] = value
        if delta:
            self._otel().add(delta, labels)


SEARCH_LATENCY = MetricBridge(
    "docsite_search_latency_seconds",
    "Search query latency",
    Histogram,
    ("site",),
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
)

SEARCH_QUERIES = MetricBridge(
    "docsite_search_queries_total",
    "Search queries by outcome",
    Counter,
    ("site", "outcome"),
)

INDEX_ENTRY_COUNT = MetricBridge(
    "docsite_index_entry_count",
    "Entries in the loaded search index",
    Gauge,
    ("site",),
)

INDEX_TOKEN_COUNT = MetricBridge(
    "docsite_index_token_count",
    "Distinct tokens in the inverted index",
    Gauge,
    ("site",),
)


@contextmanager
def track_latency(metric: MetricBridge, **labels: str) -> Iterator[None]:
    """Observe the wall time of the ``with`` body, also when it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        metric.labels(**labels).observe(time.perf_counter() - started)


def get_metrics() -> bytes:
    """Prometheus text exposition of the default registry."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST

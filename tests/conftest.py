"""Shared test fixtures and configuration."""

import logging
import os
from pathlib import Path

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
import pytest

from docsite_search.config import Settings
from docsite_search.engine import DocsiteSearchEngine
from docsite_search.observability import init_tracing, trace_context
from docsite_search.observability.tracing import _state as tracing_state
from docsite_search.search.inverted_index import build_inverted_index
from docsite_search.search.loader import load_index


FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep DOCSITE_SEARCH_* variables and stray .env files out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("DOCSITE_SEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def colors_index_path() -> Path:
    return FIXTURES_DIR / "colors_search_index.js"


@pytest.fixture
def color_records() -> list[dict[str, str]]:
    """Two function entries sharing the "color" prefix plus an unrelated page."""
    return [
        {
            "location": "a#1",
            "page": "A",
            "title": "colormap",
            "category": "function",
            "text": "Returns a predefined sequential colormap.",
        },
        {
            "location": "b#1",
            "page": "B",
            "title": "colordiff",
            "category": "function",
            "text": "Evaluate CIEDE2000 color difference.",
        },
        {
            "location": "c#1",
            "page": "C",
            "title": "References",
            "category": "section",
            "text": "Further reading about perceptual metrics.",
        },
    ]


@pytest.fixture
def color_index(color_records):
    return load_index(color_records)


@pytest.fixture
def color_inverted(color_index):
    return build_inverted_index(color_index)


@pytest.fixture
def settings() -> Settings:
    return Settings(site_name="test-docs")


@pytest.fixture
def engine(colors_index_path, settings) -> DocsiteSearchEngine:
    return DocsiteSearchEngine.from_file(colors_index_path, settings)


@pytest.fixture
def restore_root_logger():
    """Undo ``configure_logging`` so handlers never outlive captured streams."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def span_exporter():
    """Route spans to memory for the duration of a test."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    previous = dict(tracing_state)
    init_tracing(provider=provider)
    yield exporter
    tracing_state.update(previous)
    provider.shutdown()


@pytest.fixture
def isolated_trace_context():
    token = trace_context.set(None)
    yield
    trace_context.reset(token)

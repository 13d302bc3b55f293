"""Documentation site search engine.

Build once, query many times: the engine validates the raw index, builds
the inverted index eagerly and afterwards only reads. ``search`` and
``snippet`` are safe to call from any number of threads without locking.

Interface Methods:
- search(query, limit) -> list[SearchResult]
- snippet(result, max_length) -> Snippet
- search_response(query, limit, ...) -> SearchResponse
- stats() -> IndexStats
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
import logging
from pathlib import Path
import time
from typing import Any
from urllib.parse import urljoin

from docsite_search.config import RankingConfig, Settings, SnippetConfig
from docsite_search.models import HighlightSpan, IndexStats, SearchHit, SearchResponse
from docsite_search.observability import (
    INDEX_ENTRY_COUNT,
    INDEX_TOKEN_COUNT,
    SEARCH_LATENCY,
    SEARCH_QUERIES,
    create_span,
    track_latency,
)
from docsite_search.search.inverted_index import InvertedIndex, build_inverted_index
from docsite_search.search.loader import load_index, load_index_file
from docsite_search.search.models import SearchIndex, SearchResult, Snippet
from docsite_search.search.ranking import QueryEngine
from docsite_search.search.snippet import render_snippet, snippet_for_result


logger = logging.getLogger(__name__)


class DocsiteSearchEngine:
    """Search a documentation site's precomputed index."""

    def __init__(self, index: SearchIndex, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.site = self.settings.site_name
        self._index = index

        start = time.perf_counter()
        build_attributes = {"site": self.site, "entries": len(index)}
        with create_span("docsite.index.build", attributes=build_attributes, site=self.site):
            self._inverted_index = build_inverted_index(index)
            logger.info(
                "Built search index for %s: %d entries, %d distinct tokens in %.1fms",
                self.site,
                len(index),
                len(self._inverted_index),
                (time.perf_counter() - start) * 1000,
            )
        self._query_engine = QueryEngine(index, self._inverted_index, self.settings.ranking)

        INDEX_ENTRY_COUNT.labels(site=self.site).set(len(index))
        INDEX_TOKEN_COUNT.labels(site=self.site).set(len(self._inverted_index))

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, Any]], settings: Settings | None = None
    ) -> DocsiteSearchEngine:
        """Validate raw records and build an engine; raises ``MalformedIndexError``."""
        return cls(load_index(records), settings)

    @classmethod
    def from_file(cls, path: str | Path, settings: Settings | None = None) -> DocsiteSearchEngine:
        return cls(load_index_file(path), settings)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> DocsiteSearchEngine:
        """Build from ``settings.index_path``."""
        resolved = settings or Settings()
        if resolved.index_path is None:
            raise ValueError("index_path is not configured (set DOCSITE_SEARCH_INDEX_PATH)")
        return cls.from_file(resolved.index_path, resolved)

    @property
    def index(self) -> SearchIndex:
        return self._index

    @property
    def inverted_index(self) -> InvertedIndex:
        return self._inverted_index

    @property
    def ranking(self) -> RankingConfig:
        return self.settings.ranking

    @property
    def snippet_config(self) -> SnippetConfig:
        return self.settings.snippet

    def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Return ranked results; ``limit`` defaults to ``settings.default_limit``."""
        effective_limit = self.settings.default_limit if limit is None else limit
        with (
            track_latency(SEARCH_LATENCY, site=self.site),
            create_span(
                "docsite.search",
                attributes={"site": self.site, "limit": effective_limit},
                site=self.site,
            ) as span,
        ):
            results = self._query_engine.search(query, effective_limit)
            span.set_attribute("results", len(results))
            logger.debug("Query %r returned %d results", query, len(results))

        SEARCH_QUERIES.labels(site=self.site, outcome="hit" if results else "empty").inc()
        return results

    def search_all(self, query: str) -> list[SearchResult]:
        """Return every matching entry, unbounded."""
        return self._query_engine.search(query, None)

    def snippet(self, result: SearchResult, max_length: int | None = None) -> Snippet:
        """Excerpt of the result's body text with highlight ranges."""
        length = self.snippet_config.max_length if max_length is None else max_length
        return snippet_for_result(result, length)

    def search_response(
        self,
        query: str,
        limit: int | None = None,
        *,
        snippet_length: int | None = None,
        style: str | None = None,
        base_url: str | None = None,
    ) -> SearchResponse:
        """Search and package results for JSON output.

        ``style`` adds a rendered snippet ("plain" or "html"); ``base_url``
        resolves locations into absolute links.
        """
        hits: list[SearchHit] = []
        for result in self.search(query, limit):
            snippet = self.snippet(result, snippet_length)
            location = urljoin(base_url, result.entry.location) if base_url else result.entry.location
            hits.append(
                SearchHit(
                    location=location,
                    page=result.entry.page,
                    title=result.entry.title,
                    category=result.entry.category.tag,
                    score=result.score,
                    snippet=snippet.text,
                    highlights=[HighlightSpan(start=span.start, end=span.end) for span in snippet.highlights],
                    rendered_snippet=render_snippet(snippet, style) if style else None,
                )
            )
        return SearchResponse(query=query, results=hits)

    def stats(self) -> IndexStats:
        categories = Counter(entry.category.tag for entry in self._index)
        return IndexStats(
            site=self.site,
            entries=len(self._index),
            distinct_tokens=len(self._inverted_index),
            total_tokens=self._inverted_index.total_tokens,
            categories=dict(sorted(categories.items())),
            pages=len({entry.page_path for entry in self._index}),
        )

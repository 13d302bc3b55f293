"""Pydantic models for serialized search responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HighlightSpan(BaseModel):
    """Half-open character range of ``SearchHit.snippet`` to highlight."""

    start: int = Field(ge=0)
    end: int = Field(ge=0)


class SearchHit(BaseModel):
    """Individual search result item.

    Fields:
        location: Locator of the entry, resolved against a base URL when one is given
        page: Name of the containing page
        title: Display title of the entry
        category: Category tag ("" when uncategorized)
        score: Relevance score (non-negative, higher is better)
        snippet: Excerpt of the entry body text
        highlights: Ranges of ``snippet`` matching the query
        rendered_snippet: Snippet with highlight markup applied, when requested

    Example:
        {
            "location": "colormaps.html#Colors.colormap",
            "page": "Colormaps",
            "title": "Colors.colormap",
            "category": "function",
            "score": 8.5,
            "snippet": "colormap(cname, N=100; mid=0.5, logscale=false, kvs...)…",
            "highlights": [{"start": 0, "end": 8}]
        }
    """

    location: str = Field(description="Entry locator (page path plus optional fragment)")
    page: str = Field(description="Containing page name")
    title: str = Field(description="Entry display title")
    category: str = Field(description="Category tag")
    score: float = Field(ge=0.0, description="Relevance score")
    snippet: str = Field(default="", description="Excerpt of the entry body text")
    highlights: list[HighlightSpan] = Field(default_factory=list, description="Ranges of snippet to highlight")
    rendered_snippet: str | None = Field(default=None, description="Snippet with highlight markup")


class SearchResponse(BaseModel):
    """Response model for a search request.

    Fields:
        query: Original query string
        results: Ranked hits (empty on error, never null)
        error: Why the search could not run (index missing or malformed)
    """

    query: str
    results: list[SearchHit] = Field(default_factory=list)
    error: str | None = None


class IndexStats(BaseModel):
    """Summary of a loaded index."""

    site: str
    entries: int = Field(ge=0)
    distinct_tokens: int = Field(ge=0)
    total_tokens: int = Field(ge=0)
    categories: dict[str, int] = Field(default_factory=dict)
    pages: int = Field(ge=0)

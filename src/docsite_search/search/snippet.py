"""Snippet extraction with highlight ranges.

The builder is markup-agnostic: it returns raw body text plus the character
ranges a caller should highlight. ``render_snippet`` is a convenience for
callers that want ``[[term]]`` or ``<mark>term</mark>`` output.

Smart Defaults:
- Window centred on the first token (by position) matching a query token
- Falls back to the start of the text when nothing matches
- Ellipsis markers count toward ``max_length``
"""

from __future__ import annotations

from collections.abc import Sequence
import html

from docsite_search.search.analyzers import Token, get_analyzer
from docsite_search.search.models import HighlightRange, IndexEntry, SearchResult, Snippet


ELLIPSIS = "…"


def _match_span(token: Token, query_tokens: Sequence[str]) -> tuple[int, int] | None:
    """Return the source span of ``token`` matched by a query token, if any."""
    best: tuple[int, int] | None = None
    for query_token in query_tokens:
        if token.text == query_token:
            return token.start_char, token.end_char
        if best is None and token.text.startswith(query_token):
            end = token.end_char
            # Highlight only the matched prefix when source and normalized
            # text line up character for character.
            if token.end_char - token.start_char == len(token.text):
                end = token.start_char + len(query_token)
            best = (token.start_char, end)
    return best


def find_matches(text: str, query_tokens: Sequence[str]) -> list[tuple[int, int]]:
    """Return source spans of all tokens in ``text`` matching a query token."""
    if not text or not query_tokens:
        return []
    spans: list[tuple[int, int]] = []
    for token in get_analyzer()(text):
        span = _match_span(token, query_tokens)
        if span is None:
            continue
        if spans and spans[-1] == span:
            # pieces of one source word split by lowercasing
            continue
        spans.append(span)
    return spans


def _window(length: int, center: int, size: int) -> tuple[int, int]:
    start = max(0, center - size // 2)
    end = min(length, start + size)
    start = max(0, end - size)
    return start, end


def extract_window(text: str, center: int, max_length: int) -> tuple[int, int, bool, bool]:
    """Pick a ``[start, end)`` window around ``center`` honouring ``max_length``.

    Returns the window plus whether leading/trailing ellipsis markers apply.
    The window shrinks to leave room for the markers; when they do not fit
    the bare window is used instead.
    """
    length = len(text)
    if length <= max_length:
        return 0, length, False, False

    start, end = _window(length, center, max_length)
    leading, trailing = start > 0, end < length
    inner = max_length - int(leading) - int(trailing)
    if inner < 1:
        return start, end, False, False

    start, end = _window(length, center, inner)
    return start, end, start > 0, end < length


def build_snippet(entry: IndexEntry, query_tokens: Sequence[str], max_length: int) -> Snippet:
    """Extract a bounded excerpt of ``entry.text`` around the first match.

    Args:
        entry: The entry whose body text is excerpted.
        query_tokens: Normalized query tokens (see ``tokenize``).
        max_length: Maximum characters of the returned text, markers included.

    Returns:
        A ``Snippet``; empty when the entry has no text or ``max_length`` <= 0.
    """
    text = entry.text
    if not text or max_length <= 0:
        return Snippet.empty()

    spans = find_matches(text, query_tokens)
    if spans:
        first_start, first_end = spans[0]
        center = first_start + (first_end - first_start) // 2
    else:
        center = 0

    start, end, leading, trailing = extract_window(text, center, max_length)
    offset = len(ELLIPSIS) if leading else 0
    excerpt = (ELLIPSIS if leading else "") + text[start:end] + (ELLIPSIS if trailing else "")

    highlights = tuple(
        HighlightRange(span_start - start + offset, span_end - start + offset)
        for span_start, span_end in spans
        if span_start >= start and span_end <= end
    )
    return Snippet(text=excerpt, highlights=highlights)


def snippet_for_result(result: SearchResult, max_length: int) -> Snippet:
    """Build the snippet for a ranked result using the query tokens it carries."""
    return build_snippet(result.entry, result.query_tokens, max_length)


def render_snippet(snippet: Snippet, style: str = "plain", max_highlights: int | None = None) -> str:
    """Render highlight ranges as markup.

    Args:
        snippet: Snippet produced by ``build_snippet``.
        style: "plain" for [[term]] or "html" for <mark>term</mark>. HTML
            output escapes the surrounding text.
        max_highlights: Optional cap on highlighted ranges (earliest first).

    Returns:
        The rendered string.
    """
    if snippet.is_empty():
        return ""

    escape = html.escape if style == "html" else (lambda value: value)
    ranges = sorted(snippet.highlights, key=lambda span: span.start)
    if max_highlights is not None:
        ranges = ranges[:max_highlights]

    parts: list[str] = []
    cursor = 0
    for span in ranges:
        if span.start < cursor:
            continue
        parts.append(escape(snippet.text[cursor : span.start]))
        matched = escape(snippet.text[span.start : span.end])
        parts.append(f"<mark>{matched}</mark>" if style == "html" else f"[[{matched}]]")
        cursor = span.end
    parts.append(escape(snippet.text[cursor:]))
    return "".join(parts)

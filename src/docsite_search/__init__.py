"""Client-side search engine for statically generated documentation sites."""

from docsite_search.engine import DocsiteSearchEngine
from docsite_search.errors import MalformedIndexError


__all__ = ["DocsiteSearchEngine", "MalformedIndexError"]

"""Exceptions raised by the search index loader."""

from __future__ import annotations


class MalformedIndexError(ValueError):
    """Raised when raw index data cannot become a valid ``SearchIndex``.

    Covers duplicate locations, missing or non-string required fields and
    payloads that do not decode at all. Loading never yields a partial index.
    """

    def __init__(self, message: str, *, position: int | None = None, location: str | None = None) -> None:
        super().__init__(message)
        self.position = position
        self.location = location

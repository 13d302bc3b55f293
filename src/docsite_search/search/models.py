"""Search data models.

Everything here is immutable once built so a single ``SearchIndex`` and its
inverted index can be shared by any number of concurrent readers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class IndexField(str, Enum):
    """Searchable fields of an index entry, in descending scoring weight."""

    TITLE = "title"
    CATEGORY = "category"
    PAGE = "page"
    TEXT = "text"


class CategoryKind(str, Enum):
    """Category tags emitted by the documentation generator."""

    PAGE = "page"
    SECTION = "section"
    FUNCTION = "function"
    TYPE = "type"
    MODULE = "module"
    MACRO = "macro"
    CONSTANT = "constant"


_KNOWN_CATEGORIES = {kind.value: kind for kind in CategoryKind}


@dataclass(frozen=True, slots=True)
class Category:
    """Open category tag: a known ``CategoryKind`` or any other string.

    Unknown tags are kept verbatim. The empty string means "uncategorized".
    """

    tag: str

    @property
    def kind(self) -> CategoryKind | None:
        return _KNOWN_CATEGORIES.get(self.tag)

    @property
    def is_known(self) -> bool:
        return self.tag in _KNOWN_CATEGORIES

    @property
    def is_uncategorized(self) -> bool:
        return self.tag == ""

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One documentable location on the site."""

    location: str
    page: str
    title: str
    category: Category
    text: str = ""

    def field_value(self, index_field: IndexField) -> str:
        """Return the raw string stored for ``index_field``."""
        if index_field is IndexField.TITLE:
            return self.title
        if index_field is IndexField.CATEGORY:
            return self.category.tag
        if index_field is IndexField.PAGE:
            return self.page
        return self.text

    @property
    def page_path(self) -> str:
        """Locator without its in-page fragment."""
        return self.location.partition("#")[0]

    @property
    def fragment(self) -> str:
        return self.location.partition("#")[2]


@dataclass(frozen=True, slots=True)
class Posting:
    """Occurrence count of a token in one field of one entry."""

    entry_index: int
    field: IndexField
    frequency: int


@dataclass(frozen=True, slots=True)
class PostingList:
    """Postings for a single token, grouped by field.

    Each per-field tuple lists entries in index order.
    """

    token: str
    by_field: Mapping[IndexField, tuple[Posting, ...]]

    def __iter__(self) -> Iterator[Posting]:
        merged = [posting for postings in self.by_field.values() for posting in postings]
        field_order = list(IndexField)
        merged.sort(key=lambda posting: (posting.entry_index, field_order.index(posting.field)))
        return iter(merged)

    def for_field(self, index_field: IndexField) -> tuple[Posting, ...]:
        return self.by_field.get(index_field, ())

    @property
    def entry_count(self) -> int:
        return len({posting.entry_index for postings in self.by_field.values() for posting in postings})


@dataclass(frozen=True)
class SearchIndex:
    """Ordered, validated collection of index entries.

    Built once by ``load_index`` and never mutated. Original order is the
    tie-break for equally ranked results.
    """

    entries: tuple[IndexEntry, ...]
    _positions: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        positions = {entry.location: idx for idx, entry in enumerate(self.entries)}
        object.__setattr__(self, "_positions", MappingProxyType(positions))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.entries)

    def __getitem__(self, position: int) -> IndexEntry:
        return self.entries[position]

    def __contains__(self, location: object) -> bool:
        return location in self._positions

    def position_of(self, location: str) -> int | None:
        """Return the index position for ``location`` or None."""
        return self._positions.get(location)

    def get(self, location: str) -> IndexEntry | None:
        position = self._positions.get(location)
        if position is None:
            return None
        return self.entries[position]


@dataclass(frozen=True, slots=True)
class HighlightRange:
    """Half-open ``[start, end)`` span of a snippet to render highlighted."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class Snippet:
    """Excerpt of an entry's body text with match positions."""

    text: str = ""
    highlights: tuple[HighlightRange, ...] = ()

    @classmethod
    def empty(cls) -> Snippet:
        return cls()

    def is_empty(self) -> bool:
        return not self.text

    def highlighted_terms(self) -> list[str]:
        return [self.text[span.start : span.end] for span in self.highlights]


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A ranked entry together with the query tokens that produced it."""

    entry: IndexEntry
    entry_index: int
    score: float
    query_tokens: tuple[str, ...] = ()
    snippet: Snippet | None = None

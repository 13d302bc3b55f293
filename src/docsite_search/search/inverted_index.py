"""Token -> postings mapping built once from a ``SearchIndex``."""

from __future__ import annotations

from bisect import bisect_left
from collections import Counter, defaultdict
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from docsite_search.search.analyzers import Analyzer, get_analyzer
from docsite_search.search.models import IndexField, Posting, PostingList, SearchIndex


@dataclass(frozen=True)
class InvertedIndex:
    """Read-only token lookup with sorted vocabulary for prefix expansion."""

    postings: Mapping[str, PostingList]
    vocabulary: tuple[str, ...]
    total_tokens: int

    def __len__(self) -> int:
        return len(self.vocabulary)

    def __contains__(self, token: object) -> bool:
        return token in self.postings

    def lookup(self, token: str) -> PostingList | None:
        return self.postings.get(token)

    def prefix_matches(self, prefix: str) -> Iterator[str]:
        """Yield vocabulary tokens starting with ``prefix`` (including itself)."""
        if not prefix:
            return
        start = bisect_left(self.vocabulary, prefix)
        for token in self.vocabulary[start:]:
            if not token.startswith(prefix):
                break
            yield token


def build_inverted_index(index: SearchIndex, analyzer: Analyzer | None = None) -> InvertedIndex:
    """Tokenize every field of every entry and collect per-field frequencies.

    Entries are visited in index order, so each per-field posting tuple is
    already sorted by entry position.
    """
    analyze = analyzer or get_analyzer()
    grouped: dict[str, dict[IndexField, list[Posting]]] = defaultdict(lambda: defaultdict(list))
    total_tokens = 0

    for entry_index, entry in enumerate(index):
        for index_field in IndexField:
            terms = [token.text for token in analyze(entry.field_value(index_field))]
            total_tokens += len(terms)
            for term, frequency in Counter(terms).items():
                grouped[term][index_field].append(Posting(entry_index, index_field, frequency))

    postings = {
        term: PostingList(
            token=term,
            by_field=MappingProxyType(
                {index_field: tuple(by_field[index_field]) for index_field in IndexField if index_field in by_field}
            ),
        )
        for term, by_field in grouped.items()
    }
    return InvertedIndex(
        postings=MappingProxyType(postings),
        vocabulary=tuple(sorted(postings)),
        total_tokens=total_tokens,
    )

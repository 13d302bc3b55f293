"""Multi-field relevance scoring over an ``InvertedIndex``.

The engine is an OR across query tokens: an entry only has to match one
token to be eligible, and each further matched token adds to its score.
For every query token, each (entry, field) pair contributes its single best
candidate::

    weight(field) * match_kind * tf_weight(frequency)

``match_kind`` is the exact-match weight when the index token equals the
query token and the (smaller) prefix weight when it only starts with it.
``tf_weight`` saturates like the BM25 term component so that repetition in
long body text cannot outweigh a title hit.

Set ``RankingConfig.term_frequency_saturation`` to None to score with the raw
frequency instead.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
import heapq

from docsite_search.config import RankingConfig
from docsite_search.search.analyzers import tokenize
from docsite_search.search.inverted_index import InvertedIndex
from docsite_search.search.models import IndexField, SearchIndex, SearchResult


def saturate_frequency(frequency: int, k1: float | None) -> float:
    """Return the term-frequency component of the score.

    With ``k1`` set, ``tf * (k1 + 1) / (tf + k1)``: 1.0 for a single
    occurrence, approaching ``k1 + 1``. With ``k1`` None, the raw frequency.
    """
    if frequency <= 0:
        return 0.0
    if k1 is None:
        return float(frequency)
    return (frequency * (k1 + 1)) / (frequency + k1)


def unique_query_tokens(query: str) -> tuple[str, ...]:
    """Tokenize ``query`` keeping only the first occurrence of each token."""
    seen: set[str] = set()
    ordered: list[str] = []
    for token in tokenize(query):
        if token in seen:
            continue
        seen.add(token)
        ordered.append(token)
    return tuple(ordered)


@dataclass(frozen=True)
class TermMatch:
    """An index token selected for a query token, with its match weight."""

    query_token: str
    index_token: str
    weight: float

    @property
    def is_exact(self) -> bool:
        return self.query_token == self.index_token


def _rank_key(item: tuple[int, float]) -> tuple[float, int]:
    entry_index, score = item
    return (-score, entry_index)


class QueryEngine:
    """Rank ``SearchIndex`` entries for free-text queries.

    Holds only read-only references, so one instance serves concurrent
    callers without locking.
    """

    def __init__(
        self,
        index: SearchIndex,
        inverted_index: InvertedIndex,
        config: RankingConfig | None = None,
    ) -> None:
        self.index = index
        self.inverted_index = inverted_index
        self.config = config or RankingConfig()
        self._field_weights = self.config.weights.as_mapping()

    def expand(self, query_token: str) -> list[TermMatch]:
        """Return the exact match (if indexed) followed by prefix matches."""
        matches: list[TermMatch] = []
        if query_token in self.inverted_index:
            matches.append(TermMatch(query_token, query_token, self.config.exact_match_weight))
        if len(query_token) < self.config.min_prefix_length or self.config.prefix_match_weight <= 0:
            return matches
        matches.extend(
            TermMatch(query_token, index_token, self.config.prefix_match_weight)
            for index_token in self.inverted_index.prefix_matches(query_token)
            if index_token != query_token
        )
        return matches

    def score_entries(self, query_tokens: Sequence[str]) -> dict[int, float]:
        """Return accumulated scores keyed by entry position (zero scores omitted)."""
        scores: dict[int, float] = defaultdict(float)
        k1 = self.config.term_frequency_saturation

        for query_token in query_tokens:
            best: dict[tuple[int, IndexField], float] = {}
            for match in self.expand(query_token):
                posting_list = self.inverted_index.lookup(match.index_token)
                if posting_list is None:
                    continue
                for index_field, postings in posting_list.by_field.items():
                    field_weight = self._field_weights[index_field]
                    if field_weight <= 0:
                        continue
                    for posting in postings:
                        contribution = field_weight * match.weight * saturate_frequency(posting.frequency, k1)
                        key = (posting.entry_index, index_field)
                        if contribution > best.get(key, 0.0):
                            best[key] = contribution
            for (entry_index, _index_field), contribution in best.items():
                scores[entry_index] += contribution

        return {entry_index: score for entry_index, score in scores.items() if score > 0}

    def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Return at most ``limit`` results by descending score.

        Ties keep original index order. ``limit=None`` is unbounded; an
        empty or punctuation-only query yields no results.
        """
        if limit is not None and limit <= 0:
            return []
        query_tokens = unique_query_tokens(query)
        if not query_tokens:
            return []

        scores = self.score_entries(query_tokens)
        if limit is not None and limit < len(scores):
            ranked = heapq.nsmallest(limit, scores.items(), key=_rank_key)
        else:
            ranked = sorted(scores.items(), key=_rank_key)

        return [
            SearchResult(
                entry=self.index[entry_index],
                entry_index=entry_index,
                score=score,
                query_tokens=query_tokens,
            )
            for entry_index, score in ranked
        ]


def search(
    index: SearchIndex,
    inverted_index: InvertedIndex,
    query: str,
    limit: int | None = None,
    *,
    config: RankingConfig | None = None,
) -> list[SearchResult]:
    """Functional form of ``QueryEngine.search``."""
    return QueryEngine(index, inverted_index, config).search(query, limit)

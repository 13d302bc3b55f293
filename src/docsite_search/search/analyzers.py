"""Text analysis shared by index building, querying and snippets.

A tokenizer splits raw text into word tokens that remember where they came
from in the source string; filters then normalize them. The same analyzer
runs over every entry field and over the query, so index terms and query
terms always agree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
import re
from typing import Protocol


# Runs of letters and digits. ``_`` is a separator, so ``weighted_color_mean``
# yields three tokens.
WORD_PATTERN = r"[^\W_]+"

_WORD_RE = re.compile(WORD_PATTERN)


@dataclass(frozen=True, slots=True)
class Token:
    """A normalized word plus its ``[start_char, end_char)`` span in the source."""

    text: str
    position: int
    start_char: int
    end_char: int

    @property
    def span(self) -> tuple[int, int]:
        return self.start_char, self.end_char

    def with_text(self, text: str) -> Token:
        return replace(self, text=text)


class Analyzer(Protocol):
    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


Tokenizer = Callable[[str], Iterable[Token]]
TokenFilter = Callable[[Iterable[Token]], Iterable[Token]]


class RegexTokenizer:
    """Emit every regex match as a token, numbered in source order."""

    def __init__(self, pattern: str = WORD_PATTERN) -> None:
        self.pattern = re.compile(pattern)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(match.group(0), position, match.start(), match.end())


class LowercaseFilter:
    """Lowercase token text.

    A few characters lowercase into a letter followed by a combining mark
    (``"İ".lower()``). Those tokens are split again on the word pattern so
    re-tokenizing the output changes nothing; every piece keeps the source
    span of the original word.
    """

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            lowered = token.text.lower()
            if lowered == token.text:
                yield token
            elif _WORD_RE.fullmatch(lowered):
                yield token.with_text(lowered)
            else:
                yield from (token.with_text(piece) for piece in _WORD_RE.findall(lowered))


class MinLengthFilter:
    def __init__(self, min_length: int = 1) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        return (token for token in tokens if len(token.text) >= self.min_length)


class AnalyzerPipeline:
    """Tokenizer followed by filters; positions are renumbered at the end."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] = ()) -> None:
        self.tokenizer = tokenizer
        self.filters = tuple(filters)

    def __call__(self, text: str) -> list[Token]:
        stream = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return [replace(token, position=position) for position, token in enumerate(stream)]


class DocsiteAnalyzer:
    """Word split and lowercase, nothing else.

    No stopwords and no stemming: titles are mostly symbol names, and
    repeated words must survive because they drive term frequency.
    """

    def __init__(self) -> None:
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), (LowercaseFilter(), MinLengthFilter(1)))

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text) if text else []


_DEFAULT_ANALYZER = DocsiteAnalyzer()


def get_analyzer() -> Analyzer:
    """Return the shared default analyzer (it holds no mutable state)."""
    return _DEFAULT_ANALYZER


def tokenize(text: str) -> list[str]:
    """Normalize ``text`` into its ordered token strings.

    Total for any input: characters that are not letters or digits only
    separate tokens.
    """
    return [token.text for token in _DEFAULT_ANALYZER(text)]

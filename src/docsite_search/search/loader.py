"""Load and validate raw index records into a ``SearchIndex``.

Records come either as already-decoded mappings or as the text of the
generated index file, which is a JavaScript assignment of the form::

    var documenterSearchIndex = {"docs": [ {...}, {...}, ]}

The JavaScript flavour is not strict JSON (trailing commas, ``\\'`` escapes),
so it is normalized before decoding with orjson.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from pathlib import Path
import re
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from docsite_search.errors import MalformedIndexError
from docsite_search.search.models import Category, IndexEntry, SearchIndex


logger = logging.getLogger(__name__)

_JS_ASSIGNMENT_RE = re.compile(r"^\s*(?:var|let|const)\s+[\w$]+\s*=\s*", re.UNICODE)
# A JSON string literal, or a comma that only precedes a closing bracket.
_LENIENT_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|,(?=\s*[\]}])', re.DOTALL)
_STRING_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


class RawIndexRecord(BaseModel):
    """Boundary validation for one raw index record."""

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)

    location: str
    page: str
    title: str
    category: str
    text: str = ""

    @field_validator("text", mode="before")
    @classmethod
    def _null_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_entry(self) -> IndexEntry:
        return IndexEntry(
            location=self.location,
            page=self.page,
            title=self.title,
            category=Category(self.category),
            text=self.text,
        )


def _describe_validation_error(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        name = ".".join(str(part) for part in error.get("loc", ())) or "record"
        if error.get("type") == "missing":
            problems.append(f"missing required field '{name}'")
        else:
            problems.append(f"field '{name}': {error.get('msg', 'invalid value')}")
    return "; ".join(problems)


def _validate_record(raw: Any, position: int) -> IndexEntry:
    if not isinstance(raw, Mapping):
        raise MalformedIndexError(
            f"Index record #{position} is {type(raw).__name__}, expected an object",
            position=position,
        )
    try:
        record = RawIndexRecord.model_validate(dict(raw))
    except ValidationError as exc:
        location = raw.get("location") if isinstance(raw.get("location"), str) else None
        raise MalformedIndexError(
            f"Index record #{position} is malformed: {_describe_validation_error(exc)}",
            position=position,
            location=location,
        ) from exc
    return record.to_entry()


def load_index(records: Iterable[Mapping[str, Any]]) -> SearchIndex:
    """Validate raw records and return them as an ordered ``SearchIndex``.

    Raises:
        MalformedIndexError: a required field is missing or not a string, or
            two records share a ``location``.
    """
    entries: list[IndexEntry] = []
    seen: dict[str, int] = {}
    for position, raw in enumerate(records):
        entry = _validate_record(raw, position)
        first = seen.get(entry.location)
        if first is not None:
            raise MalformedIndexError(
                f"Duplicate location '{entry.location}' at records #{first} and #{position}",
                position=position,
                location=entry.location,
            )
        seen[entry.location] = position
        entries.append(entry)

    logger.debug("Validated %d index records", len(entries))
    return SearchIndex(tuple(entries))


def _unescape_js_string(literal: str) -> str:
    def replace(match: re.Match[str]) -> str:
        if match.group(1) == "'":
            return "'"
        return match.group(0)

    return _STRING_ESCAPE_RE.sub(replace, literal)


def _normalize_javascript(payload: str) -> str:
    body = _JS_ASSIGNMENT_RE.sub("", payload, count=1).strip()
    body = body.removesuffix(";").rstrip()

    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith('"'):
            return _unescape_js_string(token)
        return ""

    return _LENIENT_TOKEN_RE.sub(replace, body)


def parse_index_payload(payload: str | bytes) -> list[Any]:
    """Decode index file contents into the list of raw records.

    Accepts plain JSON (a list, or an object with a ``docs`` list) as well as
    the generated ``var documenterSearchIndex = {...}`` script.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedIndexError(f"Index payload is not UTF-8: {exc}") from exc

    try:
        data = orjson.loads(_normalize_javascript(payload))
    except orjson.JSONDecodeError as exc:
        raise MalformedIndexError(f"Index payload could not be decoded: {exc}") from exc

    if isinstance(data, Mapping):
        docs = data.get("docs")
        if not isinstance(docs, list):
            raise MalformedIndexError("Index payload object has no 'docs' array")
        return docs
    if isinstance(data, list):
        return data
    raise MalformedIndexError(f"Index payload is {type(data).__name__}, expected an array or object")


def load_index_file(path: str | Path) -> SearchIndex:
    """Read an index file from disk and validate it."""
    index_path = Path(path)
    payload = index_path.read_text(encoding="utf-8-sig")
    index = load_index(parse_index_payload(payload))
    logger.info("Loaded %d index entries from %s", len(index), index_path)
    return index

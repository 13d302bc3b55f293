"""Command line interface for querying a documentation search index."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import json
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from docsite_search.config import Settings
from docsite_search.engine import DocsiteSearchEngine
from docsite_search.errors import MalformedIndexError
from docsite_search.models import SearchResponse
from docsite_search.observability import configure_logging
from docsite_search.viewport import fit_vector_image


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsite-search",
        description="Query a documentation site's precomputed search index",
    )
    parser.add_argument(
        "--log-level",
        help="Override the configured log level (debug, info, warning, error, critical)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Run a query and print ranked results as JSON")
    search_parser.add_argument("index", type=Path, help="Path to the search index file (.js or .json)")
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument("--limit", type=int, help="Maximum results (default: configured default_limit)")
    search_parser.add_argument("--snippet-length", type=int, help="Maximum snippet characters")
    search_parser.add_argument(
        "--style",
        choices=("plain", "html"),
        help="Also emit snippets with highlight markup in this style",
    )
    search_parser.add_argument("--base-url", help="Resolve result locations against this URL")

    stats_parser = subparsers.add_parser("stats", help="Print index statistics as JSON")
    stats_parser.add_argument("index", type=Path, help="Path to the search index file (.js or .json)")

    fit_parser = subparsers.add_parser("fit-image", help="Compute the displayed size of a vector image")
    fit_parser.add_argument("container_width", type=float, help="Container content width in px")
    fit_parser.add_argument("width", type=float, help="Intrinsic image width")
    fit_parser.add_argument("height", type=float, help="Intrinsic image height")
    return parser


def _validate_args(args: argparse.Namespace) -> None:
    if getattr(args, "limit", None) is not None and args.limit < 0:
        raise ValueError("--limit must be >= 0")
    if getattr(args, "snippet_length", None) is not None and args.snippet_length < 0:
        raise ValueError("--snippet-length must be >= 0")


def _write_json(payload: str) -> None:
    sys.stdout.write(payload + "\n")


def _run_search(args: argparse.Namespace, settings: Settings) -> int:
    engine = DocsiteSearchEngine.from_file(args.index, settings)
    response = engine.search_response(
        args.query,
        args.limit,
        snippet_length=args.snippet_length,
        style=args.style,
        base_url=args.base_url,
    )
    _write_json(response.model_dump_json(exclude_none=True))
    return 0


def _report_search_error(args: argparse.Namespace, message: str) -> None:
    """Keep stdout a valid SearchResponse when a search cannot run."""
    if args.command == "search":
        _write_json(SearchResponse(query=args.query, error=message).model_dump_json(exclude_none=True))


def _run_stats(args: argparse.Namespace, settings: Settings) -> int:
    engine = DocsiteSearchEngine.from_file(args.index, settings)
    _write_json(engine.stats().model_dump_json())
    return 0


def _run_fit_image(args: argparse.Namespace) -> int:
    size = fit_vector_image(args.container_width, args.width, args.height)
    _write_json(json.dumps({"width": size.width, "height": size.height}, sort_keys=True))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        configure_logging("info", json_output=False)
        logger.error("Invalid configuration: %s", exc)
        return 1

    configure_logging(args.log_level or settings.log_level, json_output=settings.json_logs)

    try:
        _validate_args(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.command == "fit-image":
        return _run_fit_image(args)

    try:
        if args.command == "search":
            return _run_search(args, settings)
        return _run_stats(args, settings)
    except FileNotFoundError as exc:
        logger.error("Search index not found: %s", exc)
        _report_search_error(args, f"Search index not found: {args.index}")
        return 1
    except MalformedIndexError as exc:
        logger.error("Malformed search index: %s", exc)
        _report_search_error(args, f"Malformed search index: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

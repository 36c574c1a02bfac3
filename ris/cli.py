# Path: ris/cli.py
# Purpose: Command-line entrypoint for indexing directories and searching the index.
# Layer: ris.
# Details: Two commands, add_dir and search; bad invocations print the usage and exit 0.

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import AppSettings
from ris.engine import SearchEngine
from ris.errors import InvalidArgument, RisError
from ris.logging_config import setup_logging

logger = logging.getLogger(__name__)

USAGE = (
    'Run "ris <command> <path>"\n'
    "Commands:\n"
    "add_dir: Index images in a directory.\n"
    "search: Search an image into the index."
)


class _UsageError(Exception):
    """Raised instead of argparse's exit-with-status-2 behaviour."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def cmd_add_dir(args: argparse.Namespace, settings: AppSettings) -> int:
    directory = Path(args.directory)
    if not directory.is_dir():
        print("No directory given as first argument.")
        return 1

    print(f"Indexing images in {directory}")
    with SearchEngine.from_settings(settings) as engine:
        summary = engine.pipeline.index_directory(directory)
    print("Finished indexing.")
    print(
        f"Indexed {summary.count} images, skipped {summary.skipped} "
        f"({summary.duplicates} already indexed, {summary.failed} unreadable)."
    )
    return 0


def cmd_search(args: argparse.Namespace, settings: AppSettings) -> int:
    with SearchEngine.from_settings(settings) as engine:
        reports = engine.searcher.search_path(args.path, settings.max_hits)

    if not reports:
        print(f"No image files to search in {args.path}")
        return 0

    for report in reports:
        print(f"Searching for file : {report.probe}")
        if report.error is not None:
            print(f"Error: {report.error}")
        for hit in report.hits:
            print(f"{hit.score:.4f}: \t{hit.identifier}")
        print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="ris", description="Reverse image search over a local index", add_help=True)
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file (default: ris.yaml if present)")
    parser.add_argument("--index-dir", type=Path, default=None, help="Index directory (default: ./index)")
    subparsers = parser.add_subparsers(dest="command")

    p_add = subparsers.add_parser("add_dir", help="Index images in a directory")
    p_add.add_argument("directory", type=str, help="Directory containing images to index")
    p_add.add_argument("--workers", type=int, default=None, help="Indexing worker threads (default: 6)")
    p_add.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    p_add.set_defaults(func=cmd_add_dir)

    p_search = subparsers.add_parser("search", help="Search an image, or every image of a directory, in the index")
    p_search.add_argument("path", type=str, help="Query image file or directory of query images")
    p_search.add_argument("-k", "--top-k", type=int, default=None, help="Number of results per image (default: 3)")
    p_search.add_argument("--metric", type=str, default=None, help="tanimoto, euclidean or chi_square")
    p_search.set_defaults(func=cmd_search)

    return parser


def _settings_for(args: argparse.Namespace) -> AppSettings:
    settings = AppSettings.load(args.config)
    overrides = {
        "index_dir": args.index_dir,
        "workers": getattr(args, "workers", None),
        "max_hits": getattr(args, "top_k", None),
        "progress": False if getattr(args, "no_progress", False) else None,
    }
    metric = getattr(args, "metric", None)
    if metric is not None:
        overrides["search"] = {"metric": metric}
    return settings.with_overrides(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except _UsageError:
        print(USAGE)
        return 0
    if getattr(args, "command", None) is None:
        print(USAGE)
        return 0

    try:
        settings = _settings_for(args)
    except InvalidArgument as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, settings.log_file)
    try:
        return args.func(args, settings)
    except RisError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

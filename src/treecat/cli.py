"""CLI entry point for treecat: the I/O boundary."""

from __future__ import annotations

import argparse
import errno
import glob
import io
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from treecat import TreecatError
from treecat.filter import DEFAULT_EXCLUDE, DEFAULT_INCLUDE
from treecat.formatter.content import (
    DEFAULT_FORMAT,
    format_content,
    validate_format,
)
from treecat.formatter.listing import format_listing
from treecat.preset import PRESETS, get_preset_patterns
from treecat.scanner import FileRecord, ScanOptions, WalkError, cat_file, walk
from treecat.sink import StreamSink
from treecat.textdetect import Utf8Policy

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Buffered outcome of :func:`run_treecat`."""

    output: bytes
    errors: list[WalkError] = field(default_factory=list)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``treecat`` command.
    """
    parser = argparse.ArgumentParser(
        prog="treecat",
        description="Print path and content of all files recursively.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files, directories or glob patterns (default: current directory)",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        dest="list_only",
        help="List files without displaying content",
    )
    parser.add_argument(
        "-i",
        "--include",
        action="append",
        default=None,
        dest="include",
        help="Include files matching pattern (can be specified multiple times)",
    )
    parser.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=None,
        dest="exclude",
        help="Exclude files and directories matching pattern "
        "(can be specified multiple times; end with / for directories only)",
    )
    parser.add_argument(
        "-o",
        "--format",
        type=str,
        default=DEFAULT_FORMAT,
        dest="format",
        help="printf-style template applied to (path, content)",
    )
    parser.add_argument(
        "--text",
        action=argparse.BooleanOptionalAction,
        default=True,
        dest="text_only",
        help="Only display text files",
    )
    parser.add_argument(
        "--ignore-empty",
        action=argparse.BooleanOptionalAction,
        default=True,
        dest="ignore_empty",
        help="Ignore empty files",
    )
    parser.add_argument(
        "--trim-file-ending",
        action=argparse.BooleanOptionalAction,
        default=True,
        dest="trim_file_ending",
        help="Trim newlines and spaces from the end of files",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Read files on a worker pool; faster for many files, but out-of-order",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=None,
        help="Worker count for --parallel (default: executor default)",
    )
    parser.add_argument(
        "--utf8-strict",
        action="store_true",
        dest="utf8_strict",
        help="Reject a UTF-8 sequence cut off at the end of the 512-byte sample",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help="Also skip entries matched by the root .gitignore",
    )
    parser.add_argument(
        "--preset",
        type=str,
        default=None,
        help=f"Apply exclusion preset ({', '.join(sorted(PRESETS))})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log traversal and classification decisions to stderr",
    )
    return parser


def run_treecat(argv: list[str] | None = None) -> RunResult:
    """Run treecat with provided CLI args and return buffered output.

    This function does not touch stdout or stderr and is the primary
    test target for CLI behavior.

    Args:
        argv: Command-line argument list without program name.

    Returns:
        RunResult: Rendered bytes and every reported error.

    Raises:
        TreecatError: On any user-facing validation error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    buffer = io.BytesIO()
    errors = _run_with_args(args, buffer)
    return RunResult(output=buffer.getvalue(), errors=errors)


def _build_exclude_patterns(args: argparse.Namespace) -> list[str]:
    """Build exclusion patterns from ``--exclude`` and ``--preset``.

    Raises:
        TreecatError: If ``--preset`` value is invalid.
    """
    patterns: list[str] = list(args.exclude or DEFAULT_EXCLUDE)
    if not args.preset:
        return patterns

    try:
        patterns.extend(get_preset_patterns(args.preset))
    except ValueError as exc:
        raise TreecatError(str(exc)) from exc
    return patterns


def _validate_option_combinations(args: argparse.Namespace) -> None:
    """Validate option values and incompatible combinations.

    Raises:
        TreecatError: If an option value or combination is invalid.
    """
    if args.workers is not None and not args.parallel:
        raise TreecatError("--workers requires --parallel")
    if args.workers is not None and args.workers < 1:
        raise TreecatError("--workers must be a positive integer")
    if not args.list_only:
        try:
            validate_format(args.format)
        except ValueError as exc:
            raise TreecatError(str(exc)) from exc


def _build_scan_options(args: argparse.Namespace) -> ScanOptions:
    return ScanOptions(
        include=tuple(args.include or DEFAULT_INCLUDE),
        exclude=tuple(_build_exclude_patterns(args)),
        parallel=args.parallel,
        workers=args.workers,
        ignore_empty=args.ignore_empty,
        text_only=args.text_only,
        list_only=args.list_only,
        gitignore=args.gitignore,
        utf8_policy=Utf8Policy.STRICT if args.utf8_strict else Utf8Policy.PERMISSIVE,
    )


def _build_renderer(args: argparse.Namespace) -> Callable[[FileRecord], bytes]:
    if args.list_only:
        return format_listing

    def render(record: FileRecord) -> bytes:
        return format_content(record, args.format, args.trim_file_ending)

    return render


def _expand_path_argument(raw: str, errors: list[WalkError]) -> list[str]:
    """Expand one shell-style path argument into existing paths.

    Literal paths pass through when they exist. An argument matching
    nothing is recorded in *errors*.
    """
    matches = sorted(glob.glob(raw, include_hidden=True))
    if not matches:
        exc = FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), raw)
        errors.append(WalkError(Path(raw), exc, "traversal"))
    return matches


def _run_with_args(args: argparse.Namespace, stream: BinaryIO) -> list[WalkError]:
    """Run the expand/walk/emit pipeline for parsed arguments.

    Args:
        args: Parsed CLI namespace.
        stream: Binary destination for rendered records.

    Returns:
        list[WalkError]: Every traversal and file error, in report order.

    Raises:
        TreecatError: On any user-facing validation error.
    """
    _validate_option_combinations(args)
    options = _build_scan_options(args)
    sink = StreamSink(stream, _build_renderer(args))

    errors: list[WalkError] = []
    for raw in args.paths:
        for match in _expand_path_argument(raw, errors):
            path = Path(match)
            if path.is_dir():
                errors.extend(walk(path, options, sink))
            else:
                errors.extend(cat_file(path, options, sink))

    sink.flush()
    return errors


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s: %(message)s"
        )


def main() -> None:
    """Run the CLI entry point with process arguments.

    Streams records to stdout as they are accepted and reports errors on
    stderr. Exits with code 1 on user-facing errors, when any path could
    not be read, or silently when stdout is closed by its reader.
    """
    parser = build_parser()
    args = parser.parse_args()  # single parse
    _configure_logging(args.verbose)

    try:
        errors = _run_with_args(args, sys.stdout.buffer)
    except TreecatError as exc:
        sys.stderr.write(f"treecat: {exc}\n")
        sys.exit(1)
    except BrokenPipeError:
        # Reader went away (e.g. piped into head); silence the exit-time flush.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)

    for error in errors:
        sys.stderr.write(f"treecat: {error}\n")
    if errors:
        logger.debug("%d path(s) could not be read", len(errors))
        sys.exit(1)

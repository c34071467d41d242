"""Tree walker: depth-first traversal, pruning, and per-file dispatch.

Directory enumeration always runs on the calling thread. Only the
per-file step (open, sample, classify, read) may run on a worker pool.
In parallel mode files are emitted as soon as they are read, so output
is fast but out-of-order.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pathspec import GitIgnoreSpec

from treecat.filter import DEFAULT_EXCLUDE, DEFAULT_INCLUDE, PatternFilter
from treecat.gitignore import is_gitignored, load_gitignore_spec
from treecat.textdetect import SAMPLE_SIZE, Encoding, Utf8Policy, classify, is_text

if TYPE_CHECKING:
    from treecat.sink import RecordSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem entry discovered during traversal.

    Attributes:
        path: Filesystem path of the entry (root joined with ``rel_path``).
        rel_path: Root-relative path with ``/`` separators.
        name: Basename of the entry.
        is_dir: Whether the entry is a directory (symlinks are not followed).
    """

    path: Path
    rel_path: str
    name: str
    is_dir: bool


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Options controlling selection and per-file handling.

    Attributes:
        include: Patterns a file must match.
        exclude: Patterns that prune directories and reject files.
        parallel: Whether to read files on a worker pool.
        workers: Pool size in parallel mode. ``None`` uses the
            executor default.
        ignore_empty: Whether to skip zero-length files.
        text_only: Whether to classify a sample and skip binary files.
        list_only: Whether to report paths without reading content.
        gitignore: Whether the root ``.gitignore`` also excludes entries.
        utf8_policy: Treatment of truncated UTF-8 samples.
        sample_size: Number of leading bytes to classify.
    """

    include: tuple[str, ...] = tuple(DEFAULT_INCLUDE)
    exclude: tuple[str, ...] = tuple(DEFAULT_EXCLUDE)
    parallel: bool = False
    workers: int | None = None
    ignore_empty: bool = True
    text_only: bool = True
    list_only: bool = False
    gitignore: bool = False
    utf8_policy: Utf8Policy = Utf8Policy.PERMISSIVE
    sample_size: int = SAMPLE_SIZE


@dataclass(frozen=True, slots=True)
class FileRecord:
    """An accepted file, as handed to the presentation layer.

    Attributes:
        path: Filesystem path of the file.
        display_path: Path as printed (walk root argument joined with
            ``rel_path``).
        rel_path: Root-relative path with ``/`` separators.
        encoding: Classification of the leading sample, or ``None`` when
            classification was not requested.
        content: Full file content, or ``None`` in list mode.
    """

    path: Path
    display_path: str
    rel_path: str
    encoding: Encoding | None
    content: bytes | None


@dataclass(frozen=True, slots=True)
class WalkError:
    """A failure attributed to one path.

    ``kind`` is ``"traversal"`` for unreadable directories (the subtree is
    skipped) and ``"file"`` for open/stat/read failures on one file.
    """

    path: Path
    error: OSError
    kind: Literal["traversal", "file"]

    def __str__(self) -> str:
        reason = self.error.strerror or str(self.error)
        return f"{self.path}: {reason}"


def _list_dir(
    directory: Path, errors: list[WalkError]
) -> list[os.DirEntry[str]] | None:
    try:
        with os.scandir(directory) as it:
            children = list(it)
    except OSError as exc:
        logger.debug("Cannot list directory: %s", directory)
        errors.append(WalkError(directory, exc, "traversal"))
        return None
    # Sort entries by name for deterministic output
    children.sort(key=lambda e: e.name)
    return children


def iter_entries(
    root: Path,
    exclude_filter: PatternFilter,
    errors: list[WalkError],
    gitignore_spec: GitIgnoreSpec | None = None,
) -> Iterator[Entry]:
    """Yield entries under *root* in depth-first pre-order.

    Excluded directories are neither yielded nor entered. Directories that
    cannot be listed are recorded in *errors* and skipped; traversal of
    their siblings continues. The root itself is not yielded.

    Args:
        root: Directory to walk.
        exclude_filter: Patterns that prune directories.
        errors: Receives one ``WalkError`` per unreadable directory.
        gitignore_spec: Optional extra exclusion from ``.gitignore``.

    Yields:
        Entry: Files and non-pruned directories.
    """
    children = _list_dir(root, errors)
    if children is None:
        return

    # Stack items: (remaining children, parent rel_path)
    stack: list[tuple[Iterator[os.DirEntry[str]], str]] = [(iter(children), "")]

    while stack:
        remaining, rel_dir = stack[-1]
        dir_entry = next(remaining, None)
        if dir_entry is None:
            stack.pop()
            continue

        name = dir_entry.name
        try:
            is_dir = dir_entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            errors.append(WalkError(Path(dir_entry.path), exc, "traversal"))
            continue

        entry = Entry(
            path=Path(dir_entry.path),
            rel_path=f"{rel_dir}/{name}" if rel_dir else name,
            name=name,
            is_dir=is_dir,
        )

        if gitignore_spec is not None and is_gitignored(
            gitignore_spec, entry.rel_path, is_dir
        ):
            logger.debug("Gitignored: %s", entry.rel_path)
            continue

        if not is_dir:
            yield entry
            continue

        if exclude_filter.matches(entry):
            logger.debug("Pruned directory: %s", entry.rel_path)
            continue

        yield entry
        grandchildren = _list_dir(entry.path, errors)
        if grandchildren is not None:
            stack.append((iter(grandchildren), entry.rel_path))


def read_file(
    path: Path,
    options: ScanOptions,
    display_path: str | None = None,
    rel_path: str | None = None,
) -> FileRecord | None:
    """Open, sample, classify and read one file.

    Args:
        path: File to read.
        options: Per-file policy flags.
        display_path: Path as printed. Defaults to ``str(path)``.
        rel_path: Root-relative path. Defaults to the file name.

    Returns:
        FileRecord | None: The record, or ``None`` when the file is empty
        (and ``ignore_empty`` is set) or classified as binary.

    Raises:
        OSError: If the file cannot be opened, stat-ed, or read.
    """
    shown = display_path if display_path is not None else str(path)
    with path.open("rb") as fh:
        size = os.fstat(fh.fileno()).st_size
        if size == 0 and options.ignore_empty:
            logger.debug("Skipping empty file: %s", shown)
            return None

        sample = b""
        encoding: Encoding | None = None
        if options.text_only and size > 0:
            sample = fh.read(options.sample_size)
            encoding = classify(sample, len(sample) >= size, options.utf8_policy)
            if not is_text(encoding):
                logger.debug("Skipping binary file: %s", shown)
                return None
            logger.debug("Classified %s as %s", shown, encoding)

        content: bytes | None = None
        if not options.list_only:
            content = sample + fh.read()

    return FileRecord(
        path=path,
        display_path=shown,
        rel_path=rel_path if rel_path is not None else path.name,
        encoding=encoding,
        content=content,
    )


def _display_path(root: Path, rel_path: str) -> str:
    return os.path.normpath(os.path.join(root, *rel_path.split("/")))


def _read_entry(root: Path, entry: Entry, options: ScanOptions) -> FileRecord | None:
    display = _display_path(root, entry.rel_path)
    return read_file(entry.path, options, display, entry.rel_path)


def iter_selected(
    root: Path,
    options: ScanOptions,
    errors: list[WalkError],
) -> Iterator[Entry]:
    """Yield files under *root* that match include and not exclude."""
    include = PatternFilter(options.include)
    exclude = PatternFilter(options.exclude)
    gitignore_spec = load_gitignore_spec(root) if options.gitignore else None

    for entry in iter_entries(root, exclude, errors, gitignore_spec):
        if entry.is_dir:
            continue
        if include.matches(entry) and not exclude.matches(entry):
            yield entry
        else:
            logger.debug("Not selected: %s", entry.rel_path)


def walk(root: Path, options: ScanOptions, sink: RecordSink) -> list[WalkError]:
    """Walk *root* and emit every accepted file to *sink*.

    In sequential mode each file is handled before traversal continues,
    so emission order equals traversal order. In parallel mode files are
    read on a thread pool and emitted from the calling thread in
    completion order. Either way this returns only after every file has
    been handled.

    Args:
        root: Directory to walk.
        options: Selection and per-file policy.
        sink: Receives accepted files.

    Returns:
        list[WalkError]: Traversal and per-file read failures; the walk
        itself never aborts on them.

    Raises:
        OSError: If *sink* fails to write a record. The walk stops and
            pending reads are cancelled.
    """
    errors: list[WalkError] = []
    selected = iter_selected(root, options, errors)

    if not options.parallel:
        for entry in selected:
            try:
                record = _read_entry(root, entry, options)
            except OSError as exc:
                logger.debug("Cannot read %s: %s", entry.path, exc)
                errors.append(WalkError(entry.path, exc, "file"))
                continue
            if record is not None:
                sink.emit(record)
        return errors

    with ThreadPoolExecutor(
        max_workers=options.workers, thread_name_prefix="treecat"
    ) as executor:
        futures: dict[Future[FileRecord | None], Entry] = {
            executor.submit(_read_entry, root, entry, options): entry
            for entry in selected
        }
        try:
            for future in as_completed(futures):
                entry = futures[future]
                try:
                    record = future.result()
                except OSError as exc:
                    logger.debug("Cannot read %s: %s", entry.path, exc)
                    errors.append(WalkError(entry.path, exc, "file"))
                    continue
                if record is not None:
                    sink.emit(record)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
    return errors


def cat_file(path: Path, options: ScanOptions, sink: RecordSink) -> list[WalkError]:
    """Handle one explicitly named file, without pattern filtering."""
    try:
        record = read_file(path, options, str(path), path.name)
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return [WalkError(path, exc, "file")]
    if record is not None:
        sink.emit(record)
    return []

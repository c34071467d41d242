"""Root .gitignore support for the walker, compiled with pathspec."""

from __future__ import annotations

import logging
from pathlib import Path

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)


def load_gitignore_spec(root: Path) -> GitIgnoreSpec | None:
    """Compile the walk root's ``.gitignore``, if there is a usable one.

    Only the file directly under *root* is consulted; nested ``.gitignore``
    files are not. A leading UTF-8 BOM is dropped, as git does.

    Returns:
        The compiled spec, or ``None`` when the file is absent, unreadable
        or not UTF-8.
    """
    source = root / ".gitignore"
    try:
        raw = source.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.debug("Ignoring unreadable %s: %s", source, exc)
        return None

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("Ignoring non-UTF-8 %s", source)
        return None
    return GitIgnoreSpec.from_lines(text.splitlines())


def is_gitignored(spec: GitIgnoreSpec, rel_path: str, is_dir: bool) -> bool:
    """Return whether a root-relative path is ignored by *spec*.

    Directories are matched with a trailing ``/`` so that directory-only
    gitignore rules apply to them.
    """
    return spec.match_file(rel_path + "/" if is_dir else rel_path)

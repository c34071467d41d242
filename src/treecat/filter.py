"""Entry filtering: glob patterns with directory-only and root-anchored forms.

Pattern syntax
--------------
Patterns are shell-style globs (``*``, ``?``, ``[...]``) with two
structural modifiers:

- a trailing ``/`` restricts the pattern to directories (``node_modules/``);
- a leading ``/`` anchors the pattern to the walk root and skips the
  base-name check (``/dist/**``).

Unanchored patterns are first compared with the entry's base name, then
with its root-relative path. In path comparisons ``**`` crosses ``/``
boundaries while ``*`` and ``?`` do not.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from functools import lru_cache
from typing import Final, Protocol

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE: Final[list[str]] = ["*"]
# The empty pattern never matches a non-empty name, so it excludes nothing.
DEFAULT_EXCLUDE: Final[list[str]] = [""]


class PatternError(ValueError):
    """Raised by :func:`translate` for malformed glob syntax."""


class PathEntry(Protocol):
    """Anything carrying the fields pattern matching needs."""

    @property
    def rel_path(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def is_dir(self) -> bool: ...


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a ``[...]`` class whose body starts at ``start``.

    Returns:
        tuple[str, int]: Regex class and index just past the closing ``]``.

    Raises:
        PatternError: If the class is empty, unterminated, or has a
            reversed range.
    """
    i, n = start, len(pattern)
    negate = i < n and pattern[i] in "!^"
    if negate:
        i += 1

    items: list[str] = []
    while True:
        if i >= n:
            raise PatternError(f"unterminated character class in {pattern!r}")
        c = pattern[i]
        if c == "]" and items:
            i += 1
            break
        if c == "\\":
            i += 1
            if i >= n:
                raise PatternError(f"trailing escape in {pattern!r}")
            c = pattern[i]
        elif c == "]":
            raise PatternError(f"empty character class in {pattern!r}")
        i += 1

        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi = pattern[i + 1]
            i += 2
            if hi == "\\":
                if i >= n:
                    raise PatternError(f"trailing escape in {pattern!r}")
                hi = pattern[i]
                i += 1
            if hi < c:
                raise PatternError(f"reversed range {c}-{hi} in {pattern!r}")
            items.append(f"{re.escape(c)}-{re.escape(hi)}")
        else:
            items.append(re.escape(c))

    body = "".join(items)
    # Classes never match the path separator.
    if negate:
        return f"[^/{body}]", i
    return f"(?!/)[{body}]", i


def translate(pattern: str, *, recursive: bool = False) -> str:
    """Translate a glob pattern into a regular expression.

    Args:
        pattern: Glob pattern.
        recursive: Whether ``**`` may cross ``/`` boundaries. A ``**/``
            segment then also matches zero leading directories.

    Returns:
        str: Regex source suitable for ``fullmatch``.

    Raises:
        PatternError: If the pattern is malformed.
    """
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        seg_start = i == 0 or pattern[i - 1] == "/"
        i += 1
        if c == "*":
            if recursive and i < n and pattern[i] == "*":
                while i < n and pattern[i] == "*":
                    i += 1
                if seg_start and i < n and pattern[i] == "/":
                    i += 1
                    parts.append("(?:.*/)?")
                else:
                    parts.append(".*")
            else:
                while i < n and pattern[i] == "*":
                    i += 1
                parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            cls, i = _translate_class(pattern, i)
            parts.append(cls)
        elif c == "\\":
            if i >= n:
                raise PatternError(f"trailing escape in {pattern!r}")
            parts.append(re.escape(pattern[i]))
            i += 1
        else:
            parts.append(re.escape(c))
    return "".join(parts)


@lru_cache(maxsize=1024)
def _compile(pattern: str, recursive: bool) -> re.Pattern[str]:
    return re.compile(translate(pattern, recursive=recursive), re.DOTALL)


def glob_match(pattern: str, text: str, *, recursive: bool = False) -> bool:
    """Return whether ``text`` matches the glob ``pattern``.

    Malformed patterns never match and never raise.
    """
    try:
        regex = _compile(pattern, recursive)
    except PatternError as exc:
        logger.debug("Ignoring malformed pattern: %s", exc)
        return False
    return regex.fullmatch(text) is not None


def matches(patterns: Iterable[str], rel_path: str, name: str, is_dir: bool) -> bool:
    """Return whether an entry matches at least one pattern.

    Args:
        patterns: Glob patterns, evaluated in order until one matches.
        rel_path: Root-relative path using ``/`` separators.
        name: Base name of the entry.
        is_dir: Whether the entry is a directory.

    Returns:
        bool: ``True`` on the first matching pattern.
    """
    for pattern in patterns:
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern[:-1]

        if pattern.startswith("/"):
            pattern = pattern[1:]
        else:
            if glob_match(pattern, name):
                return True
            # Bare directory names match at any depth.
            if is_dir and not pattern.startswith("*"):
                pattern = "**/" + pattern

        if glob_match(pattern, rel_path, recursive=True):
            return True
    return False


class PatternFilter:
    """Immutable, ordered set of glob patterns.

    Used for both ``--include`` and ``--exclude``. An empty set matches
    nothing.
    """

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        """Initialize pattern filter.

        Args:
            patterns: Optional glob pattern list.
        """
        self._patterns: tuple[str, ...] = tuple(patterns) if patterns else ()

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def matches(self, entry: PathEntry) -> bool:
        """Return whether ``entry`` matches any configured pattern."""
        return matches(self._patterns, entry.rel_path, entry.name, entry.is_dir)

    def __repr__(self) -> str:
        return f"PatternFilter({list(self._patterns)!r})"

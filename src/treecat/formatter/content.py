"""Path-and-content output formatter."""

from __future__ import annotations

from typing import Final

from treecat.scanner import FileRecord

# printf-style template: path, then content.
DEFAULT_FORMAT: Final[str] = "%s\n---\n%s\n---\n\n"

_TRAILING_BYTES: Final[bytes] = b"\n "


def trim_file_ending(content: bytes) -> bytes:
    """Strip trailing newlines and spaces."""
    return content.rstrip(_TRAILING_BYTES)


def validate_format(fmt: str) -> None:
    """Check that *fmt* takes exactly two string fields.

    Raises:
        ValueError: If the template cannot be applied to ``(path, content)``.
    """
    try:
        fmt % ("", "")
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid format {fmt!r}: {exc}") from exc


def format_content(
    record: FileRecord,
    fmt: str = DEFAULT_FORMAT,
    trim: bool = True,
) -> bytes:
    """Render a record through the printf-style template.

    Content bytes pass through unchanged: they are decoded with
    ``surrogateescape`` for templating and encoded back the same way,
    so non-UTF-8 text (UTF-16, Latin-1) is emitted as read.

    Args:
        record: Accepted file record with content.
        fmt: Template with two ``%s`` fields.
        trim: Whether to strip trailing newlines and spaces.

    Returns:
        bytes: Rendered output block.
    """
    content = record.content or b""
    if trim:
        content = trim_file_ending(content)
    text = fmt % (record.display_path, content.decode("utf-8", "surrogateescape"))
    return text.encode("utf-8", "surrogateescape")

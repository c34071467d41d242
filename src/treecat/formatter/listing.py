"""Path-only output formatter for ``--list``."""

from __future__ import annotations

from treecat.scanner import FileRecord


def format_listing(record: FileRecord) -> bytes:
    """Render a record as its display path on one line."""
    return (record.display_path + "\n").encode("utf-8", "surrogateescape")

"""Exclusion presets for common project types."""

from __future__ import annotations

from typing import Final

# Directory patterns end with "/" so they only prune directories.
PRESETS: Final[dict[str, list[str]]] = {
    "python": [
        "__pycache__/",
        ".venv/",
        "*.pyc",
        ".pytest_cache/",
        ".mypy_cache/",
        "dist/",
        "build/",
        "*.egg-info/",
    ],
    "node": [
        "node_modules/",
        ".next/",
        "dist/",
        ".cache/",
        "coverage/",
        "package-lock.json",
    ],
    "rust": [
        "target/",
        "Cargo.lock",
    ],
    "generic": [
        ".git/",
        ".hg/",
        ".svn/",
        ".DS_Store",
        "Thumbs.db",
    ],
}

# generic is always applied
_ALWAYS_APPLIED: Final[list[str]] = ["generic"]


def get_preset_patterns(name: str) -> list[str]:
    """Return exclude patterns for *name*, with ``generic`` always prepended.

    Patterns shared by both presets appear once, in first-seen order.

    Raises:
        ValueError: If ``name`` is not a known preset.
    """
    if name not in PRESETS:
        known = ", ".join(sorted(PRESETS))
        raise ValueError(f"Unknown preset '{name}'. Known presets: {known}")

    names = [*_ALWAYS_APPLIED, name]
    return list(dict.fromkeys(p for preset in names for p in PRESETS[preset]))

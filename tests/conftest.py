"""Shared fixtures for treecat tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def cat_tree(tmp_path: Path) -> Path:
    """Create the basic mixed text/binary tree.

    Structure::

        root/
        ├── a.txt        ("hello\\n")
        ├── b.bin        (00 01 02 03)
        └── vendor/
            └── c.txt
    """
    (tmp_path / "a.txt").write_bytes(b"hello\n")
    (tmp_path / "b.bin").write_bytes(b"\x00\x01\x02\x03")
    (tmp_path / "vendor").mkdir()
    (tmp_path / "vendor" / "c.txt").write_bytes(b"vendored\n")
    return tmp_path


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    """Create a small source tree with noise directories.

    Structure::

        root/
        ├── README.md
        ├── empty.py      (zero bytes)
        ├── dist/
        │   └── bundle.js
        ├── node_modules/
        │   └── pkg/
        │       └── index.js
        ├── src/
        │   ├── app.py
        │   ├── app.pyc
        │   ├── dist/
        │   │   └── keep.py
        │   └── gen/
        │       └── model.py
        └── zeta.py
    """
    (tmp_path / "README.md").write_text("readme\n")
    (tmp_path / "empty.py").write_bytes(b"")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "bundle.js").write_text("bundle\n")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js\n")
    (tmp_path / "src" / "dist").mkdir(parents=True)
    (tmp_path / "src" / "app.py").write_text("print('app')\n")
    (tmp_path / "src" / "app.pyc").write_bytes(b"\x00\xff\x00\xfe\x01")
    (tmp_path / "src" / "dist" / "keep.py").write_text("keep\n")
    (tmp_path / "src" / "gen").mkdir()
    (tmp_path / "src" / "gen" / "model.py").write_text("model\n")
    (tmp_path / "zeta.py").write_text("zeta\n")
    return tmp_path

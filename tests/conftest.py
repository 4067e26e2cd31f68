"""Shared fixtures for copy tests."""

from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING

import pytest

from copyfs.sources.memory import MemoryTree

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

Snapshot = dict[str, tuple[bool, int]]

SAMPLE_MANIFEST = {
    "a.txt": {"mode": 0o444, "content": "alpha\n"},
    "b.txt": {"mode": 0o444, "content": "bravo\n"},
    "c": {
        "mode": 0o555,
        "children": {
            "d.txt": {"mode": 0o444, "content": "delta\n"},
        },
    },
}


def _make_writable(root: Path) -> None:
    """Give every directory under root owner rwx so it can be removed."""
    if not root.exists():
        return
    os.chmod(root, 0o700)
    for dirpath, dirnames, _ in os.walk(root):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                os.chmod(path, 0o700)


@pytest.fixture()
def dest_dir(tmp_path: Path) -> Iterator[Path]:
    """Empty destination directory; write bits are restored on teardown."""
    dest = tmp_path / "dest"
    dest.mkdir()
    yield dest
    _make_writable(dest)


@pytest.fixture()
def source_root(tmp_path: Path) -> Iterator[Path]:
    """Empty directory for building on-disk source trees."""
    src = tmp_path / "src"
    src.mkdir()
    yield src
    _make_writable(src)


@pytest.fixture()
def sample_tree() -> MemoryTree:
    """a.txt, b.txt (0444) and c/ (0555) containing d.txt (0444)."""
    return MemoryTree.from_mapping(SAMPLE_MANIFEST)


@pytest.fixture()
def build_sample_dir() -> Callable[[Path], Path]:
    """Write the sample tree to disk under the given root."""

    def build(root: Path) -> Path:
        (root / "a.txt").write_text("alpha\n")
        (root / "b.txt").write_text("bravo\n")
        (root / "c").mkdir()
        (root / "c" / "d.txt").write_text("delta\n")
        for rel in ("a.txt", "b.txt", "c/d.txt"):
            os.chmod(root / rel, 0o444)
        os.chmod(root / "c", 0o555)
        return root

    return build


@pytest.fixture()
def snapshot() -> Callable[[Path], Snapshot]:
    """Map each path under a root to (is_dir, permission bits), without following symlinks."""

    def take(root: Path) -> Snapshot:
        result: Snapshot = {}
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                path = os.path.join(dirpath, name)
                st = os.lstat(path)
                rel = os.path.relpath(path, root).replace(os.sep, "/")
                result[rel] = (stat.S_ISDIR(st.st_mode), stat.S_IMODE(st.st_mode))
        return result

    return take

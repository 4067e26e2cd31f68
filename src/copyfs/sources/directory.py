"""SourceTree backed by a directory on the local filesystem."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from copyfs.sources.base import OpenedFile, check_name, entry_from_mode

if TYPE_CHECKING:
    from copyfs.types import DirEntry


class DirTree:
    """Read-only view of a local directory. Stats never follow symlinks."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirTree({str(self.root)!r})"

    def list_dir(self) -> list[DirEntry]:
        with os.scandir(self.root) as it:
            return [entry_from_mode(e.name, e.stat(follow_symlinks=False).st_mode) for e in it]

    def open_file(self, name: str) -> OpenedFile:
        path = self.root / check_name(name)
        stream = path.open("rb")
        try:
            entry = entry_from_mode(name, os.fstat(stream.fileno()).st_mode)
        except OSError:
            stream.close()
            raise
        return OpenedFile(entry, stream)

    def sub(self, name: str) -> DirTree:
        path = self.root / check_name(name)
        if not stat.S_ISDIR(os.lstat(path).st_mode):
            raise NotADirectoryError(f"not a directory: {path}")
        return DirTree(path)

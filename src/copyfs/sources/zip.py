"""SourceTree backed by a zip archive."""

from __future__ import annotations

import os
import stat
import zipfile
from typing import TYPE_CHECKING

from copyfs.sources.base import OpenedFile, check_name, entry_from_mode
from copyfs.types import DirEntry

if TYPE_CHECKING:
    from types import TracebackType

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


def _unix_mode(info: zipfile.ZipInfo) -> int:
    """Full st_mode for an archive member, defaulting when no Unix mode was recorded."""
    mode = info.external_attr >> 16
    if stat.S_IFMT(mode):
        return mode
    if info.is_dir():
        return stat.S_IFDIR | (mode & 0o777 or DEFAULT_DIR_MODE)
    return stat.S_IFREG | (mode & 0o777 or DEFAULT_FILE_MODE)


class _ZipIndex:
    """Directory structure of an archive: prefix -> {child name: member or None}.

    ``None`` marks a directory that only exists implicitly through its members.
    """

    def __init__(self, archive: zipfile.ZipFile) -> None:
        self.children: dict[str, dict[str, zipfile.ZipInfo | None]] = {"": {}}
        for info in archive.infolist():
            parts = [p for p in info.filename.split("/") if p]
            if not parts or any(p in (".", "..") for p in parts):
                continue
            prefix = ""
            for part in parts[:-1]:
                self.children.setdefault(prefix, {}).setdefault(part, None)
                prefix = f"{prefix}{part}/"
                self.children.setdefault(prefix, {})
            self.children.setdefault(prefix, {})[parts[-1]] = info
            if info.is_dir():
                self.children.setdefault(f"{prefix}{parts[-1]}/", {})

    def entry(self, name: str, info: zipfile.ZipInfo | None) -> DirEntry:
        if info is None:
            return DirEntry(name=name, type="directory", mode=DEFAULT_DIR_MODE)
        return entry_from_mode(name, _unix_mode(info))


class _MemberFile(OpenedFile):
    def read(self, size: int = -1, /) -> bytes:
        try:
            return super().read(size)
        except zipfile.BadZipFile as err:
            raise OSError(f"corrupt archive member {self._entry.name}: {err}") from err


class ZipTree:
    """Read-only view of a zip archive, optionally scoped to a directory inside it.

    Passing a path opens the archive and the tree owns it; passing a
    ``ZipFile`` borrows it.
    """

    def __init__(
        self,
        archive: str | os.PathLike[str] | zipfile.ZipFile,
        prefix: str = "",
        *,
        _index: _ZipIndex | None = None,
    ) -> None:
        if isinstance(archive, zipfile.ZipFile):
            self._archive = archive
            self._owned = False
        else:
            self._archive = zipfile.ZipFile(archive)
            self._owned = True
        try:
            self._index = _index or _ZipIndex(self._archive)
            stripped = prefix.strip("/")
            self.prefix = f"{stripped}/" if stripped else ""
            if self.prefix not in self._index.children:
                raise FileNotFoundError(f"no directory {self.prefix!r} in archive")
        except BaseException:
            self.close()
            raise

    def __repr__(self) -> str:
        return f"ZipTree({self._archive.filename!r}, prefix={self.prefix!r})"

    def close(self) -> None:
        if self._owned:
            self._archive.close()

    def __enter__(self) -> ZipTree:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _member(self, name: str) -> zipfile.ZipInfo | None:
        children = self._index.children[self.prefix]
        if check_name(name) not in children:
            raise FileNotFoundError(f"{self.prefix}{name}: no such entry in archive")
        return children[name]

    def list_dir(self) -> list[DirEntry]:
        return [self._index.entry(name, info) for name, info in self._index.children[self.prefix].items()]

    def open_file(self, name: str) -> OpenedFile:
        info = self._member(name)
        entry = self._index.entry(name, info)
        if info is None or entry.type != "file":
            raise IsADirectoryError(f"{self.prefix}{name}: not a regular file")
        try:
            stream = self._archive.open(info)
        except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as err:
            raise OSError(f"{self.prefix}{name}: {err}") from err
        return _MemberFile(entry, stream)

    def sub(self, name: str) -> ZipTree:
        info = self._member(name)
        if info is not None and not self._index.entry(name, info).is_dir:
            raise NotADirectoryError(f"{self.prefix}{name}: not a directory")
        return ZipTree(self._archive, f"{self.prefix}{name}", _index=self._index)

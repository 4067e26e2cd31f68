"""Helpers shared by the SourceTree implementations."""

from __future__ import annotations

import errno
import stat
from typing import IO, TYPE_CHECKING

from copyfs.infrastructure.config import PERM_MASK
from copyfs.types import DirEntry, EntryType

if TYPE_CHECKING:
    from types import TracebackType


def entry_type_from_mode(mode: int) -> EntryType:
    """Classify a full st_mode value."""
    if stat.S_ISDIR(mode):
        return "directory"
    if stat.S_ISLNK(mode):
        return "symlink"
    if stat.S_ISREG(mode):
        return "file"
    return "other"


def entry_from_mode(name: str, mode: int) -> DirEntry:
    return DirEntry(name=name, type=entry_type_from_mode(mode), mode=mode & PERM_MASK)


def check_name(name: str) -> str:
    """Reject anything that is not a single path component."""
    if not name or name in (".", "..") or "/" in name or "\x00" in name:
        raise OSError(errno.EINVAL, f"invalid entry name: {name!r}")
    return name


class OpenedFile:
    """Binary read stream paired with the entry it was opened from."""

    def __init__(self, entry: DirEntry, stream: IO[bytes]) -> None:
        self._entry = entry
        self._stream = stream

    def stat(self) -> DirEntry:
        return self._entry

    def read(self, size: int = -1, /) -> bytes:
        return self._stream.read(size)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> OpenedFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

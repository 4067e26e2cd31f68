"""Source tree domain types and the SourceTree protocol."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

EntryType = Literal["directory", "file", "symlink", "other"]


class DirEntry(BaseModel):
    """One child of a source directory. ``mode`` holds permission bits only."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: EntryType
    mode: int = Field(ge=0, le=0o777)

    @property
    def is_dir(self) -> bool:
        return self.type == "directory"

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_symlink(self) -> bool:
        return self.type == "symlink"


class CopyStats(BaseModel):
    directories: int = 0
    files: int = 0
    bytes_copied: int = 0
    skipped_symlinks: int = 0
    skipped_other: int = 0


@runtime_checkable
class SourceFile(Protocol):
    """A regular file opened for reading from a source tree."""

    def stat(self) -> DirEntry: ...
    def read(self, size: int = -1, /) -> bytes: ...
    def close(self) -> None: ...
    def __enter__(self) -> SourceFile: ...
    def __exit__(self, *exc_info: object) -> None: ...


@runtime_checkable
class SourceTree(Protocol):
    """Read-only tree of named entries.

    Implementations report failures as ``OSError``. ``sub`` returns a view
    rooted at a directory child so callers can descend without tracking
    full paths.
    """

    def list_dir(self) -> list[DirEntry]: ...
    def open_file(self, name: str) -> SourceFile: ...
    def sub(self, name: str) -> SourceTree: ...

"""Errors raised by copy_fs.

Each class is one failure kind. The OSError that caused it is kept as
``__cause__``.
"""

from __future__ import annotations

import os


class CopyError(Exception):
    """Base class for copy failures."""

    def __init__(self, message: str, path: str | os.PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.path = os.fspath(path) if path is not None else None


class DestinationInvalidError(CopyError):
    """Destination is missing, cannot be stat'ed, or is not a directory."""


class SourceReadError(CopyError):
    """A source directory could not be listed, scoped, or a source file opened."""


class DirectoryCreateError(CopyError):
    pass


class PermissionRestoreError(CopyError):
    pass


class OpenForWriteError(CopyError):
    pass


class CopyStreamError(CopyError):
    """Transfer of bytes from source to destination failed partway."""


class CloseError(CopyError):
    pass


class TreeDepthError(CopyError):
    """Source tree nests deeper than the interpreter recursion limit allows."""

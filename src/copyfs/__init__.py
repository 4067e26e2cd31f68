"""Copy read-only source trees into local directories, keeping permission bits."""

from __future__ import annotations

from .copier import copy_fs
from .errors import (
    CloseError,
    CopyError,
    CopyStreamError,
    DestinationInvalidError,
    DirectoryCreateError,
    OpenForWriteError,
    PermissionRestoreError,
    SourceReadError,
    TreeDepthError,
)
from .sources.directory import DirTree
from .sources.memory import (
    MemoryDir,
    MemoryFile,
    MemoryOther,
    MemorySymlink,
    MemoryTree,
    load_manifest,
)
from .sources.zip import ZipTree
from .types import CopyStats, DirEntry, EntryType, SourceFile, SourceTree

__all__ = [
    # copier
    "copy_fs",
    # errors
    "CloseError",
    "CopyError",
    "CopyStreamError",
    "DestinationInvalidError",
    "DirectoryCreateError",
    "OpenForWriteError",
    "PermissionRestoreError",
    "SourceReadError",
    "TreeDepthError",
    # sources
    "DirTree",
    "MemoryDir",
    "MemoryFile",
    "MemoryOther",
    "MemorySymlink",
    "MemoryTree",
    "ZipTree",
    "load_manifest",
    # types
    "CopyStats",
    "DirEntry",
    "EntryType",
    "SourceFile",
    "SourceTree",
]

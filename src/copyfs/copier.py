"""Recursive copy of a SourceTree into a local directory."""

from __future__ import annotations

import contextlib
import os
import posixpath
import shutil
import stat
import sys
from typing import TYPE_CHECKING

from copyfs.errors import (
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
from copyfs.infrastructure.config import COPY_BUFFER_SIZE, PERM_MASK, STAGING_DIR_MODE
from copyfs.infrastructure.logger import logger
from copyfs.types import CopyStats

if TYPE_CHECKING:
    from copyfs.types import SourceFile, SourceTree

# Existing files are never overwritten.
_CREATE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL


def copy_fs(dest_dir: str | os.PathLike[str], source: SourceTree) -> CopyStats:
    """Copy the contents of ``source`` into the existing directory ``dest_dir``.

    Directories and regular files are recreated with the source permission
    bits. Symlinks and other entry types are skipped. The first failure
    raises a CopyError subclass and leaves whatever was already copied on
    disk.
    """
    dest = os.fspath(dest_dir)
    try:
        dest_stat = os.lstat(dest)
    except OSError as err:
        raise DestinationInvalidError(f"cannot stat destination {dest}: {err}", dest) from err
    if not stat.S_ISDIR(dest_stat.st_mode):
        raise DestinationInvalidError(f"the destination must be a directory: {dest}", dest)

    stats = CopyStats()
    logger.info("Copying source tree", dest=dest)
    try:
        _copy_dir(dest, source, "", stats)
    except RecursionError as err:
        limit = sys.getrecursionlimit()
        logger.warning("Copy aborted", dest=dest, error="source tree too deep", recursion_limit=limit)
        msg = f"source tree nests deeper than the recursion limit ({limit}) allows"
        raise TreeDepthError(msg, dest) from err
    except CopyError as err:
        logger.warning("Copy aborted", dest=dest, path=err.path, error=str(err))
        raise
    logger.info("Copy complete", dest=dest, **stats.model_dump())
    return stats


def _display(rel: str) -> str:
    return rel or "."


def _copy_dir(dest_dir: str, source: SourceTree, rel: str, stats: CopyStats) -> None:
    try:
        entries = source.list_dir()
    except OSError as err:
        raise SourceReadError(f"reading the source directory {_display(rel)}: {err}", dest_dir) from err

    for entry in entries:
        rel_path = posixpath.join(rel, entry.name)

        if entry.is_dir:
            sub_dest = os.path.join(dest_dir, entry.name)
            try:
                os.mkdir(sub_dest, STAGING_DIR_MODE)
            except OSError as err:
                raise DirectoryCreateError(f"mkdir on {sub_dest}: {err}", sub_dest) from err

            try:
                sub_source = source.sub(entry.name)
            except OSError as err:
                raise SourceReadError(f"reading the sub directory {rel_path}: {err}", sub_dest) from err

            _copy_dir(sub_dest, sub_source, rel_path, stats)

            # Applied bottom-up, after the whole subtree is populated.
            try:
                os.chmod(sub_dest, entry.mode & PERM_MASK)
            except OSError as err:
                raise PermissionRestoreError(f"chmod on {sub_dest}: {err}", sub_dest) from err

            stats.directories += 1
            logger.debug("Copied directory", path=rel_path, mode=oct(entry.mode))

        elif entry.is_symlink:
            stats.skipped_symlinks += 1
            logger.debug("Skipping symlink", path=rel_path)

        elif entry.is_file:
            try:
                src = source.open_file(entry.name)
            except OSError as err:
                raise SourceReadError(f"opening the source file {rel_path}: {err}", dest_dir) from err
            with src:
                stats.bytes_copied += _copy_file(dest_dir, src, rel_path)
            stats.files += 1

        else:
            stats.skipped_other += 1
            logger.debug("Skipping unsupported entry", path=rel_path, type=entry.type)


def _copy_file(dest_dir: str, src: SourceFile, rel: str) -> int:
    """Copy one open source file into ``dest_dir``. Returns the number of bytes written."""
    try:
        info = src.stat()
    except OSError as err:
        raise SourceReadError(f"reading the file info of {rel}: {err}", dest_dir) from err

    dest_path = os.path.join(dest_dir, info.name)
    mode = info.mode & PERM_MASK

    try:
        fd = os.open(dest_path, _CREATE_FLAGS, mode)
    except OSError as err:
        raise OpenForWriteError(f"opening {dest_path} for writing: {err}", dest_path) from err

    # The create mode is filtered through the umask.
    try:
        os.fchmod(fd, mode)
    except OSError as err:
        with contextlib.suppress(OSError):
            os.close(fd)
        raise OpenForWriteError(f"chmod on {dest_path}: {err}", dest_path) from err

    dest = os.fdopen(fd, "wb")
    streamed = False
    try:
        shutil.copyfileobj(src, dest, COPY_BUFFER_SIZE)
        copied = dest.tell()
        streamed = True
    except OSError as err:
        raise CopyStreamError(f"copying {rel} to {dest_path}: {err}", dest_path) from err
    finally:
        if not streamed:
            with contextlib.suppress(OSError):
                dest.close()

    try:
        dest.close()
    except OSError as err:
        raise CloseError(f"closing {dest_path}: {err}", dest_path) from err

    logger.debug("Copied file", path=rel, mode=oct(mode), size=copied)
    return copied

"""Entry point: python -m copyfs SOURCE DEST"""

from __future__ import annotations

import argparse
import contextlib
import sys
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from copyfs.copier import copy_fs
from copyfs.errors import CopyError
from copyfs.infrastructure.logger import install_exception_hooks, logger
from copyfs.sources.directory import DirTree
from copyfs.sources.memory import load_manifest
from copyfs.sources.zip import ZipTree

if TYPE_CHECKING:
    from collections.abc import Sequence

    from copyfs.types import SourceTree

MANIFEST_SUFFIXES = (".yaml", ".yml")


def detect_kind(source: Path) -> str:
    """Pick a backing for SOURCE: dir, zip or manifest."""
    if source.is_dir():
        return "dir"
    if source.suffix.lower() in MANIFEST_SUFFIXES:
        return "manifest"
    if zipfile.is_zipfile(source):
        return "zip"
    raise ValueError(f"cannot tell what kind of source {source} is; pass --kind")


def open_source(source: Path, kind: str, stack: contextlib.ExitStack) -> SourceTree:
    if kind == "auto":
        kind = detect_kind(source)
    if kind == "dir":
        return DirTree(source)
    if kind == "zip":
        return stack.enter_context(ZipTree(source))
    return load_manifest(source)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copyfs",
        description="Copy a directory, zip archive or YAML manifest into an existing directory.",
    )
    parser.add_argument("source", type=Path, help="Directory, .zip archive or .yaml manifest to copy from")
    parser.add_argument("dest", type=Path, help="Existing destination directory")
    parser.add_argument(
        "--kind",
        choices=["auto", "dir", "zip", "manifest"],
        default="auto",
        help="Source backing (default: detect from SOURCE)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    with contextlib.ExitStack() as stack:
        try:
            source = open_source(args.source, args.kind, stack)
        except (OSError, ValueError, yaml.YAMLError, zipfile.BadZipFile) as err:
            logger.error("Cannot open source", source=str(args.source), error=str(err))
            return 1

        try:
            stats = copy_fs(args.dest, source)
        except CopyError as err:
            logger.error("Copy failed", error=str(err), path=err.path, cause=repr(err.__cause__))
            return 1

    logger.info(
        "Copied",
        source=str(args.source),
        dest=str(args.dest),
        directories=stats.directories,
        files=stats.files,
        bytes=stats.bytes_copied,
    )
    return 0


def run() -> None:
    install_exception_hooks()
    sys.exit(main())


if __name__ == "__main__":
    run()

"""In-process SourceTree, buildable from a mapping or a YAML manifest.

Manifest format::

    a.txt: "plain content, mode 0644"
    run.sh:
      mode: "0755"
      content: "#!/bin/sh\\n"
    c:
      mode: 0555
      children:
        d.txt: {mode: 0444, content: "..."}
    link:
      symlink: a.txt
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator, model_validator

from copyfs.sources.base import OpenedFile, check_name
from copyfs.types import DirEntry

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644
SYMLINK_MODE = 0o777


@dataclass
class MemoryFile:
    data: bytes = b""
    mode: int = DEFAULT_FILE_MODE


@dataclass
class MemorySymlink:
    target: str
    mode: int = SYMLINK_MODE


@dataclass
class MemoryOther:
    """Placeholder for a device, socket or pipe."""

    mode: int = 0o600


@dataclass
class MemoryDir:
    children: dict[str, MemoryNode] = field(default_factory=dict)
    mode: int = DEFAULT_DIR_MODE


MemoryNode = MemoryFile | MemorySymlink | MemoryOther | MemoryDir


def _node_entry(name: str, node: MemoryNode) -> DirEntry:
    if isinstance(node, MemoryDir):
        kind = "directory"
    elif isinstance(node, MemoryFile):
        kind = "file"
    elif isinstance(node, MemorySymlink):
        kind = "symlink"
    else:
        kind = "other"
    return DirEntry(name=name, type=kind, mode=node.mode)


class ManifestNode(BaseModel):
    mode: int | None = None
    content: str | None = None
    symlink: str | None = None
    children: dict[str, ManifestNode] | None = None

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"content": data}
        return data

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        # YAML 1.1 reads 0444 as octal already; strings are taken as octal too.
        if isinstance(value, str):
            text = value.strip().lower().removeprefix("0o")
            return int(text, 8)
        return value

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: int | None) -> int | None:
        if value is not None and not 0 <= value <= 0o777:
            raise ValueError(f"mode {value:o} is outside 0o777")
        return value

    @field_validator("children")
    @classmethod
    def _check_names(cls, value: dict[str, ManifestNode] | None) -> dict[str, ManifestNode] | None:
        for name in value or {}:
            try:
                check_name(name)
            except OSError as err:
                raise ValueError(err.strerror) from err
        return value

    @model_validator(mode="after")
    def _one_kind(self) -> ManifestNode:
        kinds = [k for k in ("content", "symlink", "children") if getattr(self, k) is not None]
        if len(kinds) > 1:
            raise ValueError(f"entry declares more than one of {', '.join(kinds)}")
        return self

    def build(self) -> MemoryNode:
        if self.children is not None:
            return MemoryDir(
                children={name: child.build() for name, child in self.children.items()},
                mode=self.mode if self.mode is not None else DEFAULT_DIR_MODE,
            )
        if self.symlink is not None:
            return MemorySymlink(target=self.symlink)
        return MemoryFile(
            data=(self.content or "").encode("utf-8"),
            mode=self.mode if self.mode is not None else DEFAULT_FILE_MODE,
        )


class MemoryTree:
    """Read-only view over a MemoryDir."""

    def __init__(self, root: MemoryDir) -> None:
        self.root = root

    def __repr__(self) -> str:
        return f"MemoryTree({len(self.root.children)} entries)"

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> MemoryTree:
        """Build a tree from manifest-shaped data. Raises pydantic.ValidationError."""
        manifest = ManifestNode(children=data)
        return cls(MemoryDir(children={name: child.build() for name, child in (manifest.children or {}).items()}))

    @classmethod
    def from_yaml(cls, text: str) -> MemoryTree:
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("manifest must be a mapping of entry names")
        return cls.from_mapping(data)

    def _child(self, name: str) -> MemoryNode:
        try:
            return self.root.children[check_name(name)]
        except KeyError:
            raise FileNotFoundError(f"{name}: no such entry") from None

    def list_dir(self) -> list[DirEntry]:
        return [_node_entry(name, node) for name, node in self.root.children.items()]

    def open_file(self, name: str) -> OpenedFile:
        node = self._child(name)
        if isinstance(node, MemoryDir):
            raise IsADirectoryError(f"{name}: is a directory")
        if not isinstance(node, MemoryFile):
            raise OSError(f"{name}: not a regular file")
        return OpenedFile(_node_entry(name, node), io.BytesIO(node.data))

    def sub(self, name: str) -> MemoryTree:
        node = self._child(name)
        if not isinstance(node, MemoryDir):
            raise NotADirectoryError(f"{name}: not a directory")
        return MemoryTree(node)


def load_manifest(path: str | Path) -> MemoryTree:
    """Read a YAML manifest file into a MemoryTree."""
    return MemoryTree.from_yaml(Path(path).read_text(encoding="utf-8"))

"""
Resolved content types.

Resolution produces one of two shapes:
- ArchiveFile: a named byte buffer (typically a zip)
- Directory: a named file tree

A file tree is a nested mapping of entry names to either file bytes or
another tree:

    {"hello.php": b"<?php ...", "assets": {"style.css": b"..."}}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

FileTree = dict[str, Union[bytes, "FileTree"]]


@dataclass(frozen=True, slots=True)
class ArchiveFile:
    """A named archive (or plain file) held in memory."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"ArchiveFile(name={self.name!r}, size={self.size})"


@dataclass(frozen=True, slots=True)
class Directory:
    """A named directory tree held in memory."""

    name: str
    files: FileTree = field(default_factory=dict)

    @property
    def file_count(self) -> int:
        return sum(1 for _ in iter_files(self.files))

    def __repr__(self) -> str:
        return f"Directory(name={self.name!r}, files={self.file_count})"


Content = Union[ArchiveFile, Directory]


def normalize_tree(files: Mapping[str, Any]) -> FileTree:
    """
    Coerce an inline tree into a FileTree.

    Text contents are UTF-8 encoded and keys containing ``/`` are split
    into nested directories.
    """
    tree: FileTree = {}
    for name, value in files.items():
        parts = [p for p in str(name).split("/") if p]
        if not parts:
            continue
        node = tree
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ValueError(f"{part!r} is both a file and a directory")
            node = child
        leaf = parts[-1]
        if isinstance(value, Mapping):
            existing = node.setdefault(leaf, {})
            if not isinstance(existing, dict):
                raise ValueError(f"{leaf!r} is both a file and a directory")
            existing.update(normalize_tree(value))
        elif isinstance(value, bytes):
            node[leaf] = value
        elif isinstance(value, str):
            node[leaf] = value.encode("utf-8")
        else:
            raise ValueError(f"Unsupported content for {leaf!r}: {type(value).__name__}")
    return tree


def iter_files(tree: FileTree, prefix: str = "") -> Iterator[tuple[str, bytes]]:
    """Yield (relative path, bytes) for every file in the tree."""
    for name, value in tree.items():
        path = f"{prefix}/{name}" if prefix else name
        if isinstance(value, dict):
            yield from iter_files(value, path)
        else:
            yield path, value

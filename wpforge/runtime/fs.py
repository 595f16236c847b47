"""
Host filesystem helpers.

Reads and writes in-memory file trees to real directories. Shared by the
local runtime and the persistent storage devices. The helpers are
blocking; async callers hand them to ``run_blocking``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from wpforge.errors import FilesystemError

if TYPE_CHECKING:
    from wpforge.resources.content import FileTree

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run blocking disk work in the loop's default executor."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def read_host_tree(root: Path, *, exclude: Iterable[str] = ()) -> FileTree:
    """
    Read a host directory into a file tree.

    Symlinks are skipped. Names in ``exclude`` are skipped at the top
    level only.
    """
    excluded = set(exclude)
    try:
        return _read_dir(root, excluded)
    except OSError as e:
        raise FilesystemError(f"Could not read {root}: {e}", path=str(root)) from e


def _read_dir(directory: Path, excluded: set[str]) -> FileTree:
    tree: FileTree = {}
    for entry in sorted(directory.iterdir()):
        if entry.name in excluded or entry.is_symlink():
            continue
        if entry.is_dir():
            tree[entry.name] = _read_dir(entry, set())
        else:
            tree[entry.name] = entry.read_bytes()
    return tree


def write_host_tree(root: Path, tree: FileTree, *, replace_root: bool = False) -> None:
    """Write a file tree under a host directory."""
    try:
        if replace_root and root.exists():
            remove_host_path(root)
        root.mkdir(parents=True, exist_ok=True)
        _write_dir(root, tree)
    except OSError as e:
        raise FilesystemError(f"Could not write {root}: {e}", path=str(root)) from e


def _write_dir(directory: Path, tree: FileTree) -> None:
    for name, value in tree.items():
        target = _entry_path(directory, name)
        if isinstance(value, dict):
            if target.exists() and not target.is_dir():
                target.unlink()
            target.mkdir(exist_ok=True)
            _write_dir(target, value)
        else:
            if target.is_dir():
                shutil.rmtree(target)
            target.write_bytes(value)


def mirror_host_tree(root: Path, tree: FileTree) -> None:
    """
    Make the contents of ``root`` match ``tree``.

    ``root`` itself is never removed or recreated. Entries absent from
    ``tree`` are deleted, except symlinks: ``read_host_tree`` never
    reports them, so they are left in place and nothing is written
    through them.
    """
    try:
        root.mkdir(parents=True, exist_ok=True)
        _mirror_dir(root, tree)
    except OSError as e:
        raise FilesystemError(f"Could not write {root}: {e}", path=str(root)) from e


def _mirror_dir(directory: Path, tree: FileTree) -> None:
    for entry in sorted(directory.iterdir()):
        if entry.name not in tree and not entry.is_symlink():
            remove_host_path(entry)

    for name, value in tree.items():
        target = _entry_path(directory, name)
        if target.is_symlink():
            logger.debug(f"Keeping symlink {target}")
            continue
        if isinstance(value, dict):
            if target.exists() and not target.is_dir():
                target.unlink()
            target.mkdir(exist_ok=True)
            _mirror_dir(target, value)
        else:
            if target.is_dir():
                shutil.rmtree(target)
            target.write_bytes(value)


def _entry_path(directory: Path, name: str) -> Path:
    if not name or name in (".", "..") or "/" in name:
        raise FilesystemError(f"Invalid entry name {name!r}", path=str(directory))
    return directory / name


def remove_host_path(path: Path) -> None:
    """Remove a file or directory tree; missing paths are ignored."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()

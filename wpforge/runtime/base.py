"""
Runtime protocol.

The sandboxed WordPress runtime is an external collaborator. The engine
only needs a document root, a handful of filesystem primitives, and the
activation primitives; anything implementing this protocol can be
provisioned.

All paths are absolute POSIX paths inside the runtime's filesystem.
"""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wpforge.resources.content import FileTree


@runtime_checkable
class Runtime(Protocol):
    """Protocol for provisionable runtimes."""

    @property
    def document_root(self) -> str:
        """Absolute path of the WordPress installation."""
        ...

    async def exists(self, path: str) -> bool:
        ...

    async def is_dir(self, path: str) -> bool:
        ...

    async def read_tree(self, path: str) -> FileTree:
        """Read the directory at ``path`` into a file tree."""
        ...

    async def write_tree(self, path: str, tree: FileTree, *, replace_root: bool = False) -> None:
        """
        Write ``tree`` under ``path``.

        With ``replace_root`` any existing directory at ``path`` is removed
        first; otherwise files are merged into it.
        """
        ...

    async def write_file(self, path: str, data: bytes) -> None:
        ...

    async def mkdir(self, path: str) -> None:
        ...

    async def remove(self, path: str) -> None:
        ...

    async def activate_plugin(self, plugin_path: str, plugin_name: str | None = None) -> None:
        """
        Activate the plugin at ``plugin_path`` (its directory or main file).

        Raises:
            ActivationError: The plugin could not be recognized or enabled
        """
        ...

    async def activate_theme(self, theme_folder_name: str) -> None:
        """
        Switch to the theme in ``wp-content/themes/<theme_folder_name>``.

        Raises:
            ActivationError: The theme could not be recognized or enabled
        """
        ...


def join_paths(*parts: str) -> str:
    """Join runtime path segments and normalize the result."""
    joined = posixpath.join("/", *[p for p in parts if p])
    return posixpath.normpath(joined)


def resolve_path(document_root: str, path: str) -> str:
    """Absolute paths pass through; relative ones hang off the document root."""
    if path.startswith("/"):
        return posixpath.normpath(path)
    return join_paths(document_root, path)

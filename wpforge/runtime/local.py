"""
Local directory runtime.

A Runtime backed by a plain host directory. The runtime's ``/`` maps to
``root`` on the host, so the WordPress document root ``/wordpress``
lives at ``root/wordpress``. It does not execute PHP: activation reads
the plugin/theme headers the way WordPress does and records the active
units in a JSON state file next to the document root.

Useful for preparing a WordPress tree on disk and for tests.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from wpforge.errors import ActivationError, FilesystemError

from .base import join_paths
from .fs import read_host_tree, remove_host_path, run_blocking, write_host_tree

if TYPE_CHECKING:
    from wpforge.resources.content import FileTree

logger = logging.getLogger(__name__)

STATE_FILE = ".wpforge-runtime.json"

# WordPress only scans the first 8 KiB of a file for headers
_HEADER_BYTES = 8192
_PLUGIN_HEADER = re.compile(rb"^[ \t/*#@]*Plugin Name:(.*)$", re.MULTILINE | re.IGNORECASE)
_THEME_HEADER = re.compile(rb"^[ \t/*#@]*Theme Name:(.*)$", re.MULTILINE | re.IGNORECASE)


class LocalRuntime:
    """
    Runtime operating on a host directory.

    Example:
        runtime = LocalRuntime(Path("/tmp/site"))
        await runtime.write_file("/wordpress/wp-config.php", b"<?php")
        await runtime.activate_plugin("/wordpress/wp-content/plugins/hello")
        runtime.active_plugins  # ["hello/hello.php"]
    """

    def __init__(self, root: str | Path, *, document_root: str = "/wordpress"):
        self._root = Path(root)
        self._document_root = join_paths(document_root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def document_root(self) -> str:
        return self._document_root

    @property
    def plugins_dir(self) -> str:
        return join_paths(self._document_root, "wp-content", "plugins")

    @property
    def themes_dir(self) -> str:
        return join_paths(self._document_root, "wp-content", "themes")

    def host_path(self, path: str) -> Path:
        """Map an absolute runtime path onto the host directory."""
        posix = PurePosixPath(join_paths(path))
        relative = posix.relative_to("/")
        if ".." in relative.parts:
            raise FilesystemError(f"Path escapes the runtime root: {path}", path=path)
        return self._root.joinpath(*relative.parts)

    # ==================== Filesystem ====================

    async def exists(self, path: str) -> bool:
        return await run_blocking(self.host_path(path).exists)

    async def is_dir(self, path: str) -> bool:
        return await run_blocking(self.host_path(path).is_dir)

    async def read_tree(self, path: str) -> FileTree:
        host = self.host_path(path)

        def read() -> FileTree:
            if not host.is_dir():
                raise FilesystemError(f"Not a directory: {path}", path=path)
            return read_host_tree(host)

        return await run_blocking(read)

    async def write_tree(self, path: str, tree: FileTree, *, replace_root: bool = False) -> None:
        logger.debug(f"Writing tree to {path} (replace_root={replace_root})")
        await run_blocking(write_host_tree, self.host_path(path), tree, replace_root=replace_root)

    async def write_file(self, path: str, data: bytes) -> None:
        host = self.host_path(path)

        def write() -> None:
            host.parent.mkdir(parents=True, exist_ok=True)
            host.write_bytes(data)

        try:
            await run_blocking(write)
        except OSError as e:
            raise FilesystemError(f"Could not write {path}: {e}", path=path) from e

    async def mkdir(self, path: str) -> None:
        host = self.host_path(path)
        try:
            await run_blocking(host.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not create {path}: {e}", path=path) from e

    async def remove(self, path: str) -> None:
        try:
            await run_blocking(remove_host_path, self.host_path(path))
        except OSError as e:
            raise FilesystemError(f"Could not remove {path}: {e}", path=path) from e

    # ==================== Activation ====================

    async def activate_plugin(self, plugin_path: str, plugin_name: str | None = None) -> None:
        entry = await run_blocking(self._enable_plugin, plugin_path)
        logger.info(f"Activated plugin {plugin_name or entry}")

    async def activate_theme(self, theme_folder_name: str) -> None:
        await run_blocking(self._enable_theme, theme_folder_name)
        logger.info(f"Activated theme {theme_folder_name}")

    @property
    def active_plugins(self) -> list[str]:
        return list(self._load_state()["active_plugins"])

    @property
    def active_theme(self) -> str | None:
        return self._load_state()["active_theme"]

    def _enable_plugin(self, plugin_path: str) -> str:
        host = self.host_path(plugin_path)
        if not host.exists():
            raise ActivationError(f"Plugin {plugin_path} does not exist", path=plugin_path)

        plugin_file = host if host.is_file() else _find_plugin_file(host)
        if plugin_file is None or not _has_header(plugin_file, _PLUGIN_HEADER):
            raise ActivationError(
                f"Could not find a file with a Plugin Name header in {plugin_path}",
                path=plugin_path,
            )

        state = self._load_state()
        plugins_root = self.host_path(self.plugins_dir)
        try:
            entry = plugin_file.relative_to(plugins_root).as_posix()
        except ValueError:
            entry = plugin_file.as_posix()
        if entry not in state["active_plugins"]:
            state["active_plugins"].append(entry)
        self._save_state(state)
        return entry

    def _enable_theme(self, theme_folder_name: str) -> None:
        style = self.host_path(join_paths(self.themes_dir, theme_folder_name, "style.css"))
        if not style.is_file() or not _has_header(style, _THEME_HEADER):
            raise ActivationError(
                f"Theme {theme_folder_name} has no style.css with a Theme Name header",
                path=join_paths(self.themes_dir, theme_folder_name),
            )
        state = self._load_state()
        state["active_theme"] = theme_folder_name
        self._save_state(state)

    # ==================== State ====================

    def _load_state(self) -> dict[str, Any]:
        state_file = self._root / STATE_FILE
        if not state_file.exists():
            return {"active_plugins": [], "active_theme": None}
        try:
            return json.loads(state_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise FilesystemError(f"Could not read runtime state: {e}", path=str(state_file)) from e

    def _save_state(self, state: dict[str, Any]) -> None:
        state_file = self._root / STATE_FILE
        try:
            state_file.write_text(json.dumps(state, indent=2), encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"Could not save runtime state: {e}", path=str(state_file)) from e

    def __repr__(self) -> str:
        return f"LocalRuntime(root={str(self._root)!r}, document_root={self._document_root!r})"


def _find_plugin_file(directory: Path) -> Path | None:
    for candidate in sorted(directory.glob("*.php")):
        if _has_header(candidate, _PLUGIN_HEADER):
            return candidate
    return None


def _has_header(path: Path, pattern: re.Pattern[bytes]) -> bool:
    try:
        with path.open("rb") as f:
            head = f.read(_HEADER_BYTES)
    except OSError:
        return False
    match = pattern.search(head)
    return bool(match and match.group(1).strip())

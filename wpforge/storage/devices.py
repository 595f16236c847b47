"""
Persistent storage devices.

Two device kinds back persistent sites:

- ``opfs``: a directory inside the engine's object store root
  (``<state_dir>/opfs``), created on demand.
- ``local-fs``: a host directory the user picked earlier. Its path is
  saved per site slug in a small JSON store, so a site can find its
  directory again on the next boot.

Both are opened as a DirectoryHandle.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from wpforge.errors import BootDecisionError, FilesystemError
from wpforge.runtime.fs import mirror_host_tree, read_host_tree, run_blocking, write_host_tree

from .mounts import MountDevice, MountDeviceKind

if TYPE_CHECKING:
    from wpforge.config.schemas import AppSettings
    from wpforge.resources.content import FileTree

logger = logging.getLogger(__name__)


class DirectoryHandle:
    """An opened storage directory."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def has_file(self, name: str) -> bool:
        return await run_blocking((self.path / name).is_file)

    async def read_tree(self) -> FileTree:
        return await run_blocking(read_host_tree, self.path)

    async def write_tree(self, tree: FileTree, *, replace_root: bool = False) -> None:
        await run_blocking(write_host_tree, self.path, tree, replace_root=replace_root)

    async def mirror_tree(self, tree: FileTree) -> None:
        """Make the directory match ``tree``, keeping the directory and its symlinks."""
        await run_blocking(mirror_host_tree, self.path, tree)

    def __repr__(self) -> str:
        return f"DirectoryHandle(path='{self.path}')"


class DirectoryHandleStore:
    """
    Saved local directories, keyed by site slug.

    Example:
        store = DirectoryHandleStore(Path("~/.wpforge/directory-handles.json"))
        store.save("my-site", Path("/home/me/sites/my-site"))
        handle = store.load("my-site")
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise FilesystemError(
                f"Could not read directory handles from {self.path}: {e}",
                path=str(self.path),
            ) from e
        return {k: v for k, v in data.items() if isinstance(v, str)} if isinstance(data, dict) else {}

    def save(self, slug: str, directory: str | Path) -> DirectoryHandle:
        """Remember ``directory`` as the local storage of ``slug``."""
        directory = Path(directory).expanduser().resolve()
        handles = self._read()
        handles[slug] = str(directory)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(handles, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as e:
            raise FilesystemError(
                f"Could not save directory handle for {slug}: {e}", path=str(self.path)
            ) from e
        logger.info(f"Saved directory handle for {slug}: {directory}")
        return DirectoryHandle(directory)

    def load(self, slug: str) -> DirectoryHandle:
        """
        Load the saved directory of ``slug``.

        Raises:
            BootDecisionError: No directory saved, or it is no longer accessible
        """
        location = self._read().get(slug)
        if location is None:
            raise BootDecisionError(f"No local directory saved for site '{slug}'", slug=slug)
        if not Path(location).is_dir():
            raise BootDecisionError(
                f"Local directory {location} of site '{slug}' is not accessible",
                slug=slug,
            )
        return DirectoryHandle(location)

    def forget(self, slug: str) -> None:
        handles = self._read()
        if handles.pop(slug, None) is not None:
            self.path.write_text(json.dumps(handles, indent=2, sort_keys=True), encoding="utf-8")


class MountDeviceAccessor:
    """
    Opens mount devices as directory handles.

    Example:
        devices = MountDeviceAccessor.from_settings(get_settings())
        handle = devices.open(MountDevice(kind="opfs", locator="/site-my-site"))
    """

    def __init__(self, opfs_root: str | Path, handle_store: DirectoryHandleStore):
        self.opfs_root = Path(opfs_root)
        self.handle_store = handle_store

    @classmethod
    def from_settings(cls, settings: AppSettings) -> MountDeviceAccessor:
        return cls(settings.opfs_root, DirectoryHandleStore(settings.directory_handles_file))

    def load_local_handle(self, slug: str) -> DirectoryHandle:
        return self.handle_store.load(slug)

    def open(self, device: MountDevice) -> DirectoryHandle:
        """
        Open ``device``.

        Raises:
            BootDecisionError: The device cannot be used
        """
        if device.kind == MountDeviceKind.OPFS:
            relative = PurePosixPath(device.locator.lstrip("/"))
            if not relative.parts or ".." in relative.parts:
                raise BootDecisionError(f"Invalid object store path '{device.locator}'")
            path = self.opfs_root.joinpath(*relative.parts)
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise BootDecisionError(f"Could not open object store {path}: {e}") from e
            return DirectoryHandle(path)

        path = Path(device.locator)
        if not path.is_dir():
            raise BootDecisionError(f"Local directory {device.locator} is not accessible")
        return DirectoryHandle(path)

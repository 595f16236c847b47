"""
Asset Installer.

Writes a resolved plugin or theme into the runtime filesystem.

Archives:
    The display name comes from the archive file name
    (``hello-dolly.zip`` -> ``Hello Dolly``). If the archive holds exactly
    one top-level directory, that directory becomes the install folder;
    otherwise the whole archive is installed into a folder named after the
    slugified display name. An existing folder with the same name is
    handled by the conflict policy.

Directories:
    Written to ``<target>/<name>-<random suffix>``, with the directory
    name kept as given, so repeated installs of the same resource never
    collide. Names that are empty, ``.``, ``..`` or contain ``/`` are
    rejected.

Payloads must sit at their own root. The installer checks the cheap
structural markers (a top-level ``.php`` file for plugins, ``style.css``
for themes) and reports MalformedAssetError when they are missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wpforge.blueprint.steps import AssetKind, ConflictPolicy
from wpforge.errors import AlreadyInstalledError, FilesystemError, MalformedAssetError
from wpforge.resources.content import ArchiveFile, Content, Directory, FileTree
from wpforge.runtime.base import Runtime, join_paths

from .archive import unzip_to_tree
from .naming import random_suffix, slugify, zip_name_to_human_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Where an asset was installed and its human-readable name."""

    asset_folder_path: str
    asset_folder_name: str

    @property
    def folder(self) -> str:
        return self.asset_folder_path.rstrip("/").rsplit("/", 1)[-1]


class AssetInstaller:
    """
    Installs plugins and themes into a runtime.

    Example:
        installer = AssetInstaller(runtime)
        result = await installer.install(
            archive,
            "/wordpress/wp-content/plugins",
            kind=AssetKind.PLUGIN,
            if_already_installed=ConflictPolicy.SKIP,
        )
    """

    def __init__(self, runtime: Runtime):
        self._runtime = runtime

    def default_target(self, kind: AssetKind) -> str:
        """``wp-content/plugins`` or ``wp-content/themes`` under the document root."""
        return join_paths(self._runtime.document_root, "wp-content", kind.content_dir)

    async def install(
        self,
        content: Content,
        target_parent: str | None = None,
        *,
        kind: AssetKind = AssetKind.PLUGIN,
        if_already_installed: ConflictPolicy = ConflictPolicy.OVERWRITE,
        display_name_hint: str | None = None,
    ) -> InstallResult:
        """
        Install resolved content under ``target_parent``.

        Args:
            content: ArchiveFile or Directory from the resolver
            target_parent: Parent directory (defaults to the kind's wp-content dir)
            kind: Plugin or theme, selects the structural marker check
            if_already_installed: Conflict policy for archive installs
            display_name_hint: Overrides the derived display name

        Raises:
            MalformedAssetError: Content fails structural checks
            AlreadyInstalledError: Policy is ERROR and the folder exists
            FilesystemError: Destination exists as a file, or write failed
        """
        target_parent = target_parent or self.default_target(kind)
        if isinstance(content, ArchiveFile):
            return await self._install_archive(
                content, target_parent, kind, if_already_installed, display_name_hint
            )
        if isinstance(content, Directory):
            return await self._install_directory(content, target_parent, kind, display_name_hint)
        raise MalformedAssetError(f"Cannot install content of type {type(content).__name__}")

    async def _install_archive(
        self,
        archive: ArchiveFile,
        target_parent: str,
        kind: AssetKind,
        policy: ConflictPolicy,
        display_name_hint: str | None,
    ) -> InstallResult:
        display_name = display_name_hint or zip_name_to_human_name(archive.name) or archive.name
        tree = unzip_to_tree(archive.data, name=archive.name)

        folder_name, payload = slugify(display_name, fallback=kind.value), tree
        if len(tree) == 1:
            top_name, top_value = next(iter(tree.items()))
            if isinstance(top_value, dict):
                folder_name, payload = top_name, top_value

        _check_markers(payload, kind, archive.name)

        destination = join_paths(target_parent, folder_name)
        result = InstallResult(asset_folder_path=destination, asset_folder_name=display_name)

        if await self._runtime.exists(destination):
            if not await self._runtime.is_dir(destination):
                raise FilesystemError(
                    f"Cannot install {display_name} to {destination} because a file "
                    "with the same name already exists",
                    path=destination,
                )
            if policy == ConflictPolicy.SKIP:
                logger.info(f"{display_name} already installed at {destination}, skipping")
                return result
            if policy == ConflictPolicy.ERROR:
                raise AlreadyInstalledError(
                    f'Cannot install "{display_name}" to "{destination}" because it already '
                    'exists and the ifAlreadyInstalled option was set to "error"',
                    asset_folder_path=destination,
                )
            logger.info(f"Overwriting existing {kind.value} at {destination}")

        await self._runtime.write_tree(destination, payload, replace_root=True)
        logger.info(f"Installed {kind.value} {display_name} to {destination}")
        return result

    async def _install_directory(
        self,
        directory: Directory,
        target_parent: str,
        kind: AssetKind,
        display_name_hint: str | None,
    ) -> InstallResult:
        _check_markers(directory.files, kind, directory.name)

        if not directory.name or directory.name in (".", "..") or "/" in directory.name:
            raise MalformedAssetError(f"Invalid {kind.value} directory name {directory.name!r}")
        folder_name = f"{directory.name}-{random_suffix()}"
        destination = join_paths(target_parent, folder_name)
        await self._runtime.write_tree(destination, directory.files, replace_root=True)

        name = display_name_hint or directory.name
        logger.info(f"Installed {kind.value} {name} to {destination}")
        return InstallResult(asset_folder_path=destination, asset_folder_name=name)


def _check_markers(payload: FileTree, kind: AssetKind, source: str) -> None:
    files = [name for name, value in payload.items() if not isinstance(value, dict)]
    if kind == AssetKind.PLUGIN and not any(name.lower().endswith(".php") for name in files):
        raise MalformedAssetError(
            f"{source} has no PHP file at its root; plugin files must not be nested "
            "inside an extra directory"
        )
    if kind == AssetKind.THEME and "style.css" not in files:
        raise MalformedAssetError(
            f"{source} has no style.css at its root; theme files must not be nested "
            "inside an extra directory"
        )

"""
Mount Reconciliation.

Decides, before a site boots, how its persistent storage is attached
and what the runtime has to do:

    storage   device                         provision?
    none      (no mount)                     always
    opfs      opfs, "/site-<slug>"           only if WordPress is not there yet
    local-fs  local-fs, saved directory      only if WordPress is not there yet

WordPress counts as installed when ``wp-config.php`` exists at the
device root. An installed site boots with its stored runtime
configuration (no steps); anything else runs the original Blueprint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wpforge.blueprint.compiler import compile_blueprint
from wpforge.blueprint.schemas import CompiledBlueprint
from wpforge.runtime.fs import run_blocking

from .devices import DirectoryHandle, MountDeviceAccessor
from .mounts import MountDescriptor, MountDevice, MountDeviceKind, SyncDirection
from .site import SiteMetadata, SiteStorage, get_directory_name_for_slug

logger = logging.getLogger(__name__)

INSTALLED_MARKER = "wp-config.php"


@dataclass(frozen=True)
class PreparedEnvironment:
    """Outcome of reconciliation for one boot."""

    mount_descriptor: MountDescriptor | None
    effective_manifest: CompiledBlueprint
    should_provision: bool
    handle: DirectoryHandle | None = None

    @property
    def is_persistent(self) -> bool:
        return self.mount_descriptor is not None


async def build_mount_descriptor(
    site: SiteMetadata,
    devices: MountDeviceAccessor,
    mountpoint: str = "/wordpress",
) -> MountDescriptor | None:
    """
    Mount descriptor for the site's storage, or None for ``none``.

    Raises:
        BootDecisionError: The site's local directory is missing or inaccessible
    """
    if site.storage == SiteStorage.OPFS:
        device = MountDevice(
            kind=MountDeviceKind.OPFS,
            locator="/" + get_directory_name_for_slug(site.slug),
        )
    elif site.storage == SiteStorage.LOCAL_FS:
        handle = await run_blocking(devices.load_local_handle, site.slug)
        device = MountDevice(kind=MountDeviceKind.LOCAL_FS, locator=str(handle.path))
    else:
        return None

    return MountDescriptor(
        device=device,
        mountpoint=mountpoint,
        sync_direction=SyncDirection.OPFS_TO_MEMFS,
    )


async def is_wordpress_installed(handle: DirectoryHandle) -> bool:
    return await handle.has_file(INSTALLED_MARKER)


async def prepare_environment(
    site: SiteMetadata,
    *,
    devices: MountDeviceAccessor,
    mountpoint: str = "/wordpress",
) -> PreparedEnvironment:
    """
    Reconcile a site's storage with what the runtime will run.

    Args:
        site: Site metadata (not modified)
        devices: Opens mount devices
        mountpoint: Runtime path the device mounts at

    Returns:
        PreparedEnvironment with the descriptor, the manifest to run and
        whether WordPress must be installed

    Raises:
        BootDecisionError: Storage is unavailable; nothing was provisioned
    """
    descriptor = await build_mount_descriptor(site, devices, mountpoint)

    installed = False
    handle = None
    if descriptor is not None:
        handle = await run_blocking(devices.open, descriptor.device)
        installed = await is_wordpress_installed(handle)

    if installed:
        manifest = compile_blueprint(site.runtime_configuration.to_blueprint())
    else:
        manifest = compile_blueprint(site.original_blueprint)

    logger.info(
        f"Prepared site {site.slug}: storage={site.storage.value}, "
        f"installed={installed}, steps={len(manifest.steps)}"
    )
    return PreparedEnvironment(
        mount_descriptor=descriptor,
        effective_manifest=manifest,
        should_provision=not installed,
        handle=handle,
    )

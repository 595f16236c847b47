"""
wpforge Site Storage.

Site metadata, persistent mount devices and the boot-time
reconciliation between them.
"""

from .devices import DirectoryHandle, DirectoryHandleStore, MountDeviceAccessor
from .mounts import MountDescriptor, MountDevice, MountDeviceKind, SyncDirection
from .reconcile import (
    INSTALLED_MARKER,
    PreparedEnvironment,
    build_mount_descriptor,
    is_wordpress_installed,
    prepare_environment,
)
from .site import (
    RuntimeConfiguration,
    SiteMetadata,
    SiteStorage,
    create_site_metadata,
    derive_slug_from_site_name,
    get_directory_name_for_slug,
)
from .sync import sync_mount

__all__ = [
    # Site
    "SiteMetadata",
    "SiteStorage",
    "RuntimeConfiguration",
    "create_site_metadata",
    "derive_slug_from_site_name",
    "get_directory_name_for_slug",
    # Mounts
    "MountDescriptor",
    "MountDevice",
    "MountDeviceKind",
    "SyncDirection",
    # Devices
    "DirectoryHandle",
    "DirectoryHandleStore",
    "MountDeviceAccessor",
    # Reconciliation
    "INSTALLED_MARKER",
    "PreparedEnvironment",
    "build_mount_descriptor",
    "is_wordpress_installed",
    "prepare_environment",
    "sync_mount",
]

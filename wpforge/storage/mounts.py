"""
Mount descriptor schemas.

A mount descriptor tells the runtime which persistent device to attach,
where to attach it, and which way to copy files when it is attached.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class MountDeviceKind(str, Enum):
    OPFS = "opfs"
    LOCAL_FS = "local-fs"


class SyncDirection(str, Enum):
    """Direction of the initial copy between device and runtime memory."""

    OPFS_TO_MEMFS = "opfs-to-memfs"
    MEMFS_TO_OPFS = "memfs-to-opfs"
    NONE = "none"


class MountDevice(BaseModel):
    """
    A persistent storage device.

    ``locator`` is the directory path inside the object store root for
    ``opfs`` devices and the saved host directory for ``local-fs``.
    """

    kind: MountDeviceKind
    locator: str

    class Config:
        frozen = True


class MountDescriptor(BaseModel):
    device: MountDevice
    mountpoint: str = "/wordpress"
    sync_direction: SyncDirection = SyncDirection.OPFS_TO_MEMFS

    class Config:
        frozen = True

"""
Directional sync between a mounted device and the runtime.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wpforge.resources.content import iter_files

from .mounts import MountDescriptor, SyncDirection

if TYPE_CHECKING:
    from wpforge.runtime.base import Runtime

    from .devices import DirectoryHandle

logger = logging.getLogger(__name__)


async def sync_mount(
    descriptor: MountDescriptor,
    handle: DirectoryHandle,
    runtime: Runtime,
    direction: SyncDirection | None = None,
) -> int:
    """
    Copy files between ``handle`` and the runtime's mountpoint.

    ``opfs-to-memfs`` merges the device tree into the runtime;
    ``memfs-to-opfs`` mirrors the runtime tree onto the device: the
    device directory and its symlinks stay, entries the runtime no
    longer has are deleted. The direction defaults to the descriptor's.

    Returns:
        Number of files copied
    """
    direction = direction or descriptor.sync_direction
    mountpoint = descriptor.mountpoint

    if direction == SyncDirection.OPFS_TO_MEMFS:
        tree = await handle.read_tree()
        await runtime.write_tree(mountpoint, tree)
    elif direction == SyncDirection.MEMFS_TO_OPFS:
        if not await runtime.is_dir(mountpoint):
            logger.warning(f"Nothing to sync: {mountpoint} does not exist in the runtime")
            return 0
        tree = await runtime.read_tree(mountpoint)
        await handle.mirror_tree(tree)
    else:
        return 0

    count = sum(1 for _ in iter_files(tree))
    logger.info(f"Synced {count} files {direction.value} ({handle.path} <-> {mountpoint})")
    return count

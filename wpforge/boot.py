"""
Site boot orchestration.

Boot order:
1. Reconcile storage (mount descriptor, installed probe, manifest)
2. Copy the persistent device into the runtime (opfs-to-memfs)
3. Run the effective manifest
4. After provisioning, copy the runtime back onto the device

A BootDecisionError from step 1 stops the boot before anything is
written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .interpreter.executor import StepInterpreter
from .storage.mounts import SyncDirection
from .storage.reconcile import PreparedEnvironment, prepare_environment
from .storage.sync import sync_mount

if TYPE_CHECKING:
    from .interpreter.context import RunResult
    from .interpreter.progress import ProgressObserver
    from .resources.resolver import ResourceResolver
    from .runtime.base import Runtime
    from .storage.devices import MountDeviceAccessor
    from .storage.site import SiteMetadata

logger = logging.getLogger(__name__)


@dataclass
class BootResult:
    """What happened while booting a site."""

    environment: PreparedEnvironment
    run_result: RunResult
    files_loaded: int = 0
    files_persisted: int = 0

    @property
    def provisioned(self) -> bool:
        return self.environment.should_provision


async def boot_site(
    site: SiteMetadata,
    runtime: Runtime,
    *,
    devices: MountDeviceAccessor,
    resolver: ResourceResolver | None = None,
    progress: ProgressObserver | None = None,
    interpreter: StepInterpreter | None = None,
) -> BootResult:
    """
    Boot ``site`` into ``runtime``.

    Raises:
        BootDecisionError: Storage unavailable; nothing was written
        ProvisioningError: A Blueprint step failed
    """
    environment = await prepare_environment(
        site, devices=devices, mountpoint=runtime.document_root
    )
    descriptor = environment.mount_descriptor

    files_loaded = 0
    if descriptor is not None and environment.handle is not None:
        files_loaded = await sync_mount(descriptor, environment.handle, runtime)

    interpreter = interpreter or StepInterpreter(resolver=resolver)
    run_result = await interpreter.run(environment.effective_manifest, runtime, progress=progress)

    files_persisted = 0
    if environment.should_provision and descriptor is not None and environment.handle is not None:
        files_persisted = await sync_mount(
            descriptor, environment.handle, runtime, SyncDirection.MEMFS_TO_OPFS
        )

    logger.info(
        f"Booted site {site.slug}: provisioned={environment.should_provision}, "
        f"steps={len(run_result)}, loaded={files_loaded}, persisted={files_persisted}"
    )
    return BootResult(
        environment=environment,
        run_result=run_result,
        files_loaded=files_loaded,
        files_persisted=files_persisted,
    )

"""
Tests for site boot orchestration.
"""
import os
from unittest.mock import AsyncMock, patch

import pytest

from wpforge import boot_site
from wpforge.errors import BootDecisionError
from wpforge.interpreter import StepInterpreter
from wpforge.runtime import LocalRuntime
from wpforge.storage import MountDeviceAccessor, SiteStorage, create_site_metadata

BLUEPRINT = {
    "steps": [
        {"step": "writeFile", "path": "wp-config.php", "data": "<?php // config"},
        {"step": "mkdir", "path": "wp-content/uploads"},
    ]
}


@pytest.fixture
def devices(settings):
    return MountDeviceAccessor.from_settings(settings)


class TestBootSite:
    """Tests for boot_site."""

    @pytest.mark.asyncio
    async def test_temporary_site(self, runtime, devices, resolver):
        """Sites without storage provision and persist nothing."""
        site = create_site_metadata("Temp", BLUEPRINT)

        result = await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert result.provisioned is True
        assert result.environment.mount_descriptor is None
        assert len(result.run_result) == 2
        assert result.files_persisted == 0
        assert await runtime.exists("/wordpress/wp-config.php")

    @pytest.mark.asyncio
    async def test_first_boot_persists(self, tmp_path, devices, settings, resolver):
        """A fresh persistent site is provisioned and copied onto its device."""
        site = create_site_metadata("Persistent", BLUEPRINT, SiteStorage.OPFS)
        runtime = LocalRuntime(tmp_path / "first")

        result = await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert result.provisioned is True
        assert result.files_persisted == 1
        device_root = settings.opfs_root / "site-persistent"
        assert (device_root / "wp-config.php").read_bytes() == b"<?php // config"
        assert (device_root / "wp-content" / "uploads").is_dir()

    @pytest.mark.asyncio
    async def test_second_boot_skips_provisioning(self, tmp_path, devices, resolver):
        """Once installed, the site loads from its device and runs no steps."""
        site = create_site_metadata("Persistent", BLUEPRINT, SiteStorage.OPFS)
        await boot_site(site, LocalRuntime(tmp_path / "first"), devices=devices, resolver=resolver)
        runtime = LocalRuntime(tmp_path / "second")

        with patch.object(StepInterpreter, "_run_step", AsyncMock()) as run_step:
            result = await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert result.provisioned is False
        assert len(result.run_result) == 0
        run_step.assert_not_awaited()
        assert result.files_loaded == 1
        assert runtime.host_path("/wordpress/wp-config.php").read_bytes() == b"<?php // config"

    @pytest.mark.asyncio
    async def test_missing_local_directory(self, runtime, devices, resolver):
        """Boot decisions fail before anything is written."""
        site = create_site_metadata("Local", BLUEPRINT, SiteStorage.LOCAL_FS)

        with pytest.raises(BootDecisionError):
            await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert not await runtime.exists("/wordpress/wp-config.php")

    @pytest.mark.asyncio
    async def test_local_fs_site(self, tmp_path, runtime, devices, resolver):
        target = tmp_path / "picked"
        target.mkdir()
        devices.handle_store.save("local", target)
        site = create_site_metadata("Local", BLUEPRINT, SiteStorage.LOCAL_FS)

        await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert (target / "wp-config.php").is_file()

    @pytest.mark.asyncio
    async def test_local_fs_site_keeps_directory_and_symlinks(
        self, tmp_path, runtime, devices, resolver
    ):
        """Persisting into a picked directory leaves the directory and its symlinks alone."""
        media = tmp_path / "media"
        media.mkdir()
        (media / "photo.jpg").write_bytes(b"jpg")
        target = tmp_path / "picked"
        target.mkdir()
        (target / "uploads").symlink_to("../media")
        devices.handle_store.save("local", target)
        inode = target.stat().st_ino
        site = create_site_metadata("Local", BLUEPRINT, SiteStorage.LOCAL_FS)

        result = await boot_site(site, runtime, devices=devices, resolver=resolver)

        assert result.files_persisted == 1
        assert (target / "uploads").is_symlink()
        assert os.readlink(target / "uploads") == "../media"
        assert (target / "uploads" / "photo.jpg").read_bytes() == b"jpg"
        assert target.stat().st_ino == inode
        assert (target / "wp-config.php").read_bytes() == b"<?php // config"

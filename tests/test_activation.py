"""
Tests for activation and the local runtime.
"""
import threading
from unittest.mock import AsyncMock, patch

import pytest

from wpforge.errors import ActivationError, FilesystemError
from wpforge.install import ActivationController
from wpforge.interpreter import ProgressTracker
from wpforge.runtime import LocalRuntime, join_paths, resolve_path

PLUGINS = "/wordpress/wp-content/plugins"
THEMES = "/wordpress/wp-content/themes"


class TestActivationController:
    """Tests for ActivationController."""

    @pytest.mark.asyncio
    async def test_activates_plugin_directory(self, runtime):
        """The plugin file is found by its header and recorded."""
        await runtime.write_file(f"{PLUGINS}/hello/readme.txt", b"docs")
        await runtime.write_file(f"{PLUGINS}/hello/hello.php", b"<?php\n/* Plugin Name: Hello */")
        tracker = ProgressTracker()

        await ActivationController(runtime).activate_plugin(f"{PLUGINS}/hello", "Hello", tracker)

        assert runtime.active_plugins == ["hello/hello.php"]
        assert tracker.caption == "Activating Hello"

    @pytest.mark.asyncio
    async def test_plugin_without_header(self, runtime):
        await runtime.write_file(f"{PLUGINS}/bare/bare.php", b"<?php echo 1;")

        with pytest.raises(ActivationError) as exc_info:
            await ActivationController(runtime).activate_plugin(f"{PLUGINS}/bare")

        assert exc_info.value.path == f"{PLUGINS}/bare"
        assert runtime.active_plugins == []

    @pytest.mark.asyncio
    async def test_activation_twice_recorded_once(self, runtime):
        await runtime.write_file(f"{PLUGINS}/hello/hello.php", b"<?php\n/* Plugin Name: Hello */")
        controller = ActivationController(runtime)

        await controller.activate_plugin(f"{PLUGINS}/hello")
        await controller.activate_plugin(f"{PLUGINS}/hello/hello.php")

        assert runtime.active_plugins == ["hello/hello.php"]

    @pytest.mark.asyncio
    async def test_activates_theme(self, runtime):
        await runtime.write_file(f"{THEMES}/pub/style.css", b"/*\nTheme Name: Pub\n*/")

        await ActivationController(runtime).activate_theme("pub")

        assert runtime.active_theme == "pub"

    @pytest.mark.asyncio
    async def test_missing_theme(self, runtime):
        with pytest.raises(ActivationError):
            await ActivationController(runtime).activate_theme("nope")

    @pytest.mark.asyncio
    async def test_foreign_exceptions_wrapped(self):
        """Errors outside the taxonomy become ActivationError."""
        runtime = AsyncMock()
        runtime.activate_plugin.side_effect = RuntimeError("php crashed")

        with pytest.raises(ActivationError) as exc_info:
            await ActivationController(runtime).activate_plugin("/wordpress/wp-content/plugins/x")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestLocalRuntime:
    """Tests for the host directory runtime."""

    @pytest.mark.asyncio
    async def test_paths_map_under_root(self, tmp_path):
        runtime = LocalRuntime(tmp_path)

        await runtime.write_file("/wordpress/index.php", b"<?php")

        assert (tmp_path / "wordpress" / "index.php").read_bytes() == b"<?php"
        assert await runtime.is_dir("/wordpress")

    def test_parent_segments_stay_inside_root(self, runtime):
        """Runtime paths are normalized before they reach the host."""
        assert runtime.host_path("/wordpress/../../etc/passwd") == runtime.root / "etc" / "passwd"

    @pytest.mark.asyncio
    async def test_read_tree_of_missing_dir(self, runtime):
        with pytest.raises(FilesystemError):
            await runtime.read_tree("/wordpress/missing")

    @pytest.mark.asyncio
    async def test_tree_roundtrip_and_remove(self, runtime):
        await runtime.write_tree("/wordpress/a", {"b": {"c.txt": b"c"}, "d.txt": b"d"})

        assert await runtime.read_tree("/wordpress/a") == {"b": {"c.txt": b"c"}, "d.txt": b"d"}

        await runtime.remove("/wordpress/a/b")
        assert await runtime.read_tree("/wordpress/a") == {"d.txt": b"d"}

    @pytest.mark.asyncio
    async def test_write_tree_replace_root(self, runtime):
        await runtime.write_tree("/wordpress/a", {"old.txt": b"old"})

        await runtime.write_tree("/wordpress/a", {"new.txt": b"new"}, replace_root=True)

        assert await runtime.read_tree("/wordpress/a") == {"new.txt": b"new"}

    @pytest.mark.asyncio
    async def test_disk_work_runs_off_the_loop_thread(self, runtime):
        """Tree I/O and activation state writes run in the default executor."""
        loop_thread = threading.current_thread()
        threads = []

        def record(*args, **kwargs):
            threads.append(threading.current_thread())

        await runtime.write_file(
            f"{PLUGINS}/hello/hello.php", b"<?php\n/*\nPlugin Name: Hello\n*/\n"
        )
        with patch("wpforge.runtime.local.write_host_tree", side_effect=record), patch(
            "wpforge.runtime.local.remove_host_path", side_effect=record
        ), patch.object(LocalRuntime, "_save_state", autospec=True, side_effect=record):
            await runtime.write_tree("/wordpress/a", {"b.txt": b"b"})
            await runtime.remove("/wordpress/a")
            await runtime.activate_plugin(f"{PLUGINS}/hello")

        assert len(threads) == 3
        assert loop_thread not in threads

    def test_path_helpers(self):
        assert join_paths("/wordpress/", "wp-content", "plugins") == PLUGINS
        assert resolve_path("/wordpress", "wp-config.php") == "/wordpress/wp-config.php"
        assert resolve_path("/wordpress", "/tmp/x") == "/tmp/x"

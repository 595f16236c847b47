"""
Tests for the step interpreter.

Tests ordering, preflight validation, fail-fast error propagation,
activation error collection and progress reporting.
"""
from unittest.mock import AsyncMock, patch

import pytest

from wpforge.blueprint import AssetKind, ConflictPolicy, compile_blueprint
from wpforge.config import AppSettings
from wpforge.errors import (
    ActivationError,
    AlreadyInstalledError,
    InvalidStepError,
    ResourceFetchError,
    StepExecutionError,
)
from wpforge.interpreter import (
    HandlerRegistry,
    MkdirHandler,
    ProgressTracker,
    StepHandler,
    StepInterpreter,
    StepOutcome,
    run_blueprint,
)
from wpforge.interpreter.handlers import _InstallAssetHandler

PLUGINS = "/wordpress/wp-content/plugins"
HELLO_URL = "https://example.com/hello.zip"


def install_plugin(url=HELLO_URL, **options):
    step = {"step": "installPlugin", "pluginZipFile": {"resource": "url", "url": url}}
    if options:
        step["options"] = options
    return step


class ExplodingHandler(StepHandler):
    """Test handler that fails with an error outside the taxonomy."""

    @property
    def kind(self) -> str:
        return "mkdir"

    async def handle(self, step, ctx) -> StepOutcome:
        raise ValueError("boom")


class BrokenObserver:
    """Progress observer that always fails."""

    def set_caption(self, text: str) -> None:
        raise RuntimeError("display gone")


class TestEndToEnd:
    """Tests for complete runs against a LocalRuntime."""

    @pytest.mark.asyncio
    async def test_install_hello_plugin(self, runtime, resolver, http_archives, hello_zip):
        """hello.zip installs into one folder and is activated once as "Hello"."""
        http_archives[HELLO_URL] = hello_zip

        with patch.object(
            runtime, "activate_plugin", AsyncMock(wraps=runtime.activate_plugin)
        ) as activate:
            result = await run_blueprint({"steps": [install_plugin()]}, runtime, resolver=resolver)

        assert [p.name for p in runtime.host_path(PLUGINS).iterdir()] == ["hello"]
        activate.assert_awaited_once_with(f"{PLUGINS}/hello", "Hello")
        assert runtime.active_plugins == ["hello/hello.php"]

        assert len(result) == 1
        assert result[0].kind == "installPlugin"
        assert result[0].install_result.asset_folder_name == "Hello"
        assert result[0].activated

    @pytest.mark.asyncio
    async def test_install_theme_activates_folder(self, runtime, resolver, http_archives, theme_zip):
        http_archives["https://downloads.wordpress.org/theme/pub.zip"] = theme_zip
        blueprint = {
            "steps": [
                {
                    "step": "installTheme",
                    "themeZipFile": {"resource": "wordpress.org/themes", "slug": "pub"},
                }
            ]
        }

        await run_blueprint(blueprint, runtime, resolver=resolver)

        assert runtime.active_theme == "pub"

    @pytest.mark.asyncio
    async def test_activate_false(self, runtime, resolver, http_archives, hello_zip):
        http_archives[HELLO_URL] = hello_zip

        result = await run_blueprint(
            {"steps": [install_plugin(activate=False)]}, runtime, resolver=resolver
        )

        assert await runtime.exists(f"{PLUGINS}/hello/hello.php")
        assert runtime.active_plugins == []
        assert result.activation_errors == []

    @pytest.mark.asyncio
    async def test_directory_install(self, runtime, resolver):
        blueprint = {
            "steps": [
                {
                    "step": "installPlugin",
                    "pluginDirectoryRoot": {
                        "resource": "literal-directory",
                        "name": "hello",
                        "files": {"hello.php": "<?php\n/* Plugin Name: Hello */"},
                    },
                }
            ]
        }

        result = await run_blueprint(blueprint, runtime, resolver=resolver)

        folder = result[0].install_result.folder
        assert folder.startswith("hello-")
        assert runtime.active_plugins == [f"{folder}/hello.php"]

    @pytest.mark.asyncio
    async def test_filesystem_steps(self, runtime, resolver):
        """Relative paths resolve against the document root."""
        blueprint = {
            "steps": [
                {"step": "mkdir", "path": "wp-content/uploads"},
                {"step": "writeFile", "path": "wp-content/uploads/a.txt", "data": "a"},
                {
                    "step": "writeFile",
                    "path": "/wordpress/b.txt",
                    "data": {"resource": "literal", "name": "b.txt", "contents": "b"},
                },
                {"step": "writeFile", "path": "gone.txt", "data": "x"},
                {"step": "rm", "path": "gone.txt"},
            ]
        }

        await run_blueprint(blueprint, runtime, resolver=resolver)

        assert runtime.host_path("/wordpress/wp-content/uploads/a.txt").read_bytes() == b"a"
        assert runtime.host_path("/wordpress/b.txt").read_bytes() == b"b"
        assert not await runtime.exists("/wordpress/gone.txt")

    @pytest.mark.asyncio
    async def test_activate_plugin_step_relative(self, runtime, resolver):
        await runtime.write_file(f"{PLUGINS}/hello/hello.php", b"<?php\n/* Plugin Name: Hello */")

        await run_blueprint(
            {"steps": [{"step": "activatePlugin", "pluginPath": "hello/hello.php"}]},
            runtime,
            resolver=resolver,
        )

        assert runtime.active_plugins == ["hello/hello.php"]


class TestOrdering:
    """Tests for document-order execution and progress."""

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, runtime, resolver):
        blueprint = {
            "steps": [
                {"step": "writeFile", "path": "log.txt", "data": "first"},
                {"step": "writeFile", "path": "log.txt", "data": "second"},
            ]
        }

        result = await run_blueprint(blueprint, runtime, resolver=resolver)

        assert [s.index for s in result] == [0, 1]
        assert runtime.host_path("/wordpress/log.txt").read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_progress_captions(self, runtime, resolver, http_archives, hello_zip):
        http_archives[HELLO_URL] = hello_zip
        tracker = ProgressTracker()

        await run_blueprint(
            {"steps": [install_plugin(), {"step": "mkdir", "path": "x"}]},
            runtime,
            resolver=resolver,
            progress=tracker,
        )

        assert tracker.captions == [
            "Running installPlugin (1/2)",
            "Installing the Hello plugin",
            "Activating Hello",
            "Completed installPlugin (1/2)",
            "Running mkdir (2/2)",
            "Completed mkdir (2/2)",
        ]

    @pytest.mark.asyncio
    async def test_observer_failure_ignored(self, runtime, resolver):
        result = await run_blueprint(
            {"steps": [{"step": "mkdir", "path": "x"}]},
            runtime,
            resolver=resolver,
            progress=BrokenObserver(),
        )

        assert len(result) == 1
        assert await runtime.is_dir("/wordpress/x")


class TestPreflight:
    """Tests for validation before any step runs."""

    @pytest.mark.asyncio
    async def test_missing_resource_rejected_before_writes(self, runtime, resolver):
        blueprint = {
            "steps": [
                {"step": "writeFile", "path": "a.txt", "data": "a"},
                {"step": "installPlugin"},
            ]
        }

        with pytest.raises(InvalidStepError) as exc_info:
            await run_blueprint(blueprint, runtime, resolver=resolver)

        assert exc_info.value.step_index == 1
        assert exc_info.value.step_kind == "installPlugin"
        assert not await runtime.exists("/wordpress/a.txt")

    @pytest.mark.asyncio
    async def test_unparseable_step_rejected(self, runtime, resolver):
        with pytest.raises(InvalidStepError) as exc_info:
            await run_blueprint(
                {"steps": [{"step": "mkdir", "path": "a"}, {"step": "teleport"}]},
                runtime,
                resolver=resolver,
            )

        assert exc_info.value.step_index == 1
        assert str(exc_info.value).startswith("[step 1 teleport]")
        assert not await runtime.exists("/wordpress/a")

    @pytest.mark.asyncio
    async def test_unregistered_kind_rejected(self, runtime, resolver):
        interpreter = StepInterpreter(HandlerRegistry([MkdirHandler()]), resolver=resolver)

        with pytest.raises(InvalidStepError) as exc_info:
            await interpreter.run(
                compile_blueprint({"steps": [{"step": "rm", "path": "a"}]}), runtime
            )

        assert "No handler registered" in str(exc_info.value)


class TestFailures:
    """Tests for fail-fast behavior."""

    @pytest.mark.asyncio
    async def test_fetch_failure_stops_run(self, runtime, resolver):
        """Earlier effects persist; later steps never run."""
        blueprint = {
            "steps": [
                {"step": "writeFile", "path": "before.txt", "data": "x"},
                install_plugin("https://example.com/missing.zip"),
                {"step": "writeFile", "path": "after.txt", "data": "x"},
            ]
        }

        with pytest.raises(ResourceFetchError) as exc_info:
            await run_blueprint(blueprint, runtime, resolver=resolver)

        assert exc_info.value.step_index == 1
        assert exc_info.value.step_kind == "installPlugin"
        assert await runtime.exists("/wordpress/before.txt")
        assert not await runtime.exists("/wordpress/after.txt")

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped(self, runtime, resolver):
        interpreter = StepInterpreter(HandlerRegistry([ExplodingHandler()]), resolver=resolver)

        with pytest.raises(StepExecutionError) as exc_info:
            await interpreter.run({"steps": [{"step": "mkdir", "path": "a"}]}, runtime)

        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.step_index == 0

    @pytest.mark.asyncio
    async def test_activation_error_collected(self, runtime, resolver, http_archives, make_zip):
        """A plugin without a header installs, fails activation, and the run continues."""
        http_archives[HELLO_URL] = make_zip({"hello.php": "<?php echo 'no header';"})

        result = await run_blueprint(
            {"steps": [install_plugin(), {"step": "mkdir", "path": "next"}]},
            runtime,
            resolver=resolver,
        )

        assert len(result) == 2
        assert isinstance(result[0].activation_error, ActivationError)
        assert not result[0].activated
        assert len(result.activation_errors) == 1
        assert await runtime.exists(f"{PLUGINS}/hello/hello.php")
        assert await runtime.is_dir("/wordpress/next")


class TestConflictDefaults:
    """Tests for the interpreter's default conflict policy."""

    @pytest.mark.asyncio
    async def test_settings_default_policy(self, runtime, resolver, http_archives, hello_zip):
        http_archives[HELLO_URL] = hello_zip
        interpreter = StepInterpreter.from_settings(
            AppSettings(default_if_already_installed="error"), resolver=resolver
        )
        blueprint = {"steps": [install_plugin(), install_plugin()]}

        assert interpreter.default_conflict_policy == ConflictPolicy.ERROR
        with pytest.raises(AlreadyInstalledError) as exc_info:
            await interpreter.run(blueprint, runtime)

        assert exc_info.value.step_index == 1

    @pytest.mark.asyncio
    async def test_step_policy_overrides_default(self, runtime, resolver, http_archives, hello_zip):
        http_archives[HELLO_URL] = hello_zip
        interpreter = StepInterpreter(
            resolver=resolver, default_conflict_policy=ConflictPolicy.ERROR
        )
        blueprint = {"steps": [install_plugin(), install_plugin(ifAlreadyInstalled="skip")]}

        result = await interpreter.run(blueprint, runtime)

        assert len(result) == 2
        assert result.to_dict()["steps"][1]["asset_folder_path"] == f"{PLUGINS}/hello"


class TestInstallHandlerBase:
    """Tests for the shared install handler."""

    def test_handler_without_activation_cannot_be_built(self):
        """Install handlers must say how their asset is activated."""

        class InertHandler(_InstallAssetHandler):
            asset_kind = AssetKind.PLUGIN

            @property
            def kind(self) -> str:
                return "installInert"

        with pytest.raises(TypeError):
            InertHandler()

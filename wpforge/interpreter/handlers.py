"""
Built-in step handlers.

installPlugin / installTheme resolve their resource, install it, and
activate it unless ``options.activate`` is false. Activation failures
are recorded on the outcome and do not abort the run.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING

from wpforge.blueprint.steps import (
    ActivatePluginStep,
    ActivateThemeStep,
    AssetKind,
    InstallAssetStep,
    MkdirStep,
    RmStep,
    WriteFileStep,
)
from wpforge.errors import ActivationError
from wpforge.install.naming import zip_name_to_human_name
from wpforge.resources.content import ArchiveFile
from wpforge.runtime.base import resolve_path

from .context import StepOutcome
from .handler import StepHandler

if TYPE_CHECKING:
    from wpforge.install.asset import InstallResult

    from .context import StepContext

logger = logging.getLogger(__name__)


# =============================================================================
# Install Handlers
# =============================================================================


class _InstallAssetHandler(StepHandler):
    """Resolve, install, then (optionally) activate."""

    asset_kind: AssetKind

    def validate(self, step: InstallAssetStep) -> None:
        step.pick_resource()

    def describe(self, step: InstallAssetStep) -> str:
        return f"Installing a {self.asset_kind.value}"

    async def handle(self, step: InstallAssetStep, ctx: StepContext) -> StepOutcome:
        content = await ctx.resolver.resolve(step.pick_resource())

        nice_name = (
            zip_name_to_human_name(content.name) if isinstance(content, ArchiveFile) else content.name
        )
        ctx.progress.set_caption(f"Installing the {nice_name} {self.asset_kind.value}")

        result = await ctx.installer.install(
            content,
            ctx.installer.default_target(self.asset_kind),
            kind=self.asset_kind,
            if_already_installed=step.conflict_policy(ctx.default_conflict_policy),
        )
        outcome = StepOutcome(install_result=result)

        if step.should_activate:
            try:
                await self._activate(result, ctx)
            except ActivationError as e:
                logger.warning(f"Activation of {result.asset_folder_name} failed: {e}")
                outcome.activation_error = e
        return outcome

    @abstractmethod
    async def _activate(self, result: InstallResult, ctx: StepContext) -> None:
        ...


class InstallPluginHandler(_InstallAssetHandler):
    asset_kind = AssetKind.PLUGIN

    @property
    def kind(self) -> str:
        return "installPlugin"

    async def _activate(self, result: InstallResult, ctx: StepContext) -> None:
        await ctx.activator.activate_plugin(
            result.asset_folder_path, result.asset_folder_name, ctx.progress
        )


class InstallThemeHandler(_InstallAssetHandler):
    asset_kind = AssetKind.THEME

    @property
    def kind(self) -> str:
        return "installTheme"

    async def _activate(self, result: InstallResult, ctx: StepContext) -> None:
        await ctx.activator.activate_theme(result.folder, ctx.progress)


# =============================================================================
# Activation Handlers
# =============================================================================


class ActivatePluginHandler(StepHandler):
    @property
    def kind(self) -> str:
        return "activatePlugin"

    def describe(self, step: ActivatePluginStep) -> str:
        return f"Activating {step.plugin_name or step.plugin_path}"

    async def handle(self, step: ActivatePluginStep, ctx: StepContext) -> StepOutcome:
        # Relative paths are relative to wp-content/plugins
        path = resolve_path(ctx.installer.default_target(AssetKind.PLUGIN), step.plugin_path)
        outcome = StepOutcome()
        try:
            await ctx.activator.activate_plugin(path, step.plugin_name, ctx.progress)
        except ActivationError as e:
            logger.warning(f"Activation of {path} failed: {e}")
            outcome.activation_error = e
        return outcome


class ActivateThemeHandler(StepHandler):
    @property
    def kind(self) -> str:
        return "activateTheme"

    def describe(self, step: ActivateThemeStep) -> str:
        return f"Activating {step.theme_folder_name}"

    async def handle(self, step: ActivateThemeStep, ctx: StepContext) -> StepOutcome:
        outcome = StepOutcome()
        try:
            await ctx.activator.activate_theme(step.theme_folder_name, ctx.progress)
        except ActivationError as e:
            logger.warning(f"Activation of theme {step.theme_folder_name} failed: {e}")
            outcome.activation_error = e
        return outcome


# =============================================================================
# Filesystem Handlers
# =============================================================================


class WriteFileHandler(StepHandler):
    @property
    def kind(self) -> str:
        return "writeFile"

    def describe(self, step: WriteFileStep) -> str:
        return f"Writing {step.path}"

    async def handle(self, step: WriteFileStep, ctx: StepContext) -> StepOutcome:
        if isinstance(step.data, str):
            data = step.data.encode("utf-8")
        elif isinstance(step.data, bytes):
            data = step.data
        else:
            content = await ctx.resolver.resolve(step.data)
            data = content.data
        await ctx.runtime.write_file(resolve_path(ctx.document_root, step.path), data)
        return StepOutcome()


class MkdirHandler(StepHandler):
    @property
    def kind(self) -> str:
        return "mkdir"

    def describe(self, step: MkdirStep) -> str:
        return f"Creating {step.path}"

    async def handle(self, step: MkdirStep, ctx: StepContext) -> StepOutcome:
        await ctx.runtime.mkdir(resolve_path(ctx.document_root, step.path))
        return StepOutcome()


class RmHandler(StepHandler):
    @property
    def kind(self) -> str:
        return "rm"

    def describe(self, step: RmStep) -> str:
        return f"Removing {step.path}"

    async def handle(self, step: RmStep, ctx: StepContext) -> StepOutcome:
        await ctx.runtime.remove(resolve_path(ctx.document_root, step.path))
        return StepOutcome()


def default_handlers() -> list[StepHandler]:
    """Handlers for every built-in step kind."""
    return [
        InstallPluginHandler(),
        InstallThemeHandler(),
        ActivatePluginHandler(),
        ActivateThemeHandler(),
        WriteFileHandler(),
        MkdirHandler(),
        RmHandler(),
    ]

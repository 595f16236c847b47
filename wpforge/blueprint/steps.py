"""
Blueprint Step Schema.

Steps are tagged by their ``step`` field. Install steps carry two
mutually exclusive resource fields (an archive resource and a directory
resource) plus per-step options:

    {
        "step": "installPlugin",
        "pluginZipFile": {"resource": "url", "url": "https://example.com/hello.zip"},
        "options": {"activate": true, "ifAlreadyInstalled": "skip"}
    }

A step entry that fails validation is kept as an InvalidStep so that
compilation never fails; the interpreter rejects it before running
anything.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from wpforge.errors import InvalidStepError

from .resources import (
    LiteralReference,
    ResourceReference,
    UrlReference,
    WordPressOrgPluginReference,
    WordPressOrgThemeReference,
)

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """What to do when the install destination already holds the unit."""

    OVERWRITE = "overwrite"
    SKIP = "skip"
    ERROR = "error"


class AssetKind(str, Enum):
    """Kind of installable unit, mapped to its wp-content directory."""

    PLUGIN = "plugin"
    THEME = "theme"

    @property
    def content_dir(self) -> str:
        return f"{self.value}s"


class InstallAssetOptions(BaseModel):
    """Options shared by install steps."""

    activate: bool = Field(default=True, description="Activate after installing")
    if_already_installed: ConflictPolicy | None = Field(
        default=None, alias="ifAlreadyInstalled"
    )

    class Config:
        frozen = True
        populate_by_name = True


class _StepModel(BaseModel):
    class Config:
        frozen = True
        populate_by_name = True


class _InstallAssetStep(_StepModel, ABC):
    """Shared behaviour of installPlugin and installTheme."""

    if_already_installed: ConflictPolicy | None = Field(
        default=None, alias="ifAlreadyInstalled"
    )
    options: InstallAssetOptions = Field(default_factory=InstallAssetOptions)

    @property
    @abstractmethod
    def asset_kind(self) -> AssetKind:
        ...

    @property
    @abstractmethod
    def archive_resource(self) -> ResourceReference | None:
        ...

    @property
    @abstractmethod
    def directory_resource(self) -> ResourceReference | None:
        ...

    @property
    def archive_field(self) -> str:
        return f"{self.asset_kind.value}ZipFile"

    @property
    def directory_field(self) -> str:
        return f"{self.asset_kind.value}DirectoryRoot"

    @property
    def should_activate(self) -> bool:
        return self.options.activate

    def pick_resource(self) -> ResourceReference:
        """
        Return the resource this step installs.

        When both fields are set the directory resource wins.

        Raises:
            InvalidStepError: Neither resource field is set
        """
        if self.directory_resource is not None:
            if self.archive_resource is not None:
                logger.warning(
                    f"{self.step} sets both {self.directory_field} and "
                    f"{self.archive_field}; using {self.directory_field}"
                )
            return self.directory_resource
        if self.archive_resource is not None:
            return self.archive_resource
        raise InvalidStepError(
            f"One of the {self.directory_field} or {self.archive_field} options "
            "must be provided but both were empty."
        )

    def conflict_policy(self, default: ConflictPolicy = ConflictPolicy.OVERWRITE) -> ConflictPolicy:
        """Effective ifAlreadyInstalled policy; options take precedence."""
        return self.options.if_already_installed or self.if_already_installed or default


class InstallPluginStep(_InstallAssetStep):
    """Install a plugin from an archive or a directory resource."""

    step: Literal["installPlugin"] = "installPlugin"
    plugin_zip_file: ResourceReference | None = Field(default=None, alias="pluginZipFile")
    plugin_directory_root: ResourceReference | None = Field(
        default=None, alias="pluginDirectoryRoot"
    )

    @property
    def asset_kind(self) -> AssetKind:
        return AssetKind.PLUGIN

    @property
    def archive_resource(self) -> ResourceReference | None:
        return self.plugin_zip_file

    @property
    def directory_resource(self) -> ResourceReference | None:
        return self.plugin_directory_root


class InstallThemeStep(_InstallAssetStep):
    """Install a theme from an archive or a directory resource."""

    step: Literal["installTheme"] = "installTheme"
    theme_zip_file: ResourceReference | None = Field(default=None, alias="themeZipFile")
    theme_directory_root: ResourceReference | None = Field(
        default=None, alias="themeDirectoryRoot"
    )

    @property
    def asset_kind(self) -> AssetKind:
        return AssetKind.THEME

    @property
    def archive_resource(self) -> ResourceReference | None:
        return self.theme_zip_file

    @property
    def directory_resource(self) -> ResourceReference | None:
        return self.theme_directory_root


class ActivatePluginStep(_StepModel):
    """Activate an already installed plugin."""

    step: Literal["activatePlugin"] = "activatePlugin"
    plugin_path: str = Field(..., min_length=1, alias="pluginPath")
    plugin_name: str | None = Field(default=None, alias="pluginName")


class ActivateThemeStep(_StepModel):
    """Switch to an already installed theme."""

    step: Literal["activateTheme"] = "activateTheme"
    theme_folder_name: str = Field(..., min_length=1, alias="themeFolderName")


class WriteFileStep(_StepModel):
    """Write a file; ``data`` is text, bytes, or an archive-shaped resource."""

    step: Literal["writeFile"] = "writeFile"
    path: str = Field(..., min_length=1)
    data: Union[
        UrlReference,
        WordPressOrgPluginReference,
        WordPressOrgThemeReference,
        LiteralReference,
        bytes,
        str,
    ]


class MkdirStep(_StepModel):
    step: Literal["mkdir"] = "mkdir"
    path: str = Field(..., min_length=1)


class RmStep(_StepModel):
    step: Literal["rm"] = "rm"
    path: str = Field(..., min_length=1)


Step = Annotated[
    Union[
        InstallPluginStep,
        InstallThemeStep,
        ActivatePluginStep,
        ActivateThemeStep,
        WriteFileStep,
        MkdirStep,
        RmStep,
    ],
    Field(discriminator="step"),
]

InstallAssetStep = _InstallAssetStep


class InvalidStep(BaseModel):
    """A step entry that could not be parsed; kept so compilation stays total."""

    step: str = ""
    raw: Any = None
    reason: str = ""

    class Config:
        frozen = True


_step_adapter: TypeAdapter = TypeAdapter(Step)


def parse_step(raw: Any) -> Step | InvalidStep:
    """Parse one raw step entry, never raising."""
    if isinstance(raw, (InvalidStep, *_STEP_TYPES)):
        return raw
    if not isinstance(raw, dict):
        return InvalidStep(raw=raw, reason=f"Step must be an object, got {type(raw).__name__}")
    try:
        return _step_adapter.validate_python(raw)
    except ValidationError as e:
        kind = raw.get("step")
        logger.debug(f"Step {kind!r} failed validation: {e}")
        return InvalidStep(
            step=kind if isinstance(kind, str) else "",
            raw=raw,
            reason=_summarize(e),
        )


def dump_step(step: Step | InvalidStep) -> Any:
    """Serialize a parsed step back to its wire form."""
    if isinstance(step, InvalidStep):
        return step.raw
    return step.model_dump(mode="python", by_alias=True, exclude_none=True)


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return "; ".join(parts)


_STEP_TYPES = (
    InstallPluginStep,
    InstallThemeStep,
    ActivatePluginStep,
    ActivateThemeStep,
    WriteFileStep,
    MkdirStep,
    RmStep,
)

"""
wpforge Blueprint Layer.

Schemas for raw Blueprint documents and the compiler that turns them
into the immutable CompiledBlueprint consumed by the interpreter.
"""

from .compiler import (
    DEFAULT_EXTENSION_BUNDLES,
    LATEST_PHP_VERSION,
    LATEST_WP_VERSION,
    SUPPORTED_PHP_VERSIONS,
    compile_blueprint,
)
from .loaders import load_blueprint
from .resources import (
    GitDirectoryReference,
    LiteralDirectoryReference,
    LiteralReference,
    ResourceReference,
    UrlReference,
    WordPressOrgPluginReference,
    WordPressOrgThemeReference,
    is_directory_reference,
    parse_resource_reference,
)
from .schemas import CompiledBlueprint, Versions
from .steps import (
    ActivatePluginStep,
    ActivateThemeStep,
    AssetKind,
    ConflictPolicy,
    InstallAssetOptions,
    InstallAssetStep,
    InstallPluginStep,
    InstallThemeStep,
    InvalidStep,
    MkdirStep,
    RmStep,
    Step,
    WriteFileStep,
    parse_step,
)

__all__ = [
    # Compiler
    "compile_blueprint",
    "load_blueprint",
    "CompiledBlueprint",
    "Versions",
    "SUPPORTED_PHP_VERSIONS",
    "LATEST_PHP_VERSION",
    "LATEST_WP_VERSION",
    "DEFAULT_EXTENSION_BUNDLES",
    # Resources
    "ResourceReference",
    "UrlReference",
    "WordPressOrgPluginReference",
    "WordPressOrgThemeReference",
    "GitDirectoryReference",
    "LiteralReference",
    "LiteralDirectoryReference",
    "parse_resource_reference",
    "is_directory_reference",
    # Steps
    "Step",
    "InvalidStep",
    "InstallAssetStep",
    "InstallPluginStep",
    "InstallThemeStep",
    "ActivatePluginStep",
    "ActivateThemeStep",
    "WriteFileStep",
    "MkdirStep",
    "RmStep",
    "InstallAssetOptions",
    "ConflictPolicy",
    "AssetKind",
    "parse_step",
]

"""
Blueprint Compiler.

Turns a raw Blueprint mapping into a CompiledBlueprint. Compilation is
pure and total: any absent or malformed section is replaced by its
default, and malformed step entries become InvalidStep placeholders.
Compiling an already compiled blueprint yields an equal value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .schemas import CompiledBlueprint, Versions
from .steps import parse_step

logger = logging.getLogger(__name__)

SUPPORTED_PHP_VERSIONS = ("8.3", "8.2", "8.1", "8.0", "7.4")
LATEST_PHP_VERSION = SUPPORTED_PHP_VERSIONS[0]
LATEST_WP_VERSION = "6.6"
DEFAULT_EXTENSION_BUNDLES = ("kitchen-sink",)


def compile_blueprint(raw: Mapping[str, Any] | CompiledBlueprint | None = None) -> CompiledBlueprint:
    """
    Compile a raw Blueprint into its canonical form.

    Args:
        raw: Blueprint mapping, a previously compiled blueprint, or None

    Returns:
        CompiledBlueprint with defaults applied
    """
    if isinstance(raw, CompiledBlueprint):
        raw = raw.to_blueprint()
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        logger.warning(f"Blueprint must be a mapping, got {type(raw).__name__}; using defaults")
        raw = {}

    steps = [parse_step(entry) for entry in _as_list(raw.get("steps"), "steps") if entry]

    compiled = CompiledBlueprint(
        versions=_compile_versions(raw.get("preferredVersions")),
        php_extension_bundles=_compile_bundles(raw.get("phpExtensionBundles")),
        features=_compile_features(raw.get("features")),
        extra_libraries=_unique_strings(_as_list(raw.get("extraLibraries"), "extraLibraries")),
        landing_page=raw.get("landingPage") if isinstance(raw.get("landingPage"), str) else None,
        steps=steps,
    )
    logger.debug(
        f"Compiled blueprint: php={compiled.versions.php}, wp={compiled.versions.wp}, "
        f"steps={compiled.step_kinds}"
    )
    return compiled


def _compile_versions(value: Any) -> Versions:
    if not isinstance(value, Mapping):
        if value is not None:
            logger.warning("preferredVersions must be an object; using defaults")
        value = {}

    php = value.get("php")
    if php not in SUPPORTED_PHP_VERSIONS:
        if php not in (None, "latest"):
            logger.warning(f"Unsupported PHP version {php!r}; using {LATEST_PHP_VERSION}")
        php = LATEST_PHP_VERSION

    wp = value.get("wp")
    if not isinstance(wp, str) or not wp:
        wp = LATEST_WP_VERSION

    return Versions(php=php, wp=wp)


def _compile_bundles(value: Any) -> list[str]:
    bundles = _unique_strings(_as_list(value, "phpExtensionBundles"))
    return bundles or list(DEFAULT_EXTENSION_BUNDLES)


def _compile_features(value: Any) -> dict[str, bool]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        logger.warning("features must be an object; ignoring")
        return {}
    return {str(name): bool(flag) for name, flag in value.items()}


def _as_list(value: Any, field_name: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    logger.warning(f"{field_name} must be a list; ignoring")
    return []


def _unique_strings(items: list[Any]) -> list[str]:
    seen: list[str] = []
    for item in items:
        if isinstance(item, str) and item not in seen:
            seen.append(item)
    return seen

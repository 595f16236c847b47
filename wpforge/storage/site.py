"""
Site Metadata Schemas.

A site is a named WordPress instance with a storage backend. Its
metadata keeps the Blueprint it was created from and the runtime
configuration (versions, extension bundles, features, extra libraries)
needed to boot it again once WordPress is already installed on its
persistent storage.
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from wpforge.blueprint.compiler import compile_blueprint
from wpforge.blueprint.schemas import CompiledBlueprint

logger = logging.getLogger(__name__)

_SLUG_UNSAFE = re.compile(r"[^a-z0-9-]+")

_NAME_ADJECTIVES = ("Bright", "Quiet", "Rapid", "Gentle", "Brave", "Clever", "Sunny", "Silver")
_NAME_NOUNS = ("Harbor", "Meadow", "Canyon", "Orchard", "Summit", "River", "Garden", "Forest")


class SiteStorage(str, Enum):
    """Where a site's files persist between boots."""

    NONE = "none"
    OPFS = "opfs"
    LOCAL_FS = "local-fs"

    @property
    def is_persistent(self) -> bool:
        return self != SiteStorage.NONE


class RuntimeConfiguration(BaseModel):
    """
    Runtime settings derived from a site's original Blueprint.

    Booting an already installed site runs this in place of the original
    Blueprint: it fixes the runtime but carries no steps.
    """

    preferred_versions: dict[str, str] = Field(default_factory=dict, alias="preferredVersions")
    php_extension_bundles: list[str] = Field(
        default_factory=lambda: ["kitchen-sink"], alias="phpExtensionBundles"
    )
    features: dict[str, bool] = Field(default_factory=dict)
    extra_libraries: list[str] = Field(default_factory=list, alias="extraLibraries")

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def from_compiled(
        cls,
        compiled: CompiledBlueprint,
        raw_bundles: Any = None,
    ) -> RuntimeConfiguration:
        """
        Build from a compiled Blueprint.

        Extension bundles are taken from the raw Blueprint when it sets
        them, otherwise ``kitchen-sink``.
        """
        bundles = raw_bundles if isinstance(raw_bundles, list) and raw_bundles else ["kitchen-sink"]
        return cls(
            preferred_versions={"wp": compiled.versions.wp, "php": compiled.versions.php},
            php_extension_bundles=[b for b in bundles if isinstance(b, str)] or ["kitchen-sink"],
            features=dict(compiled.features),
            extra_libraries=list(compiled.extra_libraries),
        )

    def to_blueprint(self) -> dict[str, Any]:
        """Raw Blueprint form, without steps."""
        return self.model_dump(mode="json", by_alias=True)


class SiteMetadata(BaseModel):
    """
    Metadata of one site.

    Read-only input to boot; updates produce new values.
    """

    slug: str
    name: str
    id: str = Field(default_factory=lambda: str(uuid4()))
    when_created: int = Field(default_factory=lambda: int(time.time() * 1000), alias="whenCreated")
    storage: SiteStorage = SiteStorage.NONE
    original_blueprint: dict[str, Any] = Field(default_factory=dict, alias="originalBlueprint")
    runtime_configuration: RuntimeConfiguration = Field(
        default_factory=RuntimeConfiguration, alias="runtimeConfiguration"
    )

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def directory_name(self) -> str:
        return get_directory_name_for_slug(self.slug)

    def with_storage(self, storage: SiteStorage) -> SiteMetadata:
        """Copy of this metadata using a different storage backend."""
        return self.model_copy(update={"storage": storage})


def derive_slug_from_site_name(name: str) -> str:
    """
    URL and filesystem safe slug for a site name.

        >>> derive_slug_from_site_name("My Cool Site!")
        'my-cool-site'
    """
    slug = re.sub(r"\s+", "-", name.strip().lower())
    slug = _SLUG_UNSAFE.sub("", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")


def get_directory_name_for_slug(slug: str) -> str:
    """Name of the site's directory in the object store root."""
    return f"site-{slug}"


def random_site_name() -> str:
    return f"{secrets.choice(_NAME_ADJECTIVES)} {secrets.choice(_NAME_NOUNS)}"


def create_site_metadata(
    name: str | None = None,
    blueprint: dict[str, Any] | None = None,
    storage: SiteStorage | str = SiteStorage.NONE,
) -> SiteMetadata:
    """
    Create metadata for a new site.

    Args:
        name: Display name (a random one is picked when empty)
        blueprint: Raw Blueprint the site is created from
        storage: Storage backend

    Returns:
        SiteMetadata with a derived slug and the runtime configuration
        compiled from ``blueprint``
    """
    name = name or random_site_name()
    blueprint = dict(blueprint or {})
    compiled = compile_blueprint(blueprint)

    site = SiteMetadata(
        slug=derive_slug_from_site_name(name) or f"site-{uuid4().hex[:8]}",
        name=name,
        storage=SiteStorage(storage),
        original_blueprint=blueprint,
        runtime_configuration=RuntimeConfiguration.from_compiled(
            compiled, blueprint.get("phpExtensionBundles")
        ),
    )
    logger.info(f"Created site metadata: slug={site.slug}, storage={site.storage.value}")
    return site

"""
Compiled Blueprint Schema.

A CompiledBlueprint is the normalized, defaulted form of a Blueprint
document (the "manifest"): versions and extension bundles are always
populated and every step entry is parsed. It is immutable once built.

Wire form of a raw Blueprint:
    {
        "preferredVersions": {"php": "8.3", "wp": "6.6"},
        "phpExtensionBundles": ["kitchen-sink"],
        "features": {"networking": true},
        "extraLibraries": [],
        "landingPage": "/wp-admin/",
        "steps": [...]
    }
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .steps import InvalidStep, Step, dump_step


class Versions(BaseModel):
    """Runtime (PHP) and application (WordPress) versions."""

    php: str
    wp: str

    class Config:
        frozen = True


class CompiledBlueprint(BaseModel):
    """Normalized Blueprint ready for the step interpreter."""

    versions: Versions
    php_extension_bundles: list[str] = Field(default_factory=list)
    features: dict[str, bool] = Field(default_factory=dict)
    extra_libraries: list[str] = Field(default_factory=list)
    landing_page: str | None = None
    steps: list[Step | InvalidStep] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def step_kinds(self) -> list[str]:
        return [step.step for step in self.steps]

    def to_blueprint(self) -> dict[str, Any]:
        """Serialize back to the raw Blueprint wire form."""
        blueprint: dict[str, Any] = {
            "preferredVersions": {"php": self.versions.php, "wp": self.versions.wp},
            "phpExtensionBundles": list(self.php_extension_bundles),
            "features": dict(self.features),
            "extraLibraries": list(self.extra_libraries),
            "steps": [dump_step(step) for step in self.steps],
        }
        if self.landing_page is not None:
            blueprint["landingPage"] = self.landing_page
        return blueprint

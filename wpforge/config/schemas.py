"""
Configuration Schemas for wpforge.

Pydantic models for engine settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from wpforge.blueprint.steps import ConflictPolicy


def _default_state_dir() -> Path:
    return Path.home() / ".wpforge"


class AppSettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access. Persistent site storage lives
    under ``state_dir``: the object store root in ``opfs/`` and the
    saved local directory handles in ``directory-handles.json``.
    """

    # Service identity
    service_name: str = "wpforge"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Resource fetching
    http_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    user_agent: str = Field("wpforge/0.1.0", description="User-Agent for downloads")
    git_executable: str = Field("git", description="git binary used for git-directory resources")

    # Storage
    state_dir: Path = Field(default_factory=_default_state_dir)
    mountpoint: str = Field("/wordpress", description="Runtime path persistent storage mounts at")

    # Installs
    default_if_already_installed: ConflictPolicy = Field(
        ConflictPolicy.OVERWRITE,
        description="Conflict policy used when a step does not set one",
    )

    class Config:
        env_prefix = "WPFORGE_"
        case_sensitive = False

    @property
    def opfs_root(self) -> Path:
        """Host directory backing browser-local object storage."""
        return self.state_dir / "opfs"

    @property
    def directory_handles_file(self) -> Path:
        """JSON file holding saved local directory handles."""
        return self.state_dir / "directory-handles.json"

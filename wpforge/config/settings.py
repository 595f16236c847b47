"""
Settings access for wpforge.

Provides a cached AppSettings instance built from the environment.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from .schemas import AppSettings

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    state_dir = os.getenv("WPFORGE_STATE_DIR")
    return AppSettings(
        # Service
        service_name=os.getenv("WPFORGE_SERVICE_NAME", "wpforge"),
        environment=os.getenv("WPFORGE_ENVIRONMENT", "development"),
        debug=os.getenv("WPFORGE_DEBUG", "false").lower() == "true",
        log_level=os.getenv("WPFORGE_LOG_LEVEL", "INFO"),
        # Resource fetching
        http_timeout=float(os.getenv("WPFORGE_HTTP_TIMEOUT", "30")),
        user_agent=os.getenv("WPFORGE_USER_AGENT", "wpforge/0.1.0"),
        git_executable=os.getenv("WPFORGE_GIT_EXECUTABLE", "git"),
        # Storage
        **({"state_dir": Path(state_dir).expanduser()} if state_dir else {}),
        mountpoint=os.getenv("WPFORGE_MOUNTPOINT", "/wordpress"),
        # Installs
        default_if_already_installed=os.getenv(
            "WPFORGE_DEFAULT_IF_ALREADY_INSTALLED", "overwrite"
        ),
    )


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Logging configured: level={level}, environment={settings.environment}")

"""
wpforge Configuration

Environment-driven settings for the provisioning engine.
"""

from .schemas import AppSettings
from .settings import configure_logging, get_settings

__all__ = [
    "AppSettings",
    "configure_logging",
    "get_settings",
]

"""
Activation Controller.

Thin layer over the runtime's activation primitives. Activation is a
best-effort convenience: a failure is reported as ActivationError but
the installed files stay on disk.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wpforge.errors import ActivationError

if TYPE_CHECKING:
    from wpforge.interpreter.progress import ProgressObserver
    from wpforge.runtime.base import Runtime

logger = logging.getLogger(__name__)


class ActivationController:
    """Activates installed plugins and themes through the runtime."""

    def __init__(self, runtime: Runtime):
        self._runtime = runtime

    async def activate_plugin(
        self,
        plugin_path: str,
        plugin_name: str | None = None,
        progress: ProgressObserver | None = None,
    ) -> None:
        """
        Activate the plugin installed at ``plugin_path``.

        Raises:
            ActivationError: The runtime refused or failed the activation
        """
        name = plugin_name or plugin_path.rstrip("/").rsplit("/", 1)[-1]
        _caption(progress, f"Activating {name}")
        try:
            await self._runtime.activate_plugin(plugin_path, name)
        except ActivationError:
            raise
        except Exception as e:
            raise ActivationError(f"Could not activate {name}: {e}", path=plugin_path) from e
        logger.info(f"Plugin {name} activated")

    async def activate_theme(
        self,
        theme_folder_name: str,
        progress: ProgressObserver | None = None,
    ) -> None:
        """
        Activate the theme in ``wp-content/themes/<theme_folder_name>``.

        Raises:
            ActivationError: The runtime refused or failed the activation
        """
        _caption(progress, f"Activating {theme_folder_name}")
        try:
            await self._runtime.activate_theme(theme_folder_name)
        except ActivationError:
            raise
        except Exception as e:
            raise ActivationError(
                f"Could not activate theme {theme_folder_name}: {e}",
                path=theme_folder_name,
            ) from e
        logger.info(f"Theme {theme_folder_name} activated")


def _caption(progress: ProgressObserver | None, text: str) -> None:
    if progress is not None:
        progress.set_caption(text)

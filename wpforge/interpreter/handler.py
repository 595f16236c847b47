"""
Step handler abstraction.

Handlers are single-responsibility executors for one step kind. The
interpreter looks them up by the step's ``step`` tag.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import StepContext, StepOutcome

logger = logging.getLogger(__name__)


class StepHandler(ABC):
    """
    Base class for step handlers.

    Subclasses must implement:
    - kind: The step tag this handler executes
    - handle(): Execute the step

    Optional overrides:
    - validate(): Precondition checks run before any step executes
    - describe(): Caption shown while the step runs
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """Step tag, e.g. ``installPlugin``."""
        ...

    def validate(self, step: Any) -> None:
        """
        Check preconditions without side effects.

        Raises:
            InvalidStepError: The step cannot run
        """

    def describe(self, step: Any) -> str:
        return f"Running {self.kind}"

    @abstractmethod
    async def handle(self, step: Any, ctx: StepContext) -> StepOutcome:
        """
        Execute the step.

        Raises:
            ProvisioningError: The step failed; the run aborts
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind='{self.kind}')"


class HandlerRegistry:
    """
    Maps step kinds to handlers.

    Example:
        registry = HandlerRegistry()
        registry.register(InstallPluginHandler())
        handler = registry.get("installPlugin")
    """

    def __init__(self, handlers: list[StepHandler] | None = None) -> None:
        self._handlers: dict[str, StepHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: StepHandler) -> None:
        """Register a handler, replacing any handler for the same kind."""
        if handler.kind in self._handlers:
            logger.debug(f"Replacing handler for step kind '{handler.kind}'")
        self._handlers[handler.kind] = handler

    def get(self, kind: str) -> StepHandler | None:
        return self._handlers.get(kind)

    @property
    def kinds(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, kind: str) -> bool:
        return kind in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

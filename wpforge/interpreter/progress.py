"""
Progress reporting for blueprint runs.

Progress is an advisory side channel: observers receive human-readable
captions and can never affect control flow. ProgressReporter wraps any
observer and logs (instead of propagating) its failures.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ProgressObserver(Protocol):
    """Receives progress captions."""

    def set_caption(self, text: str) -> None:
        ...


@dataclass
class ProgressTracker:
    """
    In-memory observer that keeps every caption it receives.

    Example:
        tracker = ProgressTracker()
        await interpreter.run(manifest, runtime, progress=tracker)
        tracker.captions  # ["Running installPlugin (1/1)", ...]
    """

    captions: list[str] = field(default_factory=list)

    @property
    def caption(self) -> str:
        """Most recent caption."""
        return self.captions[-1] if self.captions else ""

    def set_caption(self, text: str) -> None:
        self.captions.append(text)


class ProgressReporter:
    """Fire-and-forget wrapper around an optional observer."""

    def __init__(self, observer: ProgressObserver | None = None):
        self._observer = observer

    def set_caption(self, text: str) -> None:
        logger.debug(f"Progress: {text}")
        if self._observer is None:
            return
        try:
            self._observer.set_caption(text)
        except Exception as e:
            logger.warning(f"Progress observer failed on caption {text!r}: {e}")

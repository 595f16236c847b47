"""
Run context and results for the step interpreter.

The context carries run-scoped collaborators (runtime, resolver,
installer, activator, progress) and timing records to every step
handler. Results are collected per step.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from wpforge.blueprint.steps import ConflictPolicy

if TYPE_CHECKING:
    from wpforge.errors import ActivationError
    from wpforge.install.activation import ActivationController
    from wpforge.install.asset import AssetInstaller, InstallResult
    from wpforge.resources.resolver import ResourceResolver
    from wpforge.runtime.base import Runtime

    from .progress import ProgressReporter


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class StepContext:
    """
    Run-scoped context passed to every step handler.

    Created by the interpreter at the start of a run.
    """

    runtime: Runtime
    resolver: ResourceResolver
    installer: AssetInstaller
    activator: ActivationController
    progress: ProgressReporter
    default_conflict_policy: ConflictPolicy = ConflictPolicy.OVERWRITE

    # Execution identification
    execution_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=_utc_now)

    # Audit trail
    step_timings: dict[int, float] = field(default_factory=dict)

    @property
    def document_root(self) -> str:
        return self.runtime.document_root

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since the run started."""
        delta = datetime.now(UTC) - self.started_at
        return delta.total_seconds() * 1000

    def record_timing(self, step_index: int, duration_ms: float) -> None:
        self.step_timings[step_index] = duration_ms


@dataclass
class StepOutcome:
    """What a handler reports back about the step it ran."""

    install_result: InstallResult | None = None
    activation_error: ActivationError | None = None


@dataclass
class StepResult:
    """Result of one executed step."""

    index: int
    kind: str
    install_result: InstallResult | None = None
    activation_error: ActivationError | None = None
    duration_ms: float = 0.0

    @property
    def activated(self) -> bool:
        return self.install_result is not None and self.activation_error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind,
            "asset_folder_path": self.install_result.asset_folder_path if self.install_result else None,
            "asset_folder_name": self.install_result.asset_folder_name if self.install_result else None,
            "activation_error": str(self.activation_error) if self.activation_error else None,
            "duration_ms": self.duration_ms,
        }


@dataclass
class RunResult:
    """
    Result of a blueprint run.

    Iterates as the sequence of StepResults, in document order.
    """

    execution_id: UUID
    steps: list[StepResult] = field(default_factory=list)
    duration_ms: float = 0.0

    def __iter__(self) -> Iterator[StepResult]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> StepResult:
        return self.steps[index]

    @property
    def activation_errors(self) -> list[ActivationError]:
        return [s.activation_error for s in self.steps if s.activation_error is not None]

    @property
    def install_results(self) -> list[InstallResult]:
        return [s.install_result for s in self.steps if s.install_result is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "execution_id": str(self.execution_id),
            "duration_ms": self.duration_ms,
            "steps": [s.to_dict() for s in self.steps],
            "activation_errors": [str(e) for e in self.activation_errors],
        }

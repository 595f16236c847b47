"""
Step Interpreter for wpforge.

Executes the steps of a compiled Blueprint against a runtime.

Execution Model:
- Every step is validated before any step runs (no side effects on a
  manifest that cannot complete)
- Steps run strictly in document order, one at a time
- The first ProvisioningError aborts the run; it is annotated with the
  step index and kind and re-raised
- Any other exception is wrapped in StepExecutionError
- ActivationError is collected on the step result and the run continues
- Effects of completed steps persist after a failure
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from wpforge.blueprint.compiler import compile_blueprint
from wpforge.blueprint.schemas import CompiledBlueprint
from wpforge.blueprint.steps import ConflictPolicy, InvalidStep
from wpforge.errors import InvalidStepError, ProvisioningError, StepExecutionError
from wpforge.install.activation import ActivationController
from wpforge.install.asset import AssetInstaller
from wpforge.resources.resolver import ResourceResolver

from .context import RunResult, StepContext, StepResult
from .handler import HandlerRegistry, StepHandler
from .handlers import default_handlers
from .progress import ProgressReporter

if TYPE_CHECKING:
    from wpforge.config.schemas import AppSettings
    from wpforge.runtime.base import Runtime

    from .progress import ProgressObserver

logger = logging.getLogger(__name__)


class StepInterpreter:
    """
    Runs compiled Blueprints.

    Example:
        interpreter = StepInterpreter(resolver=resolver)
        result = await interpreter.run(manifest, runtime, progress=tracker)
        for step in result:
            print(step.kind, step.install_result)
    """

    def __init__(
        self,
        registry: HandlerRegistry | None = None,
        *,
        resolver: ResourceResolver | None = None,
        default_conflict_policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
        settings: AppSettings | None = None,
    ):
        self.registry = registry or HandlerRegistry(default_handlers())
        self._resolver = resolver
        self._settings = settings
        self.default_conflict_policy = default_conflict_policy

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        resolver: ResourceResolver | None = None,
    ) -> StepInterpreter:
        """Interpreter using the configured resolver and default conflict policy."""
        return cls(
            resolver=resolver,
            default_conflict_policy=settings.default_if_already_installed,
            settings=settings,
        )

    async def run(
        self,
        manifest: CompiledBlueprint | Mapping[str, Any],
        runtime: Runtime,
        progress: ProgressObserver | None = None,
    ) -> RunResult:
        """
        Execute every step of ``manifest`` against ``runtime``.

        Args:
            manifest: Compiled blueprint (raw mappings are compiled first)
            runtime: Target runtime
            progress: Optional caption observer

        Returns:
            RunResult with one StepResult per executed step

        Raises:
            InvalidStepError: Preflight rejected a step; nothing was run
            ProvisioningError: A step failed; earlier effects persist
        """
        if not isinstance(manifest, CompiledBlueprint):
            manifest = compile_blueprint(manifest)

        plan = self._preflight(manifest)

        resolver = self._resolver or self._new_resolver()
        owns_resolver = self._resolver is None
        ctx = StepContext(
            runtime=runtime,
            resolver=resolver,
            installer=AssetInstaller(runtime),
            activator=ActivationController(runtime),
            progress=ProgressReporter(progress),
            default_conflict_policy=self.default_conflict_policy,
            execution_id=uuid4(),
        )
        result = RunResult(execution_id=ctx.execution_id)

        logger.info(
            f"Blueprint run starting: execution_id={str(ctx.execution_id)[:8]}..., "
            f"steps={manifest.step_kinds}"
        )

        try:
            total = len(plan)
            for index, (step, handler) in enumerate(plan):
                result.steps.append(await self._run_step(index, total, step, handler, ctx))
        finally:
            if owns_resolver:
                await resolver.close()

        result.duration_ms = ctx.elapsed_ms
        logger.info(
            f"Blueprint run complete: execution_id={str(ctx.execution_id)[:8]}..., "
            f"steps={len(result)}, activation_errors={len(result.activation_errors)}, "
            f"duration={result.duration_ms:.1f}ms"
        )
        return result

    def _new_resolver(self) -> ResourceResolver:
        if self._settings is not None:
            return ResourceResolver.from_settings(self._settings)
        return ResourceResolver()

    def _preflight(self, manifest: CompiledBlueprint) -> list[tuple[Any, StepHandler]]:
        """Pair every step with its handler, validating each one."""
        plan: list[tuple[Any, StepHandler]] = []
        for index, step in enumerate(manifest.steps):
            kind = step.step
            if isinstance(step, InvalidStep):
                raise InvalidStepError(
                    f"Invalid step: {step.reason}", step_index=index, step_kind=kind or None
                )

            handler = self.registry.get(kind)
            if handler is None:
                raise InvalidStepError(
                    f"No handler registered for step '{kind}'",
                    step_index=index,
                    step_kind=kind,
                )

            try:
                handler.validate(step)
            except ProvisioningError as e:
                raise e.annotate(index, kind)
            plan.append((step, handler))
        return plan

    async def _run_step(
        self,
        index: int,
        total: int,
        step: Any,
        handler: StepHandler,
        ctx: StepContext,
    ) -> StepResult:
        kind = handler.kind
        ctx.progress.set_caption(f"Running {kind} ({index + 1}/{total})")
        logger.info(f"Step {index} {kind}: {handler.describe(step)}")

        start_time = time.perf_counter()
        try:
            outcome = await handler.handle(step, ctx)
        except ProvisioningError as e:
            logger.error(f"Step {index} {kind} failed: {e}")
            raise e.annotate(index, kind)
        except Exception as e:
            logger.error(f"Step {index} {kind} error: {e}", exc_info=True)
            raise StepExecutionError(
                f"{type(e).__name__}: {e}",
                cause=e,
                step_index=index,
                step_kind=kind,
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        ctx.record_timing(index, duration_ms)
        ctx.progress.set_caption(f"Completed {kind} ({index + 1}/{total})")
        logger.debug(f"Step {index} {kind}: time={duration_ms:.1f}ms")

        return StepResult(
            index=index,
            kind=kind,
            install_result=outcome.install_result,
            activation_error=outcome.activation_error,
            duration_ms=duration_ms,
        )

    def __repr__(self) -> str:
        return f"StepInterpreter(kinds={self.registry.kinds})"


async def run_blueprint(
    blueprint: CompiledBlueprint | Mapping[str, Any] | None,
    runtime: Runtime,
    *,
    resolver: ResourceResolver | None = None,
    progress: ProgressObserver | None = None,
) -> RunResult:
    """Compile ``blueprint`` and run it with the built-in handlers."""
    interpreter = StepInterpreter(resolver=resolver)
    return await interpreter.run(compile_blueprint(blueprint), runtime, progress=progress)

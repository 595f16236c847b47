"""
wpforge Step Interpreter.

Runs the steps of a compiled Blueprint in order against a runtime.
"""

from .context import RunResult, StepContext, StepOutcome, StepResult
from .executor import StepInterpreter, run_blueprint
from .handler import HandlerRegistry, StepHandler
from .handlers import (
    ActivatePluginHandler,
    ActivateThemeHandler,
    InstallPluginHandler,
    InstallThemeHandler,
    MkdirHandler,
    RmHandler,
    WriteFileHandler,
    default_handlers,
)
from .progress import ProgressObserver, ProgressReporter, ProgressTracker

__all__ = [
    # Interpreter
    "StepInterpreter",
    "run_blueprint",
    # Context & results
    "StepContext",
    "StepOutcome",
    "StepResult",
    "RunResult",
    # Handlers
    "StepHandler",
    "HandlerRegistry",
    "InstallPluginHandler",
    "InstallThemeHandler",
    "ActivatePluginHandler",
    "ActivateThemeHandler",
    "WriteFileHandler",
    "MkdirHandler",
    "RmHandler",
    "default_handlers",
    # Progress
    "ProgressObserver",
    "ProgressReporter",
    "ProgressTracker",
]

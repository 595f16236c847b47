"""
Exceptions for wpforge provisioning.

Every failure the engine reports derives from ProvisioningError so callers
can catch the whole family. The step interpreter annotates errors with the
position and kind of the failing step before re-raising them.

Taxonomy:
    InvalidStepError       - malformed or ambiguous step
    ResourceFetchError     - network or repository resolution failure
    MalformedAssetError    - structural precondition violated
    AlreadyInstalledError  - conflict policy "error" hit an existing unit
    ActivationError        - runtime refused or failed activation
    FilesystemError        - write/probe I/O failure
    BootDecisionError      - mount device unavailable at boot
    StepExecutionError     - unexpected exception raised inside a step
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base exception for provisioning errors."""

    def __init__(
        self,
        message: str,
        *,
        step_index: int | None = None,
        step_kind: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.step_index = step_index
        self.step_kind = step_kind

    def annotate(self, step_index: int, step_kind: str) -> ProvisioningError:
        """Attach the failing step's position and kind."""
        self.step_index = step_index
        self.step_kind = step_kind
        return self

    def __str__(self) -> str:
        if self.step_index is None:
            return self.message
        if not self.step_kind:
            return f"[step {self.step_index}] {self.message}"
        return f"[step {self.step_index} {self.step_kind}] {self.message}"


class InvalidStepError(ProvisioningError):
    """Raised when a step is malformed, ambiguous, or has no handler."""


class ResourceFetchError(ProvisioningError):
    """Raised when a resource cannot be fetched."""

    def __init__(
        self,
        message: str,
        *,
        locator: str = "",
        status_code: int | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.locator = locator
        self.status_code = status_code

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code:
            text = f"{text} (status={self.status_code})"
        return text


class MalformedAssetError(ProvisioningError):
    """Raised when installable content violates a structural precondition."""


class AlreadyInstalledError(ProvisioningError):
    """Raised when ifAlreadyInstalled is "error" and the unit already exists."""

    def __init__(self, message: str, *, asset_folder_path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.asset_folder_path = asset_folder_path


class ActivationError(ProvisioningError):
    """Raised when the runtime could not recognize or enable a unit."""

    def __init__(self, message: str, *, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class FilesystemError(ProvisioningError):
    """Raised on write or probe I/O failure."""

    def __init__(self, message: str, *, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class BootDecisionError(ProvisioningError):
    """Raised when the storage backend for a site cannot be used."""

    def __init__(self, message: str, *, slug: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.slug = slug


class StepExecutionError(ProvisioningError):
    """Raised when a step fails with an exception outside the taxonomy."""

    def __init__(self, message: str, *, cause: BaseException | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause


__all__ = [
    "ProvisioningError",
    "InvalidStepError",
    "ResourceFetchError",
    "MalformedAssetError",
    "AlreadyInstalledError",
    "ActivationError",
    "FilesystemError",
    "BootDecisionError",
    "StepExecutionError",
]

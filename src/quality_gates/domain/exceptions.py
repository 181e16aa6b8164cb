"""Domain exceptions for the quality-gate pipeline.

All domain-specific exceptions inherit from ``QualityGateError`` so callers
can catch the full family with a single ``except`` clause when needed.
Component boundaries (validators, the applier) convert these into issues or
log records; they are never meant to reach the caller of a pipeline run.
"""

from __future__ import annotations

from typing import Any


class QualityGateError(Exception):
    """Base exception for all quality-gate errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class CommandError(QualityGateError):
    """Raised when an external process cannot be started or times out.

    A command that runs and exits non-zero is *not* an error: linters exit
    non-zero when they find problems.
    """

    def __init__(
        self,
        message: str = "External command failed",
        command: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.command = command


class AuditError(QualityGateError):
    """Raised when the visual/audit collaborator cannot produce results."""

    def __init__(
        self,
        message: str = "Visual audit failed",
        url: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class CorrectionError(QualityGateError):
    """Raised when a single correction cannot be written to its target file."""

    def __init__(
        self,
        message: str = "Correction could not be applied",
        file_path: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.file_path = file_path

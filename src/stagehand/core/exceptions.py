"""
stagehand.core.exceptions - Custom Exception Hierarchy
========================================================

This module defines a structured exception hierarchy for Stagehand.
Components raise and catch specific exception types that carry contextual
information instead of bare strings.

Exception Hierarchy:
    StagehandError (base)
        ├── ConfigurationError       - Invalid config file or values
        ├── TransientIOError         - Locked/busy resource (retryable)
        ├── PermanentIOError         - Permission, disk floor, retries exhausted
        ├── OperationCancelledError  - Cooperative cancellation was requested
        ├── ScriptLaunchError        - Interpreter could not be started
        ├── ScriptExecutionError     - Script exited with a non-zero code
        ├── EngineSelectionError     - No engine supports the script extension
        └── ConventionError          - A pipeline step failed

Error Handling Flow:
    File operation raises OSError
        → RetryTracker decides whether another attempt is allowed
        → If yes: sleep with backoff and try again
        → If no:  raise PermanentIOError (or log and swallow, per caller)

    Convention raises any StagehandError
        → ConventionProcessor wraps it in ConventionError naming the step
        → DeploymentExecutor logs one diagnostic and returns exit code 1

Malformed service messages are deliberately absent from this list: they are
never raised, they degrade to plain output.

Usage:
    >>> from stagehand.core.exceptions import ScriptExecutionError
    >>> raise ScriptExecutionError(script_path="/app/Deploy.sh", exit_code=3)
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
class StagehandError(Exception):
    """Base exception for all Stagehand errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code for programmatic handling.
            Convention: UPPER_SNAKE_CASE (e.g., "RETRIES_EXHAUSTED").
        details: Arbitrary dict with additional debugging context such as
            the offending path or exit code.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary (for structlog and reports)."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(StagehandError):
    """Raised when Stagehand configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError(
        ...     message="stagehand.yaml is not valid YAML",
        ...     error_code="INVALID_YAML",
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# File-System Errors
# =============================================================================
# Both carry the path so the pipeline can report which file or directory
# could not be handled.
# =============================================================================
class TransientIOError(StagehandError):
    """A locked or busy resource; worth another attempt within retry bounds."""

    def __init__(
        self,
        message: str,
        path: str,
        error_code: str = "TRANSIENT_IO_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["path"] = path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.path = path


class PermanentIOError(StagehandError):
    """A file-system failure that retrying will not fix.

    Common Causes:
        - Retries exhausted on a locked file
        - Permission denied
        - Free disk space below the 500MB floor

    Example:
        >>> raise PermanentIOError(
        ...     message="Could not delete file",
        ...     path="/app/Deploy.sh",
        ...     error_code="RETRIES_EXHAUSTED",
        ... )
    """

    def __init__(
        self,
        message: str,
        path: str,
        error_code: str = "PERMANENT_IO_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["path"] = path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.path = path


class OperationCancelledError(StagehandError):
    """Raised by purge/copy walks when their cancellation signal is set.

    Already completed sub-steps are left in place.
    """

    def __init__(
        self,
        message: str,
        path: str,
        error_code: str = "OPERATION_CANCELLED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["path"] = path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.path = path


# =============================================================================
# Script Errors
# =============================================================================
class ScriptLaunchError(StagehandError):
    """Raised when the script interpreter cannot be started at all.

    Missing interpreters and permission problems are configuration issues,
    so they are never retried.
    """

    def __init__(
        self,
        message: str,
        executable: str,
        error_code: str = "SCRIPT_LAUNCH_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["executable"] = executable

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.executable = executable


class ScriptExecutionError(StagehandError):
    """Raised when a script returns a non-zero exit code.

    Attributes:
        script_path: The user script that failed.
        exit_code: The exit code reported by the interpreter.
    """

    def __init__(
        self,
        script_path: str,
        exit_code: int,
        message: Optional[str] = None,
        error_code: str = "SCRIPT_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["script_path"] = script_path
        enriched_details["exit_code"] = exit_code

        super().__init__(
            message=message or (
                f"Script '{script_path}' returned non-zero exit code: {exit_code}. "
                f"Deployment terminated."
            ),
            error_code=error_code,
            details=enriched_details,
        )

        self.script_path = script_path
        self.exit_code = exit_code


class EngineSelectionError(StagehandError):
    """Raised when no script engine on this platform supports a script."""

    def __init__(
        self,
        message: str,
        script_path: str,
        error_code: str = "NO_SCRIPT_ENGINE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["script_path"] = script_path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.script_path = script_path


# =============================================================================
# Convention Error
# =============================================================================
# Raised by the ConventionProcessor when a step fails. The underlying error
# is chained (``raise ... from``) and its code/details are folded in so a
# single diagnostic names the step, the path and the exit code.
# =============================================================================
class ConventionError(StagehandError):
    """Raised when a convention fails and the deployment is aborted.

    Attributes:
        convention: Name of the convention that failed.
    """

    def __init__(
        self,
        message: str,
        convention: str,
        error_code: str = "CONVENTION_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["convention"] = convention

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.convention = convention

"""
Unified error handling for runstamp.

Realization failures never escape the realizer: they are reported as
conditions. The exceptions below are raised by the collaborators the
realizer drives (stamper, output extractor, repositories, manifest
loading) and by the CLI.

Exit Codes:
- 0: Success
- 1: Not ready (at least one pipeline did not reach Ready)
- 10: Configuration error
- 11: Repository error
- 12: Validation error (bad manifests)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    NOT_READY = 1
    CONFIG_ERROR = 10
    REPOSITORY_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class RunstampError(Exception):
    """Base exception for runstamp errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RunstampError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class RepositoryError(RunstampError):
    """Raised when the resource store rejects or cannot serve a request."""

    exit_code = ExitCode.REPOSITORY_ERROR


class ManifestError(RunstampError):
    """Raised when RunTemplate or Pipeline manifests cannot be loaded."""

    exit_code = ExitCode.VALIDATION_ERROR


class StampError(RunstampError):
    """Raised when a template document cannot be decoded or rendered."""

    exit_code = ExitCode.VALIDATION_ERROR


class OutputPathNotSatisfiedError(RunstampError):
    """Raised when a declared output path has no value on the object."""

    exit_code = ExitCode.NOT_READY


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(*, log_errors: bool = True) -> Callable[[F], F]:
    """
    Decorator for CLI handlers that provides unified error handling.

    Args:
        log_errors: If True, log errors to structlog

    Exit codes:
        - RunstampError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except RunstampError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: RunstampError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg

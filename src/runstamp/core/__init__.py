"""Core modules for runstamp - centralized definitions and utilities."""

from runstamp.core.errors import (
    ConfigurationError,
    ExitCode,
    ManifestError,
    OutputPathNotSatisfiedError,
    RepositoryError,
    RunstampError,
    StampError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "RunstampError",
    "ConfigurationError",
    "ManifestError",
    "OutputPathNotSatisfiedError",
    "RepositoryError",
    "StampError",
    "main_with_error_handling",
    "format_error_message",
]

"""Core modules for gridmetrics - centralized definitions and utilities."""

from gridmetrics.core.errors import (
    ConfigurationError,
    ExitCode,
    GridMetricsError,
    IncidentParseError,
    InsufficientDataError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "GridMetricsError",
    "ConfigurationError",
    "ValidationError",
    "IncidentParseError",
    "InsufficientDataError",
    "main_with_error_handling",
    "format_error_message",
]

"""
Errors raised by gridmetrics and the exit codes the CLI maps them to.

Library code raises; only CLI commands translate to exit codes, through
``main_with_error_handling``.

Exit Codes:
- 0: Success
- 1: Warning (report written, some outages left out of the indices)
- 10: Configuration error (invalid GRIDMETRICS_* settings, unknown estimation mode)
- 12: Validation error (unreadable snapshot, bad --now, strict estimation refusal)
- 127: Unknown/internal error
- 130: Interrupted
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Exit codes returned by gridmetrics commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class GridMetricsError(Exception):
    """
    Base error carrying an exit code and structured context.

    ``details`` ends up both in the ``command_error`` log event and, as
    ``key=value`` pairs, in the message shown to the user.
    """

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GridMetricsError):
    """Invalid settings or an unknown option value."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(GridMetricsError):
    """Input that cannot be used as given."""

    exit_code = ExitCode.VALIDATION_ERROR


class IncidentParseError(ValidationError):
    """Raised when an incident snapshot or record cannot be read."""


class InsufficientDataError(ValidationError):
    """Raised when an outage lacks the data needed for an index and no estimate is allowed."""


F = TypeVar("F", bound=Callable[..., int])


def format_error_message(error: GridMetricsError) -> str:
    """Message plus ``key=value`` details, for the console."""
    if not error.details:
        return error.message
    detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
    return f"{error.message} ({detail_str})"


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
    report: Callable[[str], None] | None = None,
) -> Callable[[F], F]:
    """
    Turn a command's exceptions into exit codes.

    GridMetricsError subclasses map to their ``exit_code``,
    KeyboardInterrupt to 130 and anything else to 127. Log events carry the
    command name. When ``report`` is given it receives a one-line message
    for the user, e.g. ``ux.error``.
    """

    def decorator(func: F) -> F:
        command = func.__name__.removesuffix("_command")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except GridMetricsError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        command=command,
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                if report:
                    report(format_error_message(e))
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted", command=command)
                return ExitCode.INTERRUPTED
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        command=command,
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                if report:
                    report(f"Unexpected {type(e).__name__}: {e}")
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator

"""
structlog setup for gridmetrics.

Events go through the stdlib ``logging`` root handler on stderr, so they
never interleave with a report printed on stdout.
"""

import logging
import sys
from typing import Any, Literal

import structlog

LogFormat = Literal["json", "console"]


def configure_logging(level: int | str = logging.INFO, log_format: LogFormat = "json") -> None:
    """Configure structlog at ``level``, as JSON lines or console text."""

    if isinstance(level, str):
        level = level.upper()

    if log_format == "console":
        renderer: Any = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Logger that adds ``kwargs`` (command, snapshot, ...) to every event."""

    return structlog.get_logger().bind(**kwargs)

"""
gridmetrics command line interface.

Usage:
    gridmetrics <command> [args]
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from gridmetrics import __version__
from gridmetrics.cli import ux
from gridmetrics.cli.metrics import handle_metrics_command, register_metrics_parsers
from gridmetrics.config.settings import get_settings
from gridmetrics.core.errors import ConfigurationError, format_error_message
from gridmetrics.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridmetrics",
        description="Distribution network reliability metrics",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        help="Logging level (defaults to GRIDMETRICS_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Log event rendering on stderr (defaults to GRIDMETRICS_LOG_FORMAT or json)",
    )
    subparsers = parser.add_subparsers(dest="command")
    register_metrics_parsers(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        configure_logging(args.log_level or "INFO", args.log_format or "json")
        ux.error(format_error_message(exc))
        return exc.exit_code

    configure_logging(args.log_level or settings.log_level, args.log_format or settings.log_format)

    exit_code = handle_metrics_command(args)
    if exit_code is None:
        parser.print_help()
        return 1
    return int(exit_code)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

"""
CLI commands for gridmetrics.
"""

from gridmetrics.cli.metrics import (
    analyze_command,
    export_command,
    summary_command,
    types_command,
)

__all__ = [
    "analyze_command",
    "export_command",
    "summary_command",
    "types_command",
]

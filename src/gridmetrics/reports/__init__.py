"""
Output formatters for metrics results.

Supports:
- table: rich console tables (rendered by the CLI)
- json: machine-readable JSON
- text: plain-text report
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from gridmetrics.reliability.models import MetricsResult
from gridmetrics.reports.csv_export import EXPORT_COLUMNS, export_incidents_csv, incidents_to_csv
from gridmetrics.reports.json_fmt import format_json
from gridmetrics.reports.text import format_text


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    TEXT = "text"


def format_result(
    result: MetricsResult,
    output_format: OutputFormat | str = OutputFormat.TEXT,
    output_file: Path | str | None = None,
) -> str:
    """
    Format a metrics result in the specified format.

    Table output is drawn directly on the console by the CLI; here it falls
    back to the plain-text report.
    """
    if isinstance(output_format, str):
        output_format = OutputFormat(output_format)

    formatters = {
        OutputFormat.JSON: format_json,
        OutputFormat.TEXT: format_text,
    }

    formatter = formatters.get(output_format, format_text)
    output = formatter(result)

    if output_file:
        Path(output_file).write_text(output, encoding="utf-8")

    return output


__all__ = [
    "EXPORT_COLUMNS",
    "OutputFormat",
    "export_incidents_csv",
    "format_json",
    "format_result",
    "format_text",
    "incidents_to_csv",
]

"""CSV export of an incident table."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable

import structlog

from gridmetrics.incidents.models import Incident

logger = structlog.get_logger()

EXPORT_COLUMNS = [
    "id",
    "posteName",
    "voltage",
    "depart",
    "type",
    "status",
    "createdAt",
    "declenchement",
    "finRetab",
    "duration",
    "affectedCustomers",
]


def incidents_to_csv(incidents: Iterable[Incident]) -> str:
    """Render incidents as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for incident in incidents:
        writer.writerow(incident.to_dict())
    return buffer.getvalue()


def export_incidents_csv(incidents: Iterable[Incident], output_path: str | Path) -> int:
    """
    Write incidents to a CSV file.

    Returns:
        Number of rows written
    """
    rows = list(incidents)
    path = Path(output_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(incidents_to_csv(rows), encoding="utf-8")
    logger.info("incidents_exported", path=str(path), rows=len(rows))
    return len(rows)

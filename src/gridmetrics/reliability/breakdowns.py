"""
Secondary breakdowns of an incident set: status distribution, per-feeder
counts, the type filter choices and the dashboard summary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from gridmetrics.incidents.models import Incident, IncidentStatus
from gridmetrics.reliability.models import (
    ALL_TYPES,
    DashboardSummary,
    DepartStats,
    StatusCount,
)

DEFAULT_DEPART_LIMIT = 8

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def status_breakdown(incidents: Sequence[Incident]) -> list[StatusCount]:
    """Count incidents per workflow status, in workflow order."""
    counts = {status: 0 for status in IncidentStatus}
    for incident in incidents:
        counts[incident.status] += 1

    total = len(incidents)
    return [
        StatusCount(status=status.value, count=count, percentage=_percentage(count, total))
        for status, count in counts.items()
    ]


def depart_breakdown(
    incidents: Iterable[Incident],
    limit: int = DEFAULT_DEPART_LIMIT,
) -> list[DepartStats]:
    """
    Group incidents by feeder.

    Incidents without a départ are ignored. Percentages are relative to the
    incidents that have one. Returns the ``limit`` busiest feeders.
    """
    groups: dict[str, dict[str, int]] = {}
    voltages: dict[str, str] = {}

    # Sorted so the voltage kept for a feeder does not depend on input order
    for incident in sorted(incidents, key=lambda i: i.id):
        if not incident.depart:
            continue
        bucket = groups.setdefault(incident.depart, {"count": 0, "dd_count": 0, "resolved": 0})
        bucket["count"] += 1
        if incident.is_definitive_outage:
            bucket["dd_count"] += 1
        if incident.status == IncidentStatus.RESOLVED:
            bucket["resolved"] += 1
        if incident.voltage and incident.depart not in voltages:
            voltages[incident.depart] = incident.voltage

    total = sum(bucket["count"] for bucket in groups.values())
    stats = [
        DepartStats(
            depart=depart,
            count=bucket["count"],
            dd_count=bucket["dd_count"],
            resolved=bucket["resolved"],
            voltage=voltages.get(depart, "N/A"),
            percentage=_percentage(bucket["count"], total),
            resolution_rate=_percentage(bucket["resolved"], bucket["count"]),
        )
        for depart, bucket in groups.items()
    ]
    stats.sort(key=lambda s: (-s.count, s.depart))
    return stats[:limit]


def available_types(incidents: Iterable[Incident]) -> list[str]:
    """Type filter choices: "All Types" followed by every code seen."""
    codes: set[str] = set()
    for incident in incidents:
        codes.update(incident.types)
    return [ALL_TYPES, *sorted(codes)]


def dashboard_summary(incidents: Sequence[Incident], recent: int = 3) -> DashboardSummary:
    """Headline counts and the most recently created incidents."""
    by_status = {status: 0 for status in IncidentStatus}
    for incident in incidents:
        by_status[incident.status] += 1

    newest_first = sorted(
        incidents,
        key=lambda i: (i.created_at or _OLDEST, i.id),
        reverse=True,
    )
    return DashboardSummary(
        total=len(incidents),
        resolved=by_status[IncidentStatus.RESOLVED],
        pending=by_status[IncidentStatus.PENDING],
        in_progress=by_status[IncidentStatus.IN_PROGRESS],
        recent=newest_first[: max(recent, 0)],
    )

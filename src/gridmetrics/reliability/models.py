"""
Reliability metrics data models.

Results are derived and ephemeral: they are recomputed from an incident
snapshot on every filter change and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from gridmetrics.incidents.models import Incident

ALL_TYPES = "All Types"


class TimeRange(str, Enum):
    """Named analysis windows offered by the analysis view."""

    LAST_30_DAYS = "Last 30 Days"
    LAST_60_DAYS = "Last 60 Days"
    LAST_90_DAYS = "Last 90 Days"
    LAST_6_MONTHS = "Last 6 Months"
    LAST_YEAR = "Last Year"

    @classmethod
    def from_label(cls, label: str | TimeRange | None) -> TimeRange | None:
        """Look up a range by label, ignoring case and surrounding spaces."""
        if isinstance(label, TimeRange):
            return label
        if not label:
            return None
        wanted = label.strip().lower()
        for time_range in cls:
            if time_range.value.lower() == wanted:
                return time_range
        return None


@dataclass(frozen=True)
class EngineConfig:
    """Network constants used by the index formulas."""

    total_customers: int = 10000
    average_power_per_customer_kw: float = 2.0


@dataclass(frozen=True)
class MonthlyCount:
    month: str  # YYYY-MM
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "count": self.count}


@dataclass
class ReliabilityIndices:
    """
    Power distribution reliability indices over the DD outages of a period.

    - dd_count: number of definitive trips
    - tci_hours: cumulative interruption time (TCI)
    - tmc_minutes: mean outage duration (TMC)
    - end_kwh: energy not supplied (END)
    - saidi: customer-hours of interruption per customer served
    - saifi: interruptions per customer served
    - caidi: saidi / saifi
    """

    dd_count: int = 0
    tci_hours: int = 0
    tmc_minutes: float = 0.0
    end_kwh: int = 0
    saidi: float = 0.0
    saifi: float = 0.0
    caidi: float = 0.0

    # Raw sums behind the indices
    total_interruption_hours: float = 0.0
    total_customer_hours: float = 0.0
    total_affected_customers: int = 0

    # Outages that needed a fallback value, and those left out of the sums
    estimated_count: int = 0
    insufficient_data: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dd_count": self.dd_count,
            "tci_hours": self.tci_hours,
            "tmc_minutes": self.tmc_minutes,
            "end_kwh": self.end_kwh,
            "saidi": self.saidi,
            "saifi": self.saifi,
            "caidi": self.caidi,
            "totals": {
                "interruption_hours": self.total_interruption_hours,
                "customer_hours": self.total_customer_hours,
                "affected_customers": self.total_affected_customers,
            },
            "estimated_count": self.estimated_count,
            "insufficient_data": list(self.insufficient_data),
        }


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "count": self.count, "percentage": self.percentage}


@dataclass(frozen=True)
class DepartStats:
    """Incident counts for one feeder (départ)."""

    depart: str
    count: int
    dd_count: int
    resolved: int
    voltage: str
    percentage: float
    resolution_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "depart": self.depart,
            "count": self.count,
            "dd_count": self.dd_count,
            "resolved": self.resolved,
            "voltage": self.voltage,
            "percentage": self.percentage,
            "resolution_rate": self.resolution_rate,
        }


@dataclass
class DashboardSummary:
    total: int
    resolved: int
    pending: int
    in_progress: int
    recent: list[Incident] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "resolved": self.resolved,
            "pending": self.pending,
            "in_progress": self.in_progress,
            "recent": [incident.to_dict() for incident in self.recent],
        }


@dataclass
class MetricsResult:
    """Everything the analysis view shows for one filter selection."""

    time_range: str
    type_filter: str
    period_start: datetime
    period_end: datetime
    total_incidents: int
    type_stats: dict[str, int]
    monthly_data: list[MonthlyCount]
    indices: ReliabilityIndices
    status_breakdown: list[StatusCount] = field(default_factory=list)
    depart_breakdown: list[DepartStats] = field(default_factory=list)

    @property
    def max_type_count(self) -> int:
        return max(self.type_stats.values(), default=0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API/CLI output."""
        return {
            "filters": {
                "time_range": self.time_range,
                "type": self.type_filter,
            },
            "period": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
            "total_incidents": self.total_incidents,
            "type_stats": dict(sorted(self.type_stats.items())),
            "monthly_data": [m.to_dict() for m in self.monthly_data],
            "indices": self.indices.to_dict(),
            "status_breakdown": [s.to_dict() for s in self.status_breakdown],
            "depart_breakdown": [d.to_dict() for d in self.depart_breakdown],
        }

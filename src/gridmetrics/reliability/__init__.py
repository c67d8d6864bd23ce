"""
Distribution reliability metrics.

Filtering of incident snapshots, type and monthly histograms, and the
DD outage indices (TCI, TMC, END, SAIDI, SAIFI, CAIDI).
"""

from gridmetrics.reliability.breakdowns import (
    available_types,
    dashboard_summary,
    depart_breakdown,
    status_breakdown,
)
from gridmetrics.reliability.engine import (
    ReliabilityMetricsEngine,
    engine_from_settings,
    resolve_time_range,
    round_half_up,
)
from gridmetrics.reliability.estimation import (
    EstimationPolicy,
    FixedDefaultPolicy,
    SkipIncidentPolicy,
    StrictPolicy,
    build_policy,
    policy_from_settings,
)
from gridmetrics.reliability.models import (
    ALL_TYPES,
    DashboardSummary,
    DepartStats,
    EngineConfig,
    MetricsResult,
    MonthlyCount,
    ReliabilityIndices,
    StatusCount,
    TimeRange,
)

__all__ = [
    "ALL_TYPES",
    "DashboardSummary",
    "DepartStats",
    "EngineConfig",
    "EstimationPolicy",
    "FixedDefaultPolicy",
    "MetricsResult",
    "MonthlyCount",
    "ReliabilityIndices",
    "ReliabilityMetricsEngine",
    "SkipIncidentPolicy",
    "StatusCount",
    "StrictPolicy",
    "TimeRange",
    "available_types",
    "build_policy",
    "dashboard_summary",
    "depart_breakdown",
    "engine_from_settings",
    "policy_from_settings",
    "resolve_time_range",
    "round_half_up",
    "status_breakdown",
]

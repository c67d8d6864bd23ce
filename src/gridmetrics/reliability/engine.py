"""
Reliability metrics engine.

Filters an incident snapshot by analysis window and type, then derives the
histograms and distribution reliability indices shown by the analysis
view. Every operation is a pure function of its inputs: the current time
is passed in, and missing outage data is resolved by an injected
EstimationPolicy.
"""

from __future__ import annotations

import calendar
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import TYPE_CHECKING, Iterable, Sequence

import structlog

from gridmetrics.incidents.models import MAX_OUTAGE_QUANTITY, Incident, parse_types
from gridmetrics.reliability.breakdowns import (
    DEFAULT_DEPART_LIMIT,
    depart_breakdown,
    status_breakdown,
)
from gridmetrics.reliability.estimation import (
    EstimationPolicy,
    FixedDefaultPolicy,
    policy_from_settings,
)
from gridmetrics.reliability.models import (
    ALL_TYPES,
    EngineConfig,
    MetricsResult,
    MonthlyCount,
    ReliabilityIndices,
    TimeRange,
)

if TYPE_CHECKING:
    from gridmetrics.config.settings import Settings

logger = structlog.get_logger()

DEFAULT_TIME_RANGE = TimeRange.LAST_30_DAYS

_DAY_OFFSETS = {
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_60_DAYS: 60,
    TimeRange.LAST_90_DAYS: 90,
}

_MONTH_OFFSETS = {
    TimeRange.LAST_6_MONTHS: 6,
    TimeRange.LAST_YEAR: 12,
}


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move back ``months`` calendar months, clamping to the month's last day."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round the decimal repr of ``value`` half away from zero.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        # Enough digits for any float magnitude
        ctx.prec = 400
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _bounded(value: float | None) -> float | None:
    """Treat negative, non-finite or implausibly large quantities as missing."""
    if value is None or not 0 <= value <= MAX_OUTAGE_QUANTITY:
        return None
    return value


def resolve_time_range(range_label: str | TimeRange | None) -> TimeRange:
    """Map a label to a TimeRange, falling back to the last 30 days."""
    time_range = TimeRange.from_label(range_label)
    if time_range is None:
        logger.warning(
            "invalid_date_range_label",
            label=str(range_label),
            default=DEFAULT_TIME_RANGE.value,
        )
        return DEFAULT_TIME_RANGE
    return time_range


class ReliabilityMetricsEngine:
    """Filter and aggregate incident snapshots into reliability metrics."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        estimation_policy: EstimationPolicy | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.estimation_policy = estimation_policy or FixedDefaultPolicy()

    @staticmethod
    def parse_types(type_field: str | None) -> frozenset[str]:
        """Split a whitespace-separated type field into its codes."""
        return parse_types(type_field)

    def resolve_date_range(
        self,
        range_label: str | TimeRange | None,
        now: datetime,
    ) -> tuple[datetime, datetime]:
        """
        Compute the (start, end) instants of a named analysis window.

        Args:
            range_label: One of the TimeRange labels; anything else means
                the last 30 days
            now: Evaluation instant, used as the end of the window

        Returns:
            (start, now)
        """
        now = _as_utc(now)
        time_range = resolve_time_range(range_label)

        if time_range in _MONTH_OFFSETS:
            start = _shift_months(now, _MONTH_OFFSETS[time_range])
        else:
            start = now - timedelta(days=_DAY_OFFSETS[time_range])

        return start, now

    def filter_incidents(
        self,
        incidents: Iterable[Incident],
        start: datetime,
        type_filter: str | None,
        now: datetime,
    ) -> list[Incident]:
        """
        Keep incidents created at or after ``start`` that carry the type.

        An incident with no creation time counts as created ``now``, so it
        passes any window. ``type_filter`` of "All Types" (or None) keeps
        every type.
        """
        start = _as_utc(start)
        now = _as_utc(now)
        match_all = type_filter is None or type_filter == ALL_TYPES

        filtered = []
        for incident in incidents:
            effective = _as_utc(incident.created_at) if incident.created_at else now
            if effective < start:
                continue
            if not match_all and not incident.has_type(type_filter):
                continue
            filtered.append(incident)
        return filtered

    def aggregate_type_stats(self, filtered: Iterable[Incident]) -> dict[str, int]:
        """Count incidents per type code; a multi-type incident counts once per code."""
        counts: Counter[str] = Counter()
        for incident in filtered:
            counts.update(incident.types)
        return dict(counts)

    def aggregate_monthly(self, filtered: Iterable[Incident]) -> list[MonthlyCount]:
        """Count incidents per UTC creation month, oldest first.

        Incidents without a creation time are left out.
        """
        months: Counter[str] = Counter()
        for incident in filtered:
            if incident.created_at is None:
                continue
            created = _as_utc(incident.created_at).astimezone(timezone.utc)
            months[created.strftime("%Y-%m")] += 1
        return [MonthlyCount(month=month, count=count) for month, count in sorted(months.items())]

    def _outage_duration_hours(self, incident: Incident) -> tuple[float | None, bool]:
        """Return (hours, estimated)."""
        if incident.declenchement is not None and incident.fin_retab is not None:
            elapsed = _as_utc(incident.fin_retab) - _as_utc(incident.declenchement)
            return elapsed.total_seconds() / 3600, False
        duration = _bounded(incident.duration_hours)
        if duration is not None:
            return duration, False
        return self.estimation_policy.estimate_duration_hours(incident), True

    def _affected_customers(self, incident: Incident) -> tuple[int | None, bool]:
        customers = _bounded(incident.affected_customers)
        if customers is not None:
            return int(customers), False
        return self.estimation_policy.estimate_affected_customers(incident), True

    def compute_reliability_indices(
        self,
        filtered: Iterable[Incident],
        total_customers: int | None = None,
    ) -> ReliabilityIndices:
        """
        Derive the reliability indices from the DD outages of a filtered set.

        Args:
            filtered: Incidents already restricted to the analysis window
            total_customers: Customers served; defaults to the engine config

        Returns:
            ReliabilityIndices

        Raises:
            InsufficientDataError: Only when the estimation policy refuses
                to estimate a missing value
        """
        if total_customers is None:
            total_customers = self.config.total_customers

        outages = [incident for incident in filtered if incident.is_definitive_outage]

        total_hours = 0.0
        total_customer_hours = 0.0
        total_affected = 0
        estimated_count = 0
        insufficient: list[str] = []

        for incident in sorted(outages, key=lambda i: i.id):
            hours, hours_estimated = self._outage_duration_hours(incident)
            customers, customers_estimated = self._affected_customers(incident)

            if hours_estimated or customers_estimated:
                estimated_count += 1
                logger.debug(
                    "outage_values_estimated",
                    incident_id=incident.id,
                    duration_hours=hours,
                    affected_customers=customers,
                )

            if hours is None or customers is None:
                insufficient.append(incident.id)
            if hours is not None:
                total_hours += hours
            if hours is not None and customers is not None:
                total_customer_hours += hours * customers
                total_affected += customers

        dd_count = len(outages)
        mean_minutes = (total_hours / dd_count) * 60 if dd_count > 0 else 0.0

        if total_customers > 0:
            saidi = round_half_up(total_customer_hours / total_customers, 2)
            saifi = round_half_up(total_affected / total_customers, 2)
        else:
            saidi = saifi = 0.0
        caidi = round_half_up(saidi / saifi, 2) if saifi > 0 else 0.0

        return ReliabilityIndices(
            dd_count=dd_count,
            tci_hours=int(round_half_up(total_hours)),
            tmc_minutes=round_half_up(mean_minutes, 1),
            end_kwh=int(
                round_half_up(total_customer_hours * self.config.average_power_per_customer_kw)
            ),
            saidi=saidi,
            saifi=saifi,
            caidi=caidi,
            total_interruption_hours=total_hours,
            total_customer_hours=total_customer_hours,
            total_affected_customers=total_affected,
            estimated_count=estimated_count,
            insufficient_data=insufficient,
        )

    def analyze(
        self,
        incidents: Sequence[Incident],
        time_range: str | TimeRange | None = DEFAULT_TIME_RANGE,
        type_filter: str | None = ALL_TYPES,
        now: datetime | None = None,
        depart_limit: int = DEFAULT_DEPART_LIMIT,
    ) -> MetricsResult:
        """
        Run the full filter and aggregation pipeline over a snapshot.

        ``now`` defaults to the current UTC time; pass it explicitly for
        reproducible results.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        effective_range = resolve_time_range(time_range)
        start, end = self.resolve_date_range(effective_range, now)
        filtered = self.filter_incidents(incidents, start, type_filter, end)
        indices = self.compute_reliability_indices(filtered)

        result = MetricsResult(
            time_range=effective_range.value,
            type_filter=type_filter or ALL_TYPES,
            period_start=start,
            period_end=end,
            total_incidents=len(filtered),
            type_stats=self.aggregate_type_stats(filtered),
            monthly_data=self.aggregate_monthly(filtered),
            indices=indices,
            status_breakdown=status_breakdown(filtered),
            depart_breakdown=depart_breakdown(filtered, limit=depart_limit),
        )

        logger.info(
            "metrics_computed",
            time_range=result.time_range,
            type_filter=result.type_filter,
            snapshot_size=len(incidents),
            filtered=len(filtered),
            dd_count=indices.dd_count,
            estimated=indices.estimated_count,
        )
        return result


def engine_from_settings(
    settings: Settings,
    total_customers: int | None = None,
    average_power_per_customer_kw: float | None = None,
    estimation_mode: str | None = None,
) -> ReliabilityMetricsEngine:
    """Build an engine from settings, with optional per-run overrides."""
    config = EngineConfig(
        total_customers=(
            total_customers if total_customers is not None else settings.total_customers
        ),
        average_power_per_customer_kw=(
            average_power_per_customer_kw
            if average_power_per_customer_kw is not None
            else settings.average_power_per_customer_kw
        ),
    )
    return ReliabilityMetricsEngine(
        config=config,
        estimation_policy=policy_from_settings(settings, estimation_mode),
    )

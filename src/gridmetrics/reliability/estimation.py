"""
Fallback values for outages recorded without a duration or customer count.

Operators often close a DD incident without filling in the restoration time
or the number of customers cut off. A policy decides what such an outage
contributes to the indices: a configured default, nothing at all, or an
error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from gridmetrics.core.errors import ConfigurationError, InsufficientDataError
from gridmetrics.incidents.models import Incident

if TYPE_CHECKING:
    from gridmetrics.config.settings import Settings


class EstimationPolicy(Protocol):
    """Supplies values an outage record is missing.

    Returning None leaves the outage out of the duration and customer sums.
    """

    def estimate_duration_hours(self, incident: Incident) -> float | None: ...

    def estimate_affected_customers(self, incident: Incident) -> int | None: ...


@dataclass(frozen=True)
class FixedDefaultPolicy:
    """Use the same configured value for every incomplete outage."""

    duration_hours: float = 1.0
    affected_customers: int = 100

    def estimate_duration_hours(self, incident: Incident) -> float | None:
        return self.duration_hours

    def estimate_affected_customers(self, incident: Incident) -> int | None:
        return self.affected_customers


class SkipIncidentPolicy:
    """Leave incomplete outages out of the sums."""

    def estimate_duration_hours(self, incident: Incident) -> float | None:
        return None

    def estimate_affected_customers(self, incident: Incident) -> int | None:
        return None


class StrictPolicy:
    """Refuse to compute indices over incomplete outages."""

    def estimate_duration_hours(self, incident: Incident) -> float | None:
        raise InsufficientDataError(
            "Outage has no usable duration",
            details={"incident_id": incident.id},
        )

    def estimate_affected_customers(self, incident: Incident) -> int | None:
        raise InsufficientDataError(
            "Outage has no affected customer count",
            details={"incident_id": incident.id},
        )


ESTIMATION_MODES = ("fixed", "skip", "strict")


def build_policy(
    mode: str,
    duration_hours: float = 1.0,
    affected_customers: int = 100,
) -> EstimationPolicy:
    """Build a policy from its mode name."""
    if mode == "fixed":
        return FixedDefaultPolicy(
            duration_hours=duration_hours,
            affected_customers=affected_customers,
        )
    if mode == "skip":
        return SkipIncidentPolicy()
    if mode == "strict":
        return StrictPolicy()
    raise ConfigurationError(
        f"Unknown estimation mode: {mode}",
        details={"expected": ", ".join(ESTIMATION_MODES)},
    )


def policy_from_settings(settings: Settings, mode: str | None = None) -> EstimationPolicy:
    """Build the configured policy; ``mode`` overrides the settings value."""
    return build_policy(
        mode or settings.estimation_mode,
        duration_hours=settings.default_duration_hours,
        affected_customers=settings.default_affected_customers,
    )

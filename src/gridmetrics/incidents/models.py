"""
Incident data models.

An incident is a trip or fault on the distribution network as recorded by
the operators. Records are read-only snapshots of the document store;
coercion from raw documents happens in ``gridmetrics.incidents.parser``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class IncidentStatus(str, Enum):
    """Operator workflow status of an incident."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


# Type codes offered by the incident form
DRR = "DRR"  # déclenchement, réenclenchement rapide
DRL = "DRL"  # déclenchement, réenclenchement lent
DD = "DD"  # déclenchement définitif
ED = "ED"
BC = "BC"

KNOWN_TYPE_CODES = (DRR, DRL, DD, ED, BC)

# Upper bound for outage hours and customer counts; larger values are treated
# as missing
MAX_OUTAGE_QUANTITY = 1e9


def parse_types(type_field: str | None) -> frozenset[str]:
    """Split a whitespace-separated type field into its codes.

    Unknown codes are kept as-is.
    """
    if not type_field:
        return frozenset()
    return frozenset(token for token in type_field.split() if token)


def format_types(types: frozenset[str] | set[str]) -> str:
    """Storage form of a type set: codes joined by single spaces."""
    ordered = [code for code in KNOWN_TYPE_CODES if code in types]
    ordered.extend(sorted(code for code in types if code not in KNOWN_TYPE_CODES))
    return " ".join(ordered)


@dataclass(frozen=True)
class Incident:
    """
    A single network incident.

    ``created_at``, ``declenchement`` and ``fin_retab`` are timezone-aware
    when set. A missing or unreadable value is ``None``; the raw strings
    for the outage start/end are kept for display and export.
    """

    id: str
    types: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None

    # Outage window
    declenchement: datetime | None = None
    fin_retab: datetime | None = None
    declenchement_raw: str = ""
    fin_retab_raw: str = ""
    duration_hours: float | None = None

    affected_customers: int | None = None
    status: IncidentStatus = IncidentStatus.PENDING

    # Network location
    depart: str | None = None
    poste_name: str | None = None
    voltage: str | None = None

    @property
    def type_field(self) -> str:
        return format_types(self.types)

    def has_type(self, code: str) -> bool:
        return code in self.types

    @property
    def is_definitive_outage(self) -> bool:
        return DD in self.types

    def to_dict(self) -> dict[str, Any]:
        """Convert to the document-store field layout."""
        return {
            "id": self.id,
            "posteName": self.poste_name or "",
            "voltage": self.voltage or "",
            "depart": self.depart or "",
            "type": self.type_field,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else "",
            "declenchement": self.declenchement_raw,
            "finRetab": self.fin_retab_raw,
            "duration": self.duration_hours if self.duration_hours is not None else "",
            "affectedCustomers": (
                self.affected_customers if self.affected_customers is not None else ""
            ),
        }

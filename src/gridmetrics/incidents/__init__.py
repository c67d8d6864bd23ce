"""
Incident records.

Typed incident model and the ingestion boundary that reads document-store
snapshots into it.
"""

from gridmetrics.incidents.models import (
    DD,
    KNOWN_TYPE_CODES,
    MAX_OUTAGE_QUANTITY,
    Incident,
    IncidentStatus,
    format_types,
    parse_types,
)
from gridmetrics.incidents.parser import (
    load_incidents,
    parse_incident_dict,
    parse_incident_records,
    parse_timestamp,
)

__all__ = [
    "DD",
    "KNOWN_TYPE_CODES",
    "MAX_OUTAGE_QUANTITY",
    "Incident",
    "IncidentStatus",
    "format_types",
    "load_incidents",
    "parse_incident_dict",
    "parse_incident_records",
    "parse_timestamp",
    "parse_types",
]

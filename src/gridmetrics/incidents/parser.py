"""
Incident snapshot parser.

Turns raw document-store records (JSON, YAML or CSV exports) into typed
``Incident`` values. This is the only place where field coercion happens:
a malformed field degrades to "missing" instead of failing the record.
"""

from __future__ import annotations

import csv
import json
import math
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

import structlog
import yaml

from gridmetrics.core.errors import IncidentParseError
from gridmetrics.incidents.models import (
    MAX_OUTAGE_QUANTITY,
    Incident,
    IncidentStatus,
    parse_types,
)

logger = structlog.get_logger()

# Fault current annotation appended to the trip time by the incident form,
# e.g. "2024-03-02 08:15 (Ic: 320A)"
_IC_ANNOTATION = re.compile(r"\s*\(Ic:.*\)\s*$")

_DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
]

# Bare numbers below this (2001-09-09) are not epoch values: spreadsheet
# serial dates, years, YYYYMMDD
_EPOCH_MIN_SECONDS = 1e9

# Epoch values above this are taken to be milliseconds
_EPOCH_MS_THRESHOLD = 1e11

# Document field -> accepted spellings
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "ID", "_id"),
    "type": ("type", "types"),
    "createdAt": ("createdAt", "created_at"),
    "declenchement": ("declenchement",),
    "finRetab": ("finRetab", "fin_retab"),
    "duration": ("duration", "duration_hours"),
    "affectedCustomers": ("affectedCustomers", "affected_customers"),
    "status": ("status",),
    "depart": ("depart",),
    "posteName": ("posteName", "poste_name"),
    "voltage": ("voltage",),
}

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml", ".csv")


def strip_ic_annotation(value: str) -> str:
    """Remove a trailing ``(Ic: ...)`` annotation."""
    return _IC_ANNOTATION.sub("", value).strip()


def parse_timestamp(value: Any) -> datetime | None:
    """
    Interpret a raw document-store value as a timezone-aware instant.

    Accepts datetimes, dates, ISO-8601 strings, a few day-first formats,
    epoch seconds or milliseconds from 2001 on, and serialized Firestore
    timestamps. Smaller bare numbers (years, spreadsheet serials) are not
    dates; compact YYYYMMDD strings are read as ISO dates.
    Naive values are taken as UTC. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        if not _is_epoch(value):
            return None
        return _from_epoch(value)

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return None
        if isinstance(nanos, bool) or not isinstance(nanos, (int, float)):
            nanos = 0
        return _from_epoch(seconds + nanos / 1e9, milliseconds=False)

    if isinstance(value, str):
        return _parse_timestamp_string(value)

    return None


def _is_epoch(value: float) -> bool:
    return math.isfinite(value) and value >= _EPOCH_MIN_SECONDS


def _from_epoch(value: float, milliseconds: bool | None = None) -> datetime | None:
    if not math.isfinite(value):
        return None
    if milliseconds is None:
        milliseconds = abs(value) >= _EPOCH_MS_THRESHOLD
    seconds = value / 1000 if milliseconds else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_timestamp_string(value: str) -> datetime | None:
    text = strip_ic_annotation(value)
    if not text:
        return None

    if re.fullmatch(r"\d+(\.\d+)?", text) and _is_epoch(float(text)):
        return _from_epoch(float(text))

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None

    if parsed is None:
        for fmt in _DATETIME_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    result = float(value)
    if not math.isfinite(result) or not 0 <= result <= MAX_OUTAGE_QUANTITY:
        return None
    return result


def _coerce_int(value: Any) -> int | None:
    number = _coerce_float(value)
    if number is None:
        return None
    return int(number)


def _coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_status(value: Any) -> IncidentStatus:
    text = _coerce_text(value)
    if text:
        for status in IncidentStatus:
            if status.value.lower() == text.lower():
                return status
    return IncidentStatus.PENDING


def _field(data: Mapping[str, Any], name: str) -> Any:
    for key in _FIELD_ALIASES[name]:
        if key in data:
            return data[key]
    return None


def parse_incident_dict(data: Any, default_id: str | None = None) -> Incident:
    """
    Parse one raw incident document into an Incident.

    Args:
        data: Mapping as exported from the document store
        default_id: Identifier to use when the record carries none

    Raises:
        IncidentParseError: If the record is not a mapping or has no id
    """
    if not isinstance(data, Mapping):
        raise IncidentParseError(
            "Incident record must be a mapping",
            details={"record_type": type(data).__name__},
        )

    incident_id = _coerce_text(_field(data, "id")) or default_id
    if not incident_id:
        raise IncidentParseError("Incident record has no id")

    raw_type = _field(data, "type")
    if isinstance(raw_type, (list, tuple, set, frozenset)):
        raw_type = " ".join(str(code) for code in raw_type)
    types = parse_types(raw_type if isinstance(raw_type, str) else None)

    declenchement_raw = _coerce_text(_field(data, "declenchement")) or ""
    fin_retab_raw = _coerce_text(_field(data, "finRetab")) or ""

    return Incident(
        id=incident_id,
        types=types,
        created_at=parse_timestamp(_field(data, "createdAt")),
        declenchement=parse_timestamp(_field(data, "declenchement")),
        fin_retab=parse_timestamp(_field(data, "finRetab")),
        declenchement_raw=declenchement_raw,
        fin_retab_raw=fin_retab_raw,
        duration_hours=_coerce_float(_field(data, "duration")),
        affected_customers=_coerce_int(_field(data, "affectedCustomers")),
        status=_coerce_status(_field(data, "status")),
        depart=_coerce_text(_field(data, "depart")),
        poste_name=_coerce_text(_field(data, "posteName")),
        voltage=_coerce_text(_field(data, "voltage")),
    )


def parse_incident_records(
    records: Iterable[Any],
    id_prefix: str = "incident",
) -> list[Incident]:
    """Parse a sequence of raw documents, numbering records that have no id."""
    return [
        parse_incident_dict(record, default_id=f"{id_prefix}-{index}")
        for index, record in enumerate(records, start=1)
    ]


def load_incidents(file_path: str | Path) -> list[Incident]:
    """
    Load an incident snapshot file.

    JSON and YAML files hold either a list of records or a mapping with an
    ``incidents`` list; CSV files hold one record per row.

    Raises:
        IncidentParseError: If the file is missing, unsupported or malformed
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise IncidentParseError(
            f"Unsupported snapshot format: {suffix or path.name}",
            details={"supported": ", ".join(SUPPORTED_SUFFIXES)},
        )

    try:
        if suffix == ".csv":
            records = _read_csv(path)
        else:
            records = _read_document(path, suffix)
    except FileNotFoundError as exc:
        raise IncidentParseError(f"Snapshot file not found: {path}") from exc

    incidents = parse_incident_records(records, id_prefix=path.stem)
    logger.info("incidents_loaded", path=str(path), count=len(incidents))
    return incidents


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return [dict(row) for row in reader]


def _read_document(path: Path, suffix: str) -> list[Any]:
    with path.open(encoding="utf-8") as handle:
        try:
            if suffix == ".json":
                data = json.load(handle)
            else:
                data = yaml.safe_load(handle)
        except json.JSONDecodeError as exc:
            raise IncidentParseError(f"Invalid JSON in {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise IncidentParseError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return []
    if isinstance(data, Mapping):
        data = data.get("incidents")
    if not isinstance(data, list):
        raise IncidentParseError(
            f"Expected a list of incidents in {path}",
            details={"found": type(data).__name__},
        )
    return data

"""Tests for status, départ and dashboard breakdowns."""

from datetime import datetime, timedelta, timezone

import pytest
from gridmetrics.incidents.models import Incident, IncidentStatus, parse_types
from gridmetrics.reliability.breakdowns import (
    available_types,
    dashboard_summary,
    depart_breakdown,
    status_breakdown,
)

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_incident(incident_id, type_field="DD", **kwargs):
    return Incident(id=incident_id, types=parse_types(type_field), **kwargs)


class TestStatusBreakdown:
    """Test the status distribution."""

    def test_all_statuses_listed_in_order(self):
        result = status_breakdown([])

        assert [s.status for s in result] == ["Pending", "In Progress", "Resolved"]
        assert all(s.count == 0 and s.percentage == 0.0 for s in result)

    def test_percentages(self):
        incidents = [
            make_incident("a", status=IncidentStatus.RESOLVED),
            make_incident("b", status=IncidentStatus.RESOLVED),
            make_incident("c", status=IncidentStatus.RESOLVED),
            make_incident("d", status=IncidentStatus.PENDING),
        ]

        result = {s.status: s for s in status_breakdown(incidents)}

        assert result["Resolved"].count == 3
        assert result["Resolved"].percentage == pytest.approx(75.0)
        assert result["Pending"].percentage == pytest.approx(25.0)
        assert result["In Progress"].count == 0
        assert sum(s.percentage for s in result.values()) == pytest.approx(100.0)


class TestDepartBreakdown:
    """Test per-feeder grouping."""

    def test_groups_and_counts(self):
        incidents = [
            make_incident("1", "DD", depart="Nord", voltage="30 kV", status=IncidentStatus.RESOLVED),
            make_incident("2", "ED", depart="Nord", voltage="10 kV"),
            make_incident("3", "DD", depart="Sud"),
            make_incident("4", "DD"),
        ]

        result = depart_breakdown(incidents)

        assert [d.depart for d in result] == ["Nord", "Sud"]
        nord, sud = result
        assert nord.count == 2
        assert nord.dd_count == 1
        assert nord.resolved == 1
        assert nord.resolution_rate == pytest.approx(50.0)
        assert nord.voltage == "30 kV"
        assert nord.percentage == pytest.approx(200 / 3)
        assert sud.voltage == "N/A"

    def test_voltage_independent_of_input_order(self):
        incidents = [
            make_incident("2", depart="Nord", voltage="10 kV"),
            make_incident("1", depart="Nord", voltage="30 kV"),
        ]

        assert depart_breakdown(incidents)[0].voltage == "30 kV"
        assert depart_breakdown(list(reversed(incidents)))[0].voltage == "30 kV"

    def test_ties_sorted_by_name_and_limited(self):
        incidents = [make_incident(str(i), depart=f"D{i % 10}") for i in range(10)]

        result = depart_breakdown(incidents, limit=3)

        assert [d.depart for d in result] == ["D0", "D1", "D2"]

    def test_no_departs(self):
        assert depart_breakdown([make_incident("1")]) == []


class TestAvailableTypes:
    def test_all_types_first_then_sorted_codes(self):
        incidents = [make_incident("1", "ED DD"), make_incident("2", "BC"), make_incident("3", "")]

        assert available_types(incidents) == ["All Types", "BC", "DD", "ED"]

    def test_empty(self):
        assert available_types([]) == ["All Types"]


class TestDashboardSummary:
    """Test the dashboard headline counts."""

    def test_counts_and_recent(self):
        incidents = [
            make_incident("a", created_at=BASE, status=IncidentStatus.RESOLVED),
            make_incident("b", created_at=BASE + timedelta(days=2), status=IncidentStatus.IN_PROGRESS),
            make_incident("c", created_at=BASE + timedelta(days=1)),
            make_incident("d"),
        ]

        summary = dashboard_summary(incidents, recent=2)

        assert summary.total == 4
        assert summary.resolved == 1
        assert summary.in_progress == 1
        assert summary.pending == 2
        assert [i.id for i in summary.recent] == ["b", "c"]

    def test_undated_incidents_are_oldest(self):
        incidents = [make_incident("x"), make_incident("y", created_at=BASE)]

        summary = dashboard_summary(incidents, recent=5)

        assert [i.id for i in summary.recent] == ["y", "x"]
        assert summary.to_dict()["recent"][0]["id"] == "y"

    def test_negative_recent(self):
        assert dashboard_summary([make_incident("x")], recent=-1).recent == []

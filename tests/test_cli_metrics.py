"""Tests for the gridmetrics command line.

Covers analyze, export, summary and types, driven through main().
"""

import argparse
import csv
import json

import pytest
from gridmetrics.cli.main import build_parser, main
from gridmetrics.cli.metrics import handle_metrics_command

NOW = "2024-03-15T12:00:00Z"


@pytest.fixture
def snapshot(tmp_path):
    """Write a small incident snapshot."""
    path = tmp_path / "incidents.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "inc-1",
                    "type": "DD",
                    "createdAt": "2024-03-01T08:00:00Z",
                    "declenchement": "2024-03-01 08:00",
                    "finRetab": "2024-03-01 10:00",
                    "affectedCustomers": 500,
                    "status": "Resolved",
                    "depart": "Nord",
                    "voltage": "30 kV",
                },
                {
                    "id": "inc-2",
                    "type": "DD ED",
                    "createdAt": "2024-03-10T08:00:00Z",
                    "duration": 1,
                    "affectedCustomers": 500,
                    "status": "In Progress",
                    "depart": "Sud",
                },
                {
                    "id": "inc-3",
                    "type": "BC",
                    "createdAt": "2023-11-02T08:00:00Z",
                },
            ]
        )
    )
    return str(path)


@pytest.fixture
def sparse_snapshot(tmp_path):
    """Snapshot with an outage lacking duration and customer count."""
    path = tmp_path / "sparse.json"
    path.write_text(json.dumps([{"id": "bare", "type": "DD", "createdAt": "2024-03-10"}]))
    return str(path)


class TestAnalyzeCommand:
    """Test gridmetrics analyze."""

    def test_json_output(self, snapshot, capsys):
        exit_code = main(["analyze", snapshot, "--output", "json", "--now", NOW])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_incidents"] == 2
        assert data["indices"]["dd_count"] == 2
        assert data["indices"]["tci_hours"] == 3
        assert data["indices"]["saidi"] == 0.15

    def test_range_and_type_filters(self, snapshot, capsys):
        exit_code = main(
            ["analyze", snapshot, "--output", "json", "--now", NOW, "--range", "Last Year", "--type", "BC"]
        )

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["filters"] == {"time_range": "Last Year", "type": "BC"}
        assert data["total_incidents"] == 1
        assert data["indices"]["dd_count"] == 0

    def test_unknown_range_falls_back(self, snapshot, capsys):
        main(["analyze", snapshot, "--output", "json", "--now", NOW, "--range", "Forever"])

        data = json.loads(capsys.readouterr().out)
        assert data["filters"]["time_range"] == "Last 30 Days"

    def test_network_overrides(self, snapshot, capsys):
        main(
            [
                "analyze",
                snapshot,
                "--output",
                "json",
                "--now",
                NOW,
                "--total-customers",
                "1000",
                "--power-kw",
                "1.5",
            ]
        )

        indices = json.loads(capsys.readouterr().out)["indices"]
        assert indices["saidi"] == 1.5
        assert indices["end_kwh"] == 2250

    def test_settings_from_environment(self, snapshot, capsys, monkeypatch):
        monkeypatch.setenv("GRIDMETRICS_TOTAL_CUSTOMERS", "1000")

        main(["analyze", snapshot, "--output", "json", "--now", NOW])

        assert json.loads(capsys.readouterr().out)["indices"]["saifi"] == 1.0

    def test_table_output(self, snapshot, capsys):
        exit_code = main(["analyze", snapshot, "--now", NOW])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Reliability Indices" in out
        assert "SAIDI" in out

    def test_text_output_to_file(self, snapshot, tmp_path, capsys):
        report = tmp_path / "report.txt"

        exit_code = main(
            ["analyze", snapshot, "--output", "text", "--output-file", str(report), "--now", NOW]
        )

        assert exit_code == 0
        assert capsys.readouterr().out == ""
        assert "Reliability Analysis" in report.read_text(encoding="utf-8")

    def test_fixed_estimation_is_default(self, sparse_snapshot, capsys):
        exit_code = main(["analyze", sparse_snapshot, "--output", "json", "--now", NOW])

        assert exit_code == 0
        indices = json.loads(capsys.readouterr().out)["indices"]
        assert indices["estimated_count"] == 1
        assert indices["tci_hours"] == 1
        assert indices["saifi"] == 0.01

    def test_skip_estimation_warns(self, sparse_snapshot, capsys):
        exit_code = main(
            ["analyze", sparse_snapshot, "--output", "json", "--now", NOW, "--estimation", "skip"]
        )

        assert exit_code == 1
        indices = json.loads(capsys.readouterr().out)["indices"]
        assert indices["insufficient_data"] == ["bare"]

    def test_strict_estimation_fails(self, sparse_snapshot):
        exit_code = main(["analyze", sparse_snapshot, "--now", NOW, "--estimation", "strict"])

        assert exit_code == 12

    def test_missing_snapshot(self, tmp_path, capsys):
        assert main(["analyze", str(tmp_path / "missing.json"), "--now", NOW]) == 12
        assert "Snapshot file not found" in capsys.readouterr().out

    def test_invalid_now(self, snapshot, capsys):
        assert main(["analyze", snapshot, "--now", "yesterday"]) == 12
        assert "Invalid --now value: yesterday" in capsys.readouterr().out

    def test_invalid_settings(self, snapshot, monkeypatch, capsys):
        monkeypatch.setenv("GRIDMETRICS_TOTAL_CUSTOMERS", "lots")

        assert main(["analyze", snapshot, "--now", NOW]) == 10
        assert "Invalid configuration" in capsys.readouterr().out


class TestExportCommand:
    def test_exports_filtered_incidents(self, snapshot, tmp_path):
        output = tmp_path / "out.csv"

        exit_code = main(["export", snapshot, str(output), "--now", NOW, "--type", "DD"])

        assert exit_code == 0
        with open(output, encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert [row["id"] for row in rows] == ["inc-1", "inc-2"]
        assert rows[0]["depart"] == "Nord"


class TestSummaryAndTypes:
    def test_summary(self, snapshot, capsys):
        exit_code = main(["summary", snapshot, "--recent", "1"])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Incident Summary" in out
        assert "inc-2" in out

    def test_types(self, snapshot, capsys):
        exit_code = main(["types", snapshot])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == ["All Types", "BC", "DD", "ED"]


class TestParser:
    """Test argument parsing and dispatch."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: gridmetrics" in capsys.readouterr().out

    def test_invalid_estimation_choice(self, snapshot):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", snapshot, "--estimation", "random"])

    def test_log_format_choice(self):
        assert build_parser().parse_args(["--log-format", "console", "types", "x"]).log_format == "console"

        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-format", "xml", "types", "x"])

    def test_analyze_defaults(self, snapshot):
        args = build_parser().parse_args(["analyze", snapshot])

        assert args.output == "table"
        assert args.time_range is None
        assert args.type_filter is None

    def test_unknown_command_not_handled(self):
        assert handle_metrics_command(argparse.Namespace(command="other")) is None

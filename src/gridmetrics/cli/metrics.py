"""
CLI commands for reliability metrics.

Commands:
    gridmetrics analyze <snapshot>          - Filter incidents and compute indices
    gridmetrics export <snapshot> <csv>     - Export the filtered incident table
    gridmetrics summary <snapshot>          - Headline counts and recent incidents
    gridmetrics types <snapshot>            - List the type filter choices
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone

from gridmetrics.cli import ux
from gridmetrics.config.settings import get_settings
from gridmetrics.core.errors import ExitCode, ValidationError, main_with_error_handling
from gridmetrics.incidents.parser import load_incidents, parse_timestamp
from gridmetrics.logging import bind_context
from gridmetrics.reliability.breakdowns import available_types, dashboard_summary
from gridmetrics.reliability.engine import engine_from_settings
from gridmetrics.reliability.estimation import ESTIMATION_MODES
from gridmetrics.reliability.models import ALL_TYPES, MetricsResult, TimeRange
from gridmetrics.reports import OutputFormat, export_incidents_csv, format_result


def _resolve_now(now: str | None) -> datetime:
    if not now:
        return datetime.now(timezone.utc)
    parsed = parse_timestamp(now)
    if parsed is None:
        raise ValidationError(f"Invalid --now value: {now}")
    return parsed


@main_with_error_handling(report=ux.error)
def analyze_command(
    snapshot: str,
    time_range: str | None = None,
    type_filter: str | None = None,
    now: str | None = None,
    total_customers: int | None = None,
    power_kw: float | None = None,
    estimation: str | None = None,
    output_format: str = "table",
    output_file: str | None = None,
) -> int:
    """
    Compute reliability metrics for a snapshot.

    Returns 1 (warning) when some outages had to be left out of the
    indices for lack of data.
    """
    log = bind_context(command="analyze", snapshot=snapshot)
    settings = get_settings()
    engine = engine_from_settings(
        settings,
        total_customers=total_customers,
        average_power_per_customer_kw=power_kw,
        estimation_mode=estimation,
    )
    incidents = load_incidents(snapshot)

    result = engine.analyze(
        incidents,
        time_range=time_range or settings.default_time_range,
        type_filter=type_filter or settings.default_type_filter,
        now=_resolve_now(now),
        depart_limit=settings.depart_breakdown_limit,
    )

    if output_format == OutputFormat.TABLE.value:
        _print_result(result)
        if output_file:
            format_result(result, OutputFormat.TEXT, output_file)
    else:
        output = format_result(result, output_format, output_file)
        if not output_file:
            print(output)

    if result.indices.insufficient_data:
        log.warning("outages_excluded", incident_ids=result.indices.insufficient_data)
        return ExitCode.WARNING
    return ExitCode.SUCCESS


def _print_result(result: MetricsResult) -> None:
    """Print a metrics result as rich tables."""
    indices = result.indices

    ux.header(f"Reliability Analysis: {result.time_range} / {result.type_filter}")
    ux.print_key_value(
        {
            "Period": (
                f"{result.period_start:%Y-%m-%d %H:%M} -> {result.period_end:%Y-%m-%d %H:%M} UTC"
            ),
            "Incidents": str(result.total_incidents),
        }
    )

    ux.print_table(
        "Reliability Indices",
        ["Index", "Value", "Unit"],
        [
            ["DD outages", str(indices.dd_count), "trips"],
            ["TCI", str(indices.tci_hours), "h"],
            ["TMC", f"{indices.tmc_minutes:.1f}", "min"],
            ["END", str(indices.end_kwh), "kWh"],
            ["SAIDI", f"{indices.saidi:.2f}", "h/customer"],
            ["SAIFI", f"{indices.saifi:.2f}", "int./customer"],
            ["CAIDI", f"{indices.caidi:.2f}", "h"],
        ],
    )

    if indices.estimated_count:
        ux.warning(f"{indices.estimated_count} outage(s) use estimated duration or customers")
    if indices.insufficient_data:
        ux.warning(
            f"{len(indices.insufficient_data)} outage(s) excluded for lack of data: "
            f"{', '.join(indices.insufficient_data)}"
        )

    if result.type_stats:
        ux.print_table(
            "Incidents by Type",
            ["Type", "Count"],
            [
                [code, str(count)]
                for code, count in sorted(result.type_stats.items(), key=lambda kv: (-kv[1], kv[0]))
            ],
        )
    if result.monthly_data:
        ux.print_table(
            "Incidents by Month",
            ["Month", "Count"],
            [[m.month, str(m.count)] for m in result.monthly_data],
        )
    ux.print_table(
        "Status",
        ["Status", "Count", "Share"],
        [[s.status, str(s.count), f"{s.percentage:.1f}%"] for s in result.status_breakdown],
    )
    if result.depart_breakdown:
        ux.print_table(
            "Top Départs",
            ["Départ", "Incidents", "DD", "Voltage", "Share", "Resolved"],
            [
                [
                    d.depart,
                    str(d.count),
                    str(d.dd_count),
                    d.voltage,
                    f"{d.percentage:.1f}%",
                    f"{d.resolution_rate:.0f}%",
                ]
                for d in result.depart_breakdown
            ],
        )


@main_with_error_handling(report=ux.error)
def export_command(
    snapshot: str,
    output: str,
    time_range: str | None = None,
    type_filter: str | None = None,
    now: str | None = None,
) -> int:
    """Export the incidents matching the filters to CSV."""
    settings = get_settings()
    engine = engine_from_settings(settings)
    incidents = load_incidents(snapshot)

    evaluation_time = _resolve_now(now)
    start, end = engine.resolve_date_range(
        time_range or settings.default_time_range, evaluation_time
    )
    filtered = engine.filter_incidents(
        incidents, start, type_filter or settings.default_type_filter, end
    )

    rows = export_incidents_csv(filtered, output)
    if not rows:
        ux.info("No incidents matched the filters; wrote header only")
    ux.success(f"Exported {rows} incident(s) to {output}")
    return ExitCode.SUCCESS


@main_with_error_handling(report=ux.error)
def summary_command(snapshot: str, recent: int = 3) -> int:
    """Show headline counts and the most recent incidents."""
    incidents = load_incidents(snapshot)
    summary = dashboard_summary(incidents, recent=recent)

    ux.header("Incident Summary")
    ux.print_key_value(
        {
            "Total": str(summary.total),
            "Resolved": str(summary.resolved),
            "In Progress": str(summary.in_progress),
            "Pending": str(summary.pending),
        }
    )
    if summary.recent:
        ux.print_table(
            "Recent Incidents",
            ["ID", "Poste", "Départ", "Type", "Status", "Created"],
            [
                [
                    incident.id,
                    incident.poste_name or "",
                    incident.depart or "",
                    incident.type_field,
                    incident.status.value,
                    f"{incident.created_at:%Y-%m-%d}" if incident.created_at else "",
                ]
                for incident in summary.recent
            ],
        )
    return ExitCode.SUCCESS


@main_with_error_handling(report=ux.error)
def types_command(snapshot: str) -> int:
    """List the type filter choices present in a snapshot."""
    incidents = load_incidents(snapshot)
    for choice in available_types(incidents):
        print(choice)
    return ExitCode.SUCCESS


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--range",
        dest="time_range",
        metavar="LABEL",
        help=f"Analysis window ({', '.join(t.value for t in TimeRange)})",
    )
    parser.add_argument(
        "--type",
        dest="type_filter",
        metavar="CODE",
        help=f"Incident type code, or '{ALL_TYPES}'",
    )
    parser.add_argument("--now", help="Evaluation time (ISO-8601, defaults to current time)")


def register_metrics_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register the metrics subcommand parsers."""
    analyze_parser = subparsers.add_parser("analyze", help="Compute reliability metrics")
    analyze_parser.add_argument("snapshot", help="Incident snapshot (.json, .yaml, .csv)")
    _add_filter_arguments(analyze_parser)
    analyze_parser.add_argument("--total-customers", type=int, help="Customers served")
    analyze_parser.add_argument("--power-kw", type=float, help="Average power per customer (kW)")
    analyze_parser.add_argument(
        "--estimation",
        choices=list(ESTIMATION_MODES),
        help="How to treat outages missing a duration or customer count",
    )
    analyze_parser.add_argument(
        "--output",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TABLE.value,
        help="Output format",
    )
    analyze_parser.add_argument("--output-file", help="Write the report to a file")

    export_parser = subparsers.add_parser("export", help="Export filtered incidents to CSV")
    export_parser.add_argument("snapshot", help="Incident snapshot (.json, .yaml, .csv)")
    export_parser.add_argument("output", help="Path of the CSV file to write")
    _add_filter_arguments(export_parser)

    summary_parser = subparsers.add_parser("summary", help="Show incident counts")
    summary_parser.add_argument("snapshot", help="Incident snapshot (.json, .yaml, .csv)")
    summary_parser.add_argument("--recent", type=int, default=3, help="Recent incidents to list")

    types_parser = subparsers.add_parser("types", help="List incident type filter choices")
    types_parser.add_argument("snapshot", help="Incident snapshot (.json, .yaml, .csv)")


def handle_metrics_command(args: argparse.Namespace) -> int | None:
    """Dispatch a metrics subcommand; None if the command is not one of them."""
    command = getattr(args, "command", None)

    if command == "analyze":
        return analyze_command(
            snapshot=args.snapshot,
            time_range=args.time_range,
            type_filter=args.type_filter,
            now=args.now,
            total_customers=args.total_customers,
            power_kw=args.power_kw,
            estimation=args.estimation,
            output_format=args.output,
            output_file=args.output_file,
        )
    elif command == "export":
        return export_command(
            snapshot=args.snapshot,
            output=args.output,
            time_range=args.time_range,
            type_filter=args.type_filter,
            now=args.now,
        )
    elif command == "summary":
        return summary_command(snapshot=args.snapshot, recent=args.recent)
    elif command == "types":
        return types_command(snapshot=args.snapshot)
    return None

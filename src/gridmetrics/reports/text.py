"""Plain-text report of a metrics result."""

from __future__ import annotations

from gridmetrics.reliability.models import MetricsResult

_BAR_WIDTH = 30


def _bar(count: int, maximum: int) -> str:
    if maximum <= 0:
        return ""
    return "█" * max(1, round(count / maximum * _BAR_WIDTH)) if count else ""


def format_text(result: MetricsResult) -> str:
    """Format a metrics result as a human-readable report."""
    indices = result.indices
    lines = [
        f"\n{'=' * 60}",
        f"Reliability Analysis: {result.time_range} / {result.type_filter}",
        f"{'=' * 60}",
        f"Period: {result.period_start:%Y-%m-%d %H:%M} -> {result.period_end:%Y-%m-%d %H:%M} UTC",
        f"Incidents: {result.total_incidents}",
        "",
        "Reliability Indices:",
        f"  DD outages:              {indices.dd_count}",
        f"  TCI (cumulative):        {indices.tci_hours} h",
        f"  TMC (mean outage):       {indices.tmc_minutes:.1f} min",
        f"  END (energy not served): {indices.end_kwh} kWh",
        f"  SAIDI:                   {indices.saidi:.2f} h/customer",
        f"  SAIFI:                   {indices.saifi:.2f} int./customer",
        f"  CAIDI:                   {indices.caidi:.2f} h",
    ]

    if indices.estimated_count:
        lines.append(f"  ({indices.estimated_count} outage(s) use estimated values)")
    if indices.insufficient_data:
        lines.append(
            f"  ({len(indices.insufficient_data)} outage(s) excluded: "
            f"{', '.join(indices.insufficient_data)})"
        )

    lines.append("")
    lines.append("Incidents by Type:")
    if result.type_stats:
        for code, count in sorted(result.type_stats.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"  {code:<6} {count:>5}  {_bar(count, result.max_type_count)}")
    else:
        lines.append("  (none)")

    lines.append("")
    lines.append("Incidents by Month:")
    if result.monthly_data:
        peak = max(m.count for m in result.monthly_data)
        for month in result.monthly_data:
            lines.append(f"  {month.month}  {month.count:>5}  {_bar(month.count, peak)}")
    else:
        lines.append("  (none)")

    if result.status_breakdown:
        lines.append("")
        lines.append("Status:")
        for status in result.status_breakdown:
            lines.append(f"  {status.status:<12} {status.count:>5}  ({status.percentage:.1f}%)")

    if result.depart_breakdown:
        lines.append("")
        lines.append("Top Départs:")
        for depart in result.depart_breakdown:
            lines.append(
                f"  {depart.depart:<20} {depart.count:>4}  DD {depart.dd_count:>3}  "
                f"{depart.voltage:<6}  resolved {depart.resolution_rate:.0f}%"
            )

    lines.append("")
    return "\n".join(lines)

#!/usr/bin/env python3
"""Shenandoah GC Log Reader.

Reads Shenandoah GC logs written with unified logging and reports:
- Pause and concurrent phase durations per event type
- Heap occupancy before/after each phase where the log carries it
- Parsing coverage (filtered, parsed and unparseable lines)
- Optional Markdown export
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

from shenandoah_log.config import DEFAULT_DATE_FORMAT, ReaderSettings
from shenandoah_log.model import GCEvent, GCModel
from shenandoah_log.reader import ShenandoahDataReader
from shenandoah_log.summary import (
    GCSummary,
    PauseStatistics,
    build_summary,
    runs_concurrently,
)

__version__ = "1.0.0"

# ============================================================
# RICH OUTPUT RENDERING
# ============================================================

SHENANDOAH_LOG_THEME = Theme(
    {
        "critical": "bold red",
        "warning": "bold yellow",
        "success": "bold green",
        "info": "cyan",
        "metric": "white",
        "label": "dim white",
        "header": "bold magenta",
    }
)

console = Console(theme=SHENANDOAH_LOG_THEME)


def configure_logging(verbose: bool) -> None:
    """Route reader diagnostics through rich."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def create_key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Create a simple two-column key/value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="label")
    table.add_column("Value", style="metric")
    for label, value in rows:
        table.add_row(label, value)
    return table


def format_seconds(seconds: float) -> str:
    """Format seconds for human-readable output."""
    if seconds > 60:
        return f"{seconds:.1f}s ({seconds / 60:.1f}m)"
    return f"{seconds:.3f}s"


def format_millis(seconds: float) -> str:
    return f"{seconds * 1000:.3f}ms"


def format_kb(size_kb: int) -> str:
    """Format a KB value using the largest whole unit."""
    if size_kb >= 1024 * 1024:
        return f"{size_kb / (1024 * 1024):.2f} GB"
    if size_kb >= 1024:
        return f"{size_kb / 1024:.1f} MB"
    return f"{size_kb} KB"


def build_parsing_coverage_rows(summary: GCSummary, candidate_lines: int) -> list[tuple[str, str]]:
    """Build rows describing parsing coverage."""
    rows = [
        ("Log format", summary.log_format or "unknown"),
        ("Total log lines", str(summary.total_log_lines)),
        ("Candidate lines", str(candidate_lines)),
        ("Parsed events", str(summary.event_count)),
        ("Unparsed candidate lines", str(max(0, candidate_lines - summary.event_count))),
    ]
    if candidate_lines > 0:
        rows.append(("Parse rate", f"{summary.event_count / candidate_lines * 100.0:.1f}%"))
    return rows


def build_overview_rows(summary: GCSummary) -> list[tuple[str, str]]:
    """Build rows for the run overview."""
    overall = summary.overall_pauses
    rows = [
        ("Pause events", str(summary.pause_count)),
        ("Concurrent events", str(summary.concurrent_count)),
        ("Total pause time", format_seconds(overall.total_seconds)),
        ("Max pause", format_millis(overall.max_seconds)),
        ("Total concurrent time", format_seconds(summary.total_concurrent_seconds)),
        ("Events with heap data", str(summary.events_with_memory)),
    ]
    if summary.peak_post_used_kb is not None:
        rows.append(("Peak heap after GC", format_kb(summary.peak_post_used_kb)))
    if summary.peak_total_kb is not None:
        rows.append(("Peak heap capacity", format_kb(summary.peak_total_kb)))
    return rows


def build_time_window_rows(summary: GCSummary) -> list[tuple[str, str]]:
    """Build rows describing the time window."""
    rows: list[tuple[str, str]] = []
    if summary.first_datestamp and summary.last_datestamp:
        rows.append(("First event date", summary.first_datestamp.isoformat()))
        rows.append(("Last event date", summary.last_datestamp.isoformat()))
    if summary.first_timestamp is not None and summary.last_timestamp is not None:
        rows.append(("First event uptime", f"{summary.first_timestamp:.3f}s"))
        rows.append(("Last event uptime", f"{summary.last_timestamp:.3f}s"))
    return rows


def build_pause_distribution_rows(summary: GCSummary) -> list[dict[str, str]]:
    """Build per-type duration rows, overall pauses first."""

    def row(stats: PauseStatistics, style: str = "") -> dict[str, str]:
        return {
            "type": stats.name,
            "kind": "concurrent" if stats.concurrent else "pause",
            "count": str(stats.count),
            "avg": format_millis(stats.avg_seconds),
            "median": format_millis(stats.median_seconds),
            "p95": format_millis(stats.p95_seconds),
            "p99": format_millis(stats.p99_seconds),
            "max": format_millis(stats.max_seconds),
            "style": style,
        }

    rows = [row(summary.overall_pauses, style="bold")]
    rows.extend(row(stats) for stats in summary.per_type)
    return rows


def build_event_rows(events: list[GCEvent]) -> list[dict[str, str]]:
    """Build one row per event for the event listing."""
    rows = []
    for event in events:
        if event.datestamp is not None:
            when = event.datestamp.isoformat()
        else:
            when = f"{event.timestamp:.3f}s"
        rows.append(
            {
                "line": str(event.line_number or ""),
                "when": when,
                "type": event.extended_type,
                "kind": "concurrent" if runs_concurrently(event) else "pause",
                "duration": format_millis(event.pause_seconds),
            }
        )
    return rows


def create_pause_distribution_table(summary: GCSummary) -> Table:
    """Create detailed duration distribution table."""
    table = Table(title="Phase Duration Analysis", show_header=True, header_style="header")

    table.add_column("Event Type", style="info")
    table.add_column("Kind", style="label")
    table.add_column("Count", justify="right", style="metric")
    table.add_column("Average", justify="right", style="metric")
    table.add_column("Median", justify="right", style="metric")
    table.add_column("P95", justify="right", style="metric")
    table.add_column("P99", justify="right", style="metric")
    table.add_column("Maximum", justify="right", style="metric")

    for row in build_pause_distribution_rows(summary):
        table.add_row(
            row["type"],
            row["kind"],
            row["count"],
            row["avg"],
            row["median"],
            row["p95"],
            row["p99"],
            row["max"],
            style=row["style"] or None,
        )
    return table


def create_event_table(events: list[GCEvent]) -> Table:
    table = Table(title="Events", show_header=True, header_style="header")
    table.add_column("Line", justify="right", style="label")
    table.add_column("Time", style="metric")
    table.add_column("Event", style="info")
    table.add_column("Kind", style="label")
    table.add_column("Duration", justify="right", style="metric")
    for row in build_event_rows(events):
        table.add_row(row["line"], row["when"], row["type"], row["kind"], row["duration"])
    return table


def render_rich_output(summary: GCSummary, candidate_lines: int, events: list[GCEvent]) -> None:
    """Render the summary to the console."""
    console.print()
    console.print(
        create_key_value_table(
            "Parsing Coverage", build_parsing_coverage_rows(summary, candidate_lines)
        )
    )
    console.print()
    console.print(create_key_value_table("Overview", build_overview_rows(summary)))
    time_window_rows = build_time_window_rows(summary)
    if time_window_rows:
        console.print()
        console.print(create_key_value_table("Time Window", time_window_rows))
    console.print()
    console.print(create_pause_distribution_table(summary))
    if events:
        console.print()
        console.print(create_event_table(events))


# ============================================================
# MARKDOWN EXPORT
# ============================================================


def export_markdown_summary(summary: GCSummary, candidate_lines: int, output_path: Path) -> None:
    """Export analysis summary to Markdown format."""
    md_content: list[str] = []

    md_content.append("# Shenandoah GC Log Report\n\n")
    md_content.append(f"**Generated:** {datetime.now().isoformat()}\n\n")

    md_content.append("## Parsing Coverage\n\n")
    for label, value in build_parsing_coverage_rows(summary, candidate_lines):
        md_content.append(f"- **{label}:** {value}\n")
    md_content.append("\n")

    md_content.append("## Overview\n\n")
    for label, value in build_overview_rows(summary):
        md_content.append(f"- **{label}:** {value}\n")
    md_content.append("\n")

    time_window_rows = build_time_window_rows(summary)
    if time_window_rows:
        md_content.append("## Time Window\n\n")
        for label, value in time_window_rows:
            md_content.append(f"- **{label}:** {value}\n")
        md_content.append("\n")

    md_content.append("## Phase Durations\n\n")
    md_content.append("| Event Type | Kind | Count | Average | Median | P95 | P99 | Maximum |\n")
    md_content.append("|---|---|---:|---:|---:|---:|---:|---:|\n")
    for row in build_pause_distribution_rows(summary):
        md_content.append(
            f"| {row['type']} | {row['kind']} | {row['count']} | {row['avg']} | "
            f"{row['median']} | {row['p95']} | {row['p99']} | {row['max']} |\n"
        )

    output_path.write_text("".join(md_content), encoding="utf-8")


# ============================================================
# TYPER CLI INTERFACE
# ============================================================

app = typer.Typer(
    name="shenandoah-log",
    help="Reader for Shenandoah GC logs written with unified logging",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def analyze(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Path to Shenandoah GC log file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Export report to Markdown file (e.g., report.md)",
            file_okay=True,
            dir_okay=False,
        ),
    ] = None,
    encoding: Annotated[
        str,
        typer.Option("--encoding", help="Character encoding of the log file"),
    ] = "utf-8",
    date_format: Annotated[
        str,
        typer.Option(
            "--date-format",
            help="strptime format for absolute date decorations",
        ),
    ] = DEFAULT_DATE_FORMAT,
    show_events: Annotated[
        int,
        typer.Option(
            "--events",
            help="List the first N parsed events (0 = none)",
            min=0,
        ),
    ] = 0,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with detailed parsing information",
        ),
    ] = False,
) -> None:
    """Analyze a Shenandoah GC log file.

    Exit codes: 0 = events found, 1 = no events or unreadable file.
    """
    configure_logging(verbose)
    settings = ReaderSettings(encoding=encoding, date_format=date_format)
    reader = ShenandoahDataReader(settings)

    try:
        with log_file.open(encoding=settings.encoding) as f:
            model: GCModel = reader.read(f)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[critical]ERROR: cannot read {log_file}: {e}[/critical]")
        sys.exit(1)

    if verbose:
        console.print(f"[info]Read {reader.total_lines} lines from {log_file}[/info]")

    if not len(model):
        console.print("[critical]ERROR: No Shenandoah GC events found in log file[/critical]")
        sys.exit(1)

    candidate_lines = reader.candidate_lines
    summary = build_summary(model, total_log_lines=reader.total_lines)
    render_rich_output(summary, candidate_lines, list(model.events[:show_events]))

    if output:
        export_markdown_summary(summary, candidate_lines, output)
        console.print(f"\n[success] Summary exported to {output}[/success]")


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"shenandoah-log {__version__}")


if __name__ == "__main__":
    app()

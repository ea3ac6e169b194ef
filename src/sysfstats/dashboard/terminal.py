"""
Rich tables for the one-shot CLI commands (show, history).
"""

from __future__ import annotations

from typing import List, Sequence

from rich.console import Console
from rich.table import Table

from sysfstats.collection import RoundSummary
from sysfstats.metrics import MetricReading


def _describe(reading: MetricReading) -> str:
    fields = reading.to_dict()
    fields.pop("kind")
    return "  ".join(f"{k}={v}" for k, v in fields.items())


def round_table(summary: RoundSummary, title: str = "Collection round") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")

    for reading in summary.reported:
        table.add_row(reading.kind, _describe(reading))

    if not summary.reported:
        table.add_row("[dim]-[/dim]", "[dim]nothing to report[/dim]")

    return table


def print_round(summary: RoundSummary, console: Console, title: str = "Collection round"):
    if not summary.sink_available:
        console.print("[red]Sink unavailable, round skipped.[/red]")
        return

    console.print(round_table(summary, title=title))
    for name in summary.failed:
        console.print(f"  [yellow]FAILED[/yellow]  {name}")


def history_table(rows: Sequence[dict]) -> Table:
    table = Table(title="Report history", show_header=True, header_style="bold")
    table.add_column("Time", style="dim", overflow="fold")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")

    for row in rows:
        payload = dict(row["payload"])
        payload.pop("kind", None)
        table.add_row(
            row["timestamp"],
            row["kind"],
            "  ".join(f"{k}={v}" for k, v in payload.items()),
        )
    return table


def print_history(rows: List[dict], console: Console):
    if not rows:
        console.print("[dim]No reports recorded yet.[/dim]")
        return
    console.print(history_table(rows))

"""Compare two saved snapshots."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..snapshot import Assessment, Verdict, build_assessment, load_snapshot
from ..snapshot.compare import (
    VERDICT_DESCRIPTIONS,
    improved_files,
    new_files,
    removed_files,
    worsened_files,
)
from ..snapshot.models import Snapshot, SnapshotFile
from . import app
from ._common import cli_errors, console, get_config

_VERDICT_STYLE = {
    Verdict.HEAT_WAVE: "bold red",
    Verdict.HEAT_SPIKE: "red",
    Verdict.WARMING: "yellow",
    Verdict.STABLE: "cyan",
    Verdict.COOLING: "green",
    Verdict.COLD_FRONT: "bold green",
}


def print_assessment(
    assessment: Assessment, baseline: Snapshot, current: Snapshot, title: str = "Entropy forecast"
) -> None:
    """Verdict panel followed by the observation bullets."""
    style = _VERDICT_STYLE[assessment.verdict]
    delta = current.summary.entropy - baseline.summary.entropy
    body = (
        f"[{style}]{assessment.label}[/{style}]: {VERDICT_DESCRIPTIONS[assessment.verdict]}\n\n"
        f"{assessment.summary}\n\n"
        f"[bold]Entropy:[/bold] {baseline.summary.entropy:.4f} → {current.summary.entropy:.4f} "
        f"({delta:+.4f})    "
        f"[bold]Files:[/bold] {baseline.summary.files} → {current.summary.files}    "
        f"[bold]SLOC:[/bold] {baseline.summary.sloc:,} → {current.summary.sloc:,}"
    )
    console.print(Panel(body, title=f"[bold]{escape(title)}[/bold]", expand=False))

    for line in assessment.observations:
        console.print(f"  • {escape(line)}")
    console.print()


def _diff_table(title: str, files: list[SnapshotFile], baseline: Snapshot) -> Table:
    base = {f.path: f for f in baseline.files}
    table = Table(title=title, show_header=True)
    table.add_column("File")
    table.add_column("Badness", justify="right")
    table.add_column("Δ", justify="right")
    table.add_column("SLOC", justify="right")
    table.add_column("CC", justify="right")
    for f in files:
        before = base.get(f.path)
        delta = f"{f.badness - before.badness:+.3f}" if before is not None else "-"
        table.add_row(escape(f.path), f"{f.badness:.3f}", delta, f"{f.sloc:,}", f"{f.cyclomatic_complexity:.1f}")
    return table


@app.command()
def compare(
    ctx: typer.Context,
    baseline: Path = typer.Argument(..., help="Baseline snapshot JSON", exists=True, dir_okay=False),
    current: Path = typer.Argument(..., help="Current snapshot JSON", exists=True, dir_okay=False),
):
    """
    Compare two snapshots and forecast the entropy climate.

    [bold cyan]Examples:[/bold cyan]

      entropyx scan here . --save baseline.json

      entropyx compare baseline.json current.json
    """
    top = get_config(ctx).top

    with cli_errors():
        base_snap = load_snapshot(baseline)
        cur_snap = load_snapshot(current)
        assessment = build_assessment(base_snap, cur_snap)

        print_assessment(assessment, base_snap, cur_snap)

        sections = [
            ("Running hotter", worsened_files(base_snap, cur_snap)),
            ("Cooled down", improved_files(base_snap, cur_snap)),
            ("New files", new_files(base_snap, cur_snap)),
        ]
        for title, files in sections:
            if files:
                console.print(_diff_table(f"{title} ({len(files)})", files[:top], base_snap))

        removed = removed_files(base_snap, cur_snap)
        if removed:
            console.print(f"[dim]Removed since baseline: {len(removed)} file(s)[/dim]")
            for f in removed[:top]:
                console.print(f"  [dim]- {escape(f.path)}[/dim]")

"""History report over a metrics database."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..exceptions import EntropyXError
from ..metrics import compute_badness, filter_by_kind, rank_files
from ..models import CommitDelta, CommitInfo
from ..persistence import MetricsStore
from ..snapshot import save_snapshot, snapshot_from_history
from ..temporal import (
    classify_commits,
    compute_commit_file_stats,
    compute_deltas,
    downsample,
    entropy_trend,
)
from ..temporal.trend import HistoryEntry
from . import app
from ._common import check_kind, cli_errors, console, get_config, sparkline


def _resolve_commit(history: list[HistoryEntry], prefix: Optional[str]) -> CommitInfo:
    if not prefix:
        return history[-1][0]
    matches = [c for c, _ in history if c.hash.startswith(prefix)]
    if not matches:
        raise EntropyXError(f"Commit not found in database: {prefix}")
    if len(matches) > 1:
        raise EntropyXError(f"Ambiguous commit prefix: {prefix}", {"matches": str(len(matches))})
    return matches[0]


def delta_table(title: str, deltas: list[CommitDelta], style: str) -> Table:
    table = Table(title=title, show_header=True, title_style=style)
    table.add_column("Commit", style="dim")
    table.add_column("Date")
    table.add_column("ΔEntropy", justify="right")
    table.add_column("ΔSLOC", justify="right")
    table.add_column("ΔFiles", justify="right")
    table.add_column("ΔCC", justify="right")
    table.add_column("ΔSmells/KSLOC", justify="right")
    for d in deltas:
        table.add_row(
            d.commit.short_hash,
            d.commit.timestamp.strftime("%Y-%m-%d"),
            f"{d.entropy_delta:+.4f}",
            f"{d.sloc_delta:+,}",
            f"{d.files_delta:+d}",
            f"{d.complexity_delta:+.2f}" if d.complexity_delta is not None else "-",
            f"{d.smell_density_delta:+.2f}" if d.smell_density_delta is not None else "-",
        )
    return table


@app.command()
def report(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help="Repository the database belongs to", file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (default from config)"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Show files of this commit instead of the latest"),
    kind: Optional[str] = typer.Option(None, "--kind", help="Code kind filter: all, production, utility"),
    save: Optional[Path] = typer.Option(None, "--save", help="Write a snapshot JSON to this file"),
    max_points: Optional[int] = typer.Option(None, "--max-points", help="Maximum points per trend line", min=2),
):
    """
    Summarize the stored history: trends, troubled and heroic commits, hot files.

    [bold cyan]Examples:[/bold cyan]

      entropyx report . --db metrics.db

      entropyx report --kind production --save current.json
    """
    config = get_config(ctx)
    kind = check_kind(kind or config.kind)
    max_points = max_points or config.max_chart_points

    with cli_errors():
        store = MetricsStore(db or config.db_path)
        history = store.get_history()
        if not history:
            console.print("[yellow]No scanned commits. Run 'entropyx scan full' first.[/yellow]")
            raise typer.Exit(0)

        target = _resolve_commit(history, commit)
        with console.status("Loading file metrics..."):
            files_by_commit = {c.hash: filter_by_kind(store.get_file_metrics(c.hash), kind) for c, _ in history}
        stats = {c.hash: compute_commit_file_stats(files_by_commit[c.hash], c) for c, _ in history}

        deltas = compute_deltas(history, stats)
        troubled, heroic = classify_commits(deltas, config.thresholds)

        latest_files = files_by_commit[target.hash]
        latest_metrics = history[-1][1]
        trend = entropy_trend(history)

        title = repo.resolve().name or str(repo)
        console.print(
            Panel(
                f"[bold]Commits:[/bold] {len(history)}    "
                f"[bold]Entropy:[/bold] {latest_metrics.entropy_score:.4f}    "
                f"[bold]Files:[/bold] {latest_metrics.total_files}    "
                f"[bold]SLOC:[/bold] {latest_metrics.total_sloc:,}    "
                f"[bold]Trend:[/bold] {trend:+.5f}/commit",
                title=f"[bold cyan]{escape(title)}[/bold cyan]",
                expand=False,
            )
        )

        sampled = downsample(history, max_points)
        sampled_stats = [stats[c.hash] for c, _ in sampled]
        trends = Table(show_header=True, title=f"Trends ({len(sampled)} of {len(history)} commits)")
        trends.add_column("Metric")
        trends.add_column("First", justify="right")
        trends.add_column("Last", justify="right")
        trends.add_column("History")
        rows = [
            ("Entropy", [m.entropy_score for _, m in sampled], "{:.4f}"),
            ("SLOC", [float(m.total_sloc) for _, m in sampled], "{:,.0f}"),
            ("Avg CC", [s.avg_complexity for s in sampled_stats], "{:.2f}"),
            ("Smells/KSLOC", [s.smell_density for s in sampled_stats], "{:.2f}"),
        ]
        for name, values, fmt in rows:
            trends.add_row(name, fmt.format(values[0]), fmt.format(values[-1]), sparkline(values))
        console.print(trends)

        top = config.top
        if troubled:
            console.print(delta_table(f"Troubled commits ({len(troubled)})", troubled[:top], "bold red"))
        if heroic:
            console.print(delta_table(f"Heroic commits ({len(heroic)})", heroic[:top], "bold green"))
        if not troubled and not heroic:
            console.print("[dim]No troubled or heroic commits at the current thresholds.[/dim]")

        ranked = rank_files(latest_files, compute_badness(latest_files), top)
        if ranked:
            files_table = Table(title=f"Hottest files at {target.short_hash}", show_header=True)
            files_table.add_column("File")
            files_table.add_column("SLOC", justify="right")
            files_table.add_column("CC", justify="right")
            files_table.add_column("Smells H/M/L", justify="right")
            files_table.add_column("Badness", justify="right")
            for f, score in ranked:
                files_table.add_row(
                    escape(f.path),
                    f"{f.sloc:,}",
                    f"{f.cyclomatic_complexity:.1f}",
                    f"{f.smells_high}/{f.smells_medium}/{f.smells_low}",
                    f"{score:.3f}",
                )
            console.print(files_table)

        if save is not None:
            snapshot = snapshot_from_history(history, latest_files, commit_count=store.commit_count())
            out = save_snapshot(snapshot, save)
            console.print(f"[green]✓[/green] Snapshot saved to [cyan]{escape(str(out))}[/cyan]")

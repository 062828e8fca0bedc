"""Heatmap and refactor-priority commands for a working directory."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..metrics import compute_badness, compute_refactor_scores, heat_values, parse_focus, rank_files
from . import app
from ._common import check_kind, cli_errors, console, get_config, heat_bar, heat_style
from .scan import collect_files


@app.command()
def heatmap(
    ctx: typer.Context,
    path: Path = typer.Argument(Path("."), help="Directory to scan", exists=True, file_okay=False),
    include: Optional[str] = typer.Option(None, "--include", help="Comma-separated file patterns to include"),
    kind: Optional[str] = typer.Option(None, "--kind", help="Code kind filter: all, production, utility"),
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Number of files to show", min=1),
):
    """
    Show the hottest files by badness (complexity, size and smells).

    [bold cyan]Examples:[/bold cyan]

      entropyx heatmap src --top 20
    """
    config = get_config(ctx)
    kind = check_kind(kind or config.kind)
    top = top or config.top

    with cli_errors():
        files = collect_files(config, path, include, kind)
        if len(files) < 2:
            console.print("[yellow]Need at least two source files for a heatmap.[/yellow]")
            raise typer.Exit(0)

        badness = compute_badness(files)
        heat = dict(zip((f.path for f in files), heat_values(badness)))

        table = Table(title=f"Heatmap ({len(files)} files)", show_header=True)
        table.add_column("#", style="dim", justify="right")
        table.add_column("File")
        table.add_column("Heat")
        table.add_column("Badness", justify="right")
        table.add_column("SLOC", justify="right")
        table.add_column("CC", justify="right")
        table.add_column("Smells H/M/L", justify="right")
        for i, (f, score) in enumerate(rank_files(files, badness, top), 1):
            h = heat[f.path]
            style = heat_style(h)
            table.add_row(
                str(i),
                escape(f.path),
                f"[{style}]{heat_bar(h)}[/{style}]",
                f"{score:.3f}",
                f"{f.sloc:,}",
                f"{f.cyclomatic_complexity:.1f}",
                f"{f.smells_high}/{f.smells_medium}/{f.smells_low}",
            )
        console.print(table)


@app.command()
def refactor(
    ctx: typer.Context,
    path: Path = typer.Argument(Path("."), help="Directory to scan", exists=True, file_okay=False),
    focus: Optional[str] = typer.Option(
        None, "--focus", "-f", help="overall, sloc, cc, mi, smells, coupling (comma-separated to combine)"
    ),
    top: Optional[int] = typer.Option(None, "--top", "-n", help="Number of files to show", min=1),
    include: Optional[str] = typer.Option(None, "--include", help="Comma-separated file patterns to include"),
    kind: Optional[str] = typer.Option(None, "--kind", help="Code kind filter: all, production, utility"),
):
    """
    Rank files by refactoring priority along the chosen focus dimensions.

    [bold cyan]Examples:[/bold cyan]

      entropyx refactor . --focus cc,smells

      entropyx refactor src --focus mi --top 5
    """
    config = get_config(ctx)
    kind = check_kind(kind or config.kind)
    focus = focus or config.focus
    top = top or config.top

    with cli_errors():
        files = collect_files(config, path, include, kind)
        if len(files) < 2:
            console.print("[yellow]Need at least two source files to rank.[/yellow]")
            raise typer.Exit(0)

        weights = parse_focus(focus)
        ranked = rank_files(files, compute_refactor_scores(files, focus), top)

        mix = ", ".join(f"{dim} {w:.0%}" for dim, w in weights.items() if w > 0)
        table = Table(title=f"Refactor priorities [dim]({escape(mix)})[/dim]", show_header=True)
        table.add_column("#", style="dim", justify="right")
        table.add_column("File")
        table.add_column("Score", justify="right")
        table.add_column("SLOC", justify="right")
        table.add_column("CC", justify="right")
        table.add_column("MI", justify="right")
        table.add_column("Smells H/M/L", justify="right")
        table.add_column("Coupling", justify="right")
        for i, (f, score) in enumerate(ranked, 1):
            table.add_row(
                str(i),
                escape(f.path),
                f"[{heat_style(score)}]{score:.3f}[/{heat_style(score)}]",
                f"{f.sloc:,}",
                f"{f.cyclomatic_complexity:.1f}",
                f"{f.maintainability_index:.1f}",
                f"{f.smells_high}/{f.smells_medium}/{f.smells_low}",
                f"{f.coupling_proxy:.0f}",
            )
        console.print(table)

"""Database maintenance commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..persistence import MetricsStore
from . import db_app
from ._common import cli_errors, console, get_config


@db_app.command("list")
def db_list(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (default from config)"),
):
    """List registered repositories and the number of stored commits."""
    config = get_config(ctx)
    db_path = db or Path(config.db_path)
    if not db_path.exists():
        console.print(f"[yellow]No database at {escape(str(db_path))}[/yellow]")
        raise typer.Exit(0)

    with cli_errors():
        store = MetricsStore(db_path)
        repos = store.list_repos()
        count = store.commit_count()

    table = Table(title=f"Database {escape(str(db_path))}", show_header=True)
    table.add_column("Repository")
    table.add_column("Remote", style="dim")
    for name, remote in repos:
        table.add_row(escape(name), escape(remote) or "-")
    console.print(table)
    console.print(f"[bold]Stored commits:[/bold] {count}")


@db_app.command("clear")
def db_clear(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database file (default from config)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete all stored commits and metrics."""
    config = get_config(ctx)
    db_path = db or Path(config.db_path)
    if not db_path.exists():
        console.print(f"[yellow]No database at {escape(str(db_path))}[/yellow]")
        raise typer.Exit(0)

    if not yes:
        typer.confirm(f"Delete all metrics in {db_path}?", abort=True)

    with cli_errors():
        MetricsStore(db_path).clear()
    console.print(f"[green]✓[/green] Cleared {escape(str(db_path))}")

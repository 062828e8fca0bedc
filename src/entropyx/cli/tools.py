"""External tool checks."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from ..scanning import ScanPipeline
from ..scanning.tools import check_tools, current_platform, required_tools
from . import app, check_app
from ._common import cli_errors, console


def tools(
    path: Path = typer.Argument(Path("."), help="Directory to scan for language detection"),
):
    """
    Verify that the external tools the project needs are installed.

    Exits with status 1 when any of them is missing.
    """
    languages: list[str] = []
    if path.is_dir():
        with cli_errors():
            languages = sorted({lang for lang, _ in ScanPipeline().list_languages(path)})
    else:
        console.print(f"[yellow]Warning:[/yellow] path '{escape(str(path))}' does not exist.")

    if languages:
        console.print(f"[bold]Detected languages:[/bold] {', '.join(languages)}")
    else:
        console.print("[dim]No recognized source files detected.[/dim]")

    statuses = check_tools(required_tools(languages), current_platform())
    table = Table(title="External tools", show_header=True)
    table.add_column("Tool")
    table.add_column("Status")
    table.add_column("Install")
    for status in statuses:
        if status.available:
            table.add_row(status.name, "[green]✓ available[/green]", "")
        else:
            table.add_row(status.name, "[red]✗ missing[/red]", escape(status.install_hint))
    console.print(table)

    if not all(s.available for s in statuses):
        raise typer.Exit(1)


check_app.command("tools")(tools)
app.command("tools", help="Check availability of external tools (same as 'check tools')")(tools)

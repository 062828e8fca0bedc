"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ._common import console, load_cli_config

app = typer.Typer(
    name="entropyx",
    help="EntropyX - track how code quality evolves across git history",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

scan_app = typer.Typer(help="Scan a directory or git commits for metrics", no_args_is_help=True)
db_app = typer.Typer(help="Inspect or clear the metrics database", no_args_is_help=True)
check_app = typer.Typer(help="Check system requirements", no_args_is_help=True)

app.add_typer(scan_app, name="scan")
app.add_typer(db_app, name="db")
app.add_typer(check_app, name="check")


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        console.print(f"[bold cyan]EntropyX[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def _root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit", callback=_version_callback, is_eager=True
    ),
):
    """
    Measure a codebase's structural entropy commit by commit.

    [bold cyan]Examples:[/bold cyan]

      entropyx scan here .

      entropyx scan full /path/to/repo --db metrics.db

      entropyx report /path/to/repo --db metrics.db
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_cli_config(config)
    ctx.obj["verbose"] = verbose


def main() -> None:
    app()


# Import subcommands to register them
from .scan import scan_here as _scan_here  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402
from .heatmap import heatmap as _heatmap, refactor as _refactor  # noqa: F401, E402
from .compare import compare as _compare  # noqa: F401, E402
from .db import db_list as _db_list, db_clear as _db_clear  # noqa: F401, E402
from .tools import tools as _tools  # noqa: F401, E402

"""Shared CLI helpers."""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import AnalysisConfig, load_config
from ..exceptions import EntropyXError
from ..logging_config import get_logger

console = Console()

logger = get_logger(__name__)

KIND_CHOICES = ("all", "production", "utility")


def load_cli_config(config_file: Optional[Path]) -> AnalysisConfig:
    try:
        return load_config(config_file=config_file)
    except EntropyXError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def get_config(ctx: typer.Context) -> AnalysisConfig:
    """Config loaded by the root callback, or defaults when run in isolation."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config"), AnalysisConfig):
        return obj["config"]
    return load_cli_config(None)


def check_kind(kind: str) -> str:
    kind = kind.lower()
    if kind not in KIND_CHOICES:
        console.print(f"[red]Error:[/red] --kind must be one of: {', '.join(KIND_CHOICES)}")
        raise typer.Exit(1)
    return kind


@contextmanager
def cli_errors(verbose: bool = False) -> Iterator[None]:
    """Turn library errors into a red message and exit status 1."""
    try:
        yield
    except typer.Exit:
        raise
    except EntropyXError as e:
        logger.debug("%s: %s", e.__class__.__name__, e)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)


def sparkline(values: Sequence[float]) -> str:
    """Generate an ASCII sparkline from a list of numeric values."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values)


def heat_style(heat: float) -> str:
    """Color for a [0, 1] heat value."""
    if heat >= 0.75:
        return "bold red"
    if heat >= 0.5:
        return "red"
    if heat >= 0.25:
        return "yellow"
    return "green"


def heat_bar(heat: float, width: int = 20) -> str:
    filled = int(round(max(0.0, min(1.0, heat)) * width))
    return "█" * filled + "░" * (width - filled)

"""Scan CLI commands: a plain directory, or commits of a git repository."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from ..config import AnalysisConfig
from ..core import CommitOrchestrator, ScanBatchResult
from ..exceptions import InvalidPathError
from ..logging_config import get_logger
from ..metrics import aggregate, filter_by_kind
from ..models import CommitInfo, FileMetrics
from ..persistence import MetricsStore
from ..scanning import LizardAnalyzer, ScanPipeline
from ..scanning.filters import parse_patterns
from ..snapshot import build_assessment, save_snapshot, snapshot_from_history
from ..snapshot.models import snapshot_from_files
from ..temporal import GitTraversal, classify_commits, compute_deltas
from . import scan_app
from .compare import print_assessment
from .report import delta_table
from ._common import check_kind, cli_errors, console, get_config

logger = get_logger(__name__)

REPO_ARG_HELP = "Path to the git repository"
DB_OPTION_HELP = "SQLite database file (default from config: entropyx.db)"


def build_pipeline(config: AnalysisConfig) -> ScanPipeline:
    analyzer = LizardAnalyzer(timeout=config.analyzer_timeout_seconds, thresholds=config.smells)
    return ScanPipeline(analyzer, git_timeout=config.git_timeout_seconds)


def collect_files(
    config: AnalysisConfig, path: Path, include: Optional[str], kind: str
) -> list[FileMetrics]:
    """Scan ``path`` and apply the include and kind filters.

    Without ``--include`` only files in a recognized language are kept.
    """
    patterns = parse_patterns(include)
    with console.status(f"Scanning {escape(str(path))}..."):
        files = build_pipeline(config).scan_directory(path, patterns, source_only=not patterns)
    return filter_by_kind(files, kind)


def print_file_table(files: list[FileMetrics], title: str = "File metrics") -> None:
    table = Table(title=title, show_header=True, pad_edge=True)
    table.add_column("File")
    table.add_column("Language", style="dim")
    table.add_column("Kind", style="dim")
    table.add_column("SLOC", justify="right")
    table.add_column("CC", justify="right")
    table.add_column("MI", justify="right")
    table.add_column("Smells H/M/L", justify="right")
    table.add_column("Coupling", justify="right")
    for f in sorted(files, key=lambda f: f.path):
        table.add_row(
            escape(f.path),
            f.language or "-",
            f.kind.value,
            f"{f.sloc:,}",
            f"{f.cyclomatic_complexity:.1f}",
            f"{f.maintainability_index:.1f}",
            f"{f.smells_high}/{f.smells_medium}/{f.smells_low}",
            f"{f.coupling_proxy:.0f}",
        )
    console.print(table)


@scan_app.command("here")
def scan_here(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."), help="Directory to scan (no git required)", exists=True, file_okay=False, dir_okay=True
    ),
    include: Optional[str] = typer.Option(
        None, "--include", help="Comma-separated file patterns to include (e.g. *.py,*.ts)"
    ),
    kind: Optional[str] = typer.Option(None, "--kind", help="Code kind filter: all, production, utility"),
    save: Optional[Path] = typer.Option(None, "--save", help="Write a snapshot JSON to this file"),
):
    """
    Scan a directory without git and print per-file metrics.

    [bold cyan]Examples:[/bold cyan]

      entropyx scan here src --include "*.py"

      entropyx scan here . --kind production --save baseline.json
    """
    config = get_config(ctx)
    kind = check_kind(kind or config.kind)

    with cli_errors():
        display = collect_files(config, path, include, kind)
        if not display:
            console.print("[yellow]No matching source files found.[/yellow]")
            raise typer.Exit(0)

        print_file_table(display)
        summary = aggregate(display)
        console.print(
            f"\n[bold]Files:[/bold] {summary.total_files}  "
            f"[bold]SLOC:[/bold] {summary.total_sloc:,}  "
            f"[bold]Entropy:[/bold] {summary.entropy_score:.4f}"
        )

        if save is not None:
            out = save_snapshot(snapshot_from_files(display), save)
            console.print(f"[green]✓[/green] Snapshot saved to [cyan]{escape(str(out))}[/cyan]")


# ── git scans ─────────────────────────────────────────────────────


def _open_repo(repo: Path, config: AnalysisConfig) -> GitTraversal:
    git = GitTraversal(str(repo), timeout=config.git_timeout_seconds)
    if not git.is_git_repo():
        raise InvalidPathError(repo, "not a git repository")
    return git


def _run_git_scan(
    config: AnalysisConfig,
    git: GitTraversal,
    commits: list[CommitInfo],
    db: Optional[Path],
    workers: Optional[int],
) -> ScanBatchResult:
    if not commits:
        console.print("[yellow]No commits found.[/yellow]")
        raise typer.Exit(0)

    store = MetricsStore(db or config.db_path)
    name, remote = git.get_repo_info()
    store.register_repo(name, remote)
    logger.info("Scanning %d commit(s) of %s into %s", len(commits), name, store.db_path)

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning commits", total=None)

        def on_progress(done: int, total: int, commit: CommitInfo) -> None:
            progress.update(task, completed=done, total=total, description=f"Scanned {commit.short_hash}")

        orchestrator = CommitOrchestrator(
            store,
            build_pipeline(config),
            git.repo_path,
            max_workers=workers or config.workers,
            on_progress=on_progress,
        )
        result = orchestrator.run(commits)

    _print_batch(result)
    return result


def _print_batch(result: ScanBatchResult) -> None:
    if result.skipped:
        console.print(f"[dim]Skipped {len(result.skipped)} already-scanned commit(s)[/dim]")

    if result.stored:
        table = Table(title="Scanned commits", show_header=True)
        table.add_column("Commit", style="dim")
        table.add_column("Date")
        table.add_column("Files", justify="right")
        table.add_column("SLOC", justify="right")
        table.add_column("Entropy", justify="right")
        for item in result.stored[-20:]:
            m = item.repo_metrics
            table.add_row(
                item.commit.short_hash,
                item.commit.timestamp.strftime("%Y-%m-%d %H:%M"),
                str(m.total_files),
                f"{m.total_sloc:,}",
                f"{m.entropy_score:.4f}",
            )
        console.print(table)
        if len(result.stored) > 20:
            console.print(f"[dim]... and {len(result.stored) - 20} earlier commit(s)[/dim]")

    for failure in result.failed:
        console.print(
            f"[red]✗[/red] {failure.commit.short_hash} ({failure.stage}): {escape(failure.reason)}"
        )

    console.print(
        f"[green]✓[/green] {len(result.stored)} stored, {len(result.skipped)} skipped, "
        f"{len(result.failed)} failed"
    )


def _exit_status(result: ScanBatchResult) -> None:
    if result.failed:
        raise typer.Exit(1)


@scan_app.command("head")
def scan_head(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help=REPO_ARG_HELP, exists=True, file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """Scan the current HEAD commit only."""
    config = get_config(ctx)
    with cli_errors():
        git = _open_repo(repo, config)
        head = git.get_head_commit()
        _exit_status(_run_git_scan(config, git, [head] if head else [], db, 1))


@scan_app.command("full")
def scan_full(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help=REPO_ARG_HELP, exists=True, file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_OPTION_HELP),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel commit scans", min=1, max=32),
):
    """Scan the entire history reachable from HEAD."""
    config = get_config(ctx)
    with cli_errors():
        git = _open_repo(repo, config)
        commits = list(reversed(git.get_all_commits()))
        _exit_status(_run_git_scan(config, git, commits, db, workers))


@scan_app.command("chk")
def scan_chk(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help=REPO_ARG_HELP, exists=True, file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_OPTION_HELP),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel commit scans", min=1, max=32),
):
    """Scan checkpoint commits (tagged and merge commits)."""
    config = get_config(ctx)
    with cli_errors():
        git = _open_repo(repo, config)
        commits = list(reversed(git.get_checkpoint_commits()))
        _exit_status(_run_git_scan(config, git, commits, db, workers))


@scan_app.command("from")
def scan_from(
    ctx: typer.Context,
    commit: str = typer.Argument(..., help="First commit to scan (inclusive, prefix allowed)"),
    repo: Path = typer.Argument(Path("."), help=REPO_ARG_HELP, exists=True, file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_OPTION_HELP),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel commit scans", min=1, max=32),
):
    """Scan commits from the given commit up to HEAD."""
    config = get_config(ctx)
    with cli_errors():
        git = _open_repo(repo, config)
        _exit_status(_run_git_scan(config, git, git.get_commits_from(commit), db, workers))


# ── language and HEAD details ─────────────────────────────────────


@scan_app.command("lang")
def scan_lang(
    path: Path = typer.Argument(
        Path("."), help="Directory to scan for language detection", exists=True, file_okay=False
    ),
    include: Optional[str] = typer.Option(
        None, "--include", help="Comma-separated file patterns to include (e.g. *.py,*.ts)"
    ),
):
    """Detect the language of each source file in a directory."""
    with cli_errors():
        found = ScanPipeline().list_languages(path, parse_patterns(include))

    if not found:
        console.print("[yellow]No recognized source files found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Detected languages", show_header=True)
    table.add_column("Language", style="cyan")
    table.add_column("File")
    for language, rel_path in found:
        table.add_row(language, escape(rel_path))
    console.print(table)

    counts: dict[str, int] = {}
    for language, _ in found:
        counts[language] = counts.get(language, 0) + 1
    console.print("  ".join(f"[bold]{lang}:[/bold] {n}" for lang, n in sorted(counts.items())))


def _print_language_sloc(files: list[FileMetrics]) -> None:
    totals: dict[str, tuple[int, int]] = {}
    for f in files:
        if not f.language:
            continue
        count, sloc = totals.get(f.language, (0, 0))
        totals[f.language] = (count + 1, sloc + f.sloc)
    grand = sum(sloc for _, sloc in totals.values())

    table = Table(title="SLOC by language", show_header=True)
    table.add_column("Language", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("SLOC", justify="right")
    table.add_column("Share", justify="right")
    for language, (count, sloc) in sorted(totals.items(), key=lambda kv: (-kv[1][1], kv[0])):
        share = sloc / grand if grand else 0.0
        table.add_row(language, str(count), f"{sloc:,}", f"{share:.1%}")
    console.print(table)


@scan_app.command("details")
def scan_details(
    ctx: typer.Context,
    repo: Path = typer.Argument(Path("."), help=REPO_ARG_HELP, exists=True, file_okay=False),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_OPTION_HELP),
):
    """
    Scan HEAD and show per-language SLOC, per-file metrics, notable events
    and a health assessment against the stored history.

    Nothing is written to the database.
    """
    config = get_config(ctx)
    with cli_errors():
        git = _open_repo(repo, config)
        head = git.get_head_commit()
        if head is None:
            console.print("[yellow]No commits found.[/yellow]")
            raise typer.Exit(0)

        with console.status(f"Scanning {head.short_hash}..."):
            files, head_metrics = build_pipeline(config).scan_commit(head, git.repo_path)
        changed = git.get_changed_files(head.hash)

        db_path = Path(db or config.db_path)
        store = MetricsStore(db_path) if db_path.exists() else None
        history = store.get_history() if store is not None else []

        _print_language_sloc(files)
        print_file_table(files, title=f"File metrics at {head.short_hash}")
        console.print(
            f"\n[bold]Files:[/bold] {head_metrics.total_files}  "
            f"[bold]SLOC:[/bold] {head_metrics.total_sloc:,}  "
            f"[bold]Entropy:[/bold] {head_metrics.entropy_score:.4f}"
        )

        console.print(f"\n[bold]Changed in {head.short_hash}:[/bold] {len(changed)} file(s)")
        for rel_path in changed[: config.top]:
            console.print(f"  [dim]{escape(rel_path)}[/dim]")
        if len(changed) > config.top:
            console.print(f"  [dim]... and {len(changed) - config.top} more[/dim]")
        console.print()

        if not history:
            console.print(
                f"[dim]No stored history in {escape(str(db_path))}. "
                "Run 'entropyx scan full' for notable events and a health assessment.[/dim]"
            )
            return

        troubled, heroic = classify_commits(compute_deltas(history), config.thresholds)
        if troubled:
            console.print(delta_table(f"Troubled commits ({len(troubled)})", troubled[: config.top], "bold red"))
        if heroic:
            console.print(delta_table(f"Heroic commits ({len(heroic)})", heroic[: config.top], "bold green"))
        if not troubled and not heroic:
            console.print("[dim]No troubled or heroic commits in the stored history.[/dim]")

        earlier = [(c, m) for c, m in history if c.hash != head.hash and c.timestamp <= head.timestamp]
        if not earlier:
            console.print("[dim]No earlier stored commit to assess HEAD against.[/dim]")
            return

        previous = earlier[-1][0]
        baseline = snapshot_from_history(earlier, store.get_file_metrics(previous.hash))
        current = snapshot_from_history(earlier + [(head, head_metrics)], files)
        print_assessment(
            build_assessment(baseline, current), baseline, current, title=f"Health at {head.short_hash}"
        )

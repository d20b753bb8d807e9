"""
CLI for Project Context Scanner.

Provides command-line interface for one-shot scans, change-triggered
rescans, and inspecting the effective configuration.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from pcs.core.config import LoggingConfig, PCSConfig, load_config
from pcs.core.errors import ScanError
from pcs.core.models import ScanResult
from pcs.infrastructure.file_watcher import FileWatcher
from pcs.services import ScanOrchestrator, WatchService, WatchServiceError

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="pcs",
    help="Project Context Scanner - Summarize a source tree for AI assistants",
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Load .env before any command runs."""
    load_dotenv()


def _load_cli_config(config_path: Optional[Path], root: Path) -> PCSConfig:
    """Load configuration or exit with an error message."""
    try:
        cfg = load_config(config_path, project_root=root)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    _configure_logging(cfg.logging)
    return cfg


def _configure_logging(logging_config: LoggingConfig) -> None:
    level = getattr(logging, logging_config.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=logging_config.format)


def _print_summary(result: ScanResult, duration_seconds: float, output_file: Path) -> None:
    """Print the scan summary panel and the per-language table."""
    summary = Table.grid(padding=1)
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Files Scanned:", str(result.summary.file_count))
    summary.add_row("Scan Time:", f"{duration_seconds:.2f}s")
    summary.add_row("Output File:", str(output_file))

    if result.errors:
        summary.add_row("Unreadable Files:", f"[yellow]{len(result.errors)}[/yellow]")
    if result.truncated:
        summary.add_row("Truncated:", "[yellow]max file limit reached[/yellow]")
    if result.timed_out:
        summary.add_row("Timed Out:", "[yellow]scan deadline reached[/yellow]")

    console.print(
        Panel(
            summary,
            title="[bold green]Scan Complete[/bold green]",
            border_style="green",
            expand=False,
        )
    )

    counts = result.language_counts()
    if not counts:
        return

    table = Table(title="File Types")
    table.add_column("Type", style="cyan")
    table.add_column("Files", justify="right", style="green")
    for language, count in counts.items():
        table.add_row(language, str(count))
    console.print(table)


@app.command()
def scan(
    path: Path = typer.Argument(Path("."), help="Directory to scan"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (default from config)"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml, or .json)"
    ),
    max_files: Optional[int] = typer.Option(
        None, "--max-files", help="Maximum number of files to analyze"
    ),
    max_file_size: Optional[int] = typer.Option(
        None, "--max-file-size", help="Skip files larger than this many bytes"
    ),
    gitignore: Optional[bool] = typer.Option(
        None, "--gitignore/--no-gitignore", help="Honor the root .gitignore"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print the summary"),
):
    """Scan a directory and write the project context document."""
    cfg = _load_cli_config(config_path, path)

    if output is not None:
        cfg.scanner.output_file = str(output.resolve())
    if max_files is not None:
        cfg.scanner.max_files = max_files
    if max_file_size is not None:
        cfg.scanner.max_file_size = max_file_size
    if gitignore is not None:
        cfg.scanner.use_gitignore = gitignore

    orchestrator = ScanOrchestrator(path, cfg)

    if not quiet:
        console.print(f"[bold blue]Scanning[/bold blue] {path}...")

    start_time = time.time()
    try:
        scan_config = orchestrator.resolve_config()
        result = orchestrator.run_scan()
    except ScanError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not quiet:
        _print_summary(result, time.time() - start_time, scan_config.output_target)


async def _run_watch(service: WatchService) -> None:
    await service.start()
    try:
        await asyncio.Event().wait()
    finally:
        await service.stop()


@app.command()
def watch(
    path: Path = typer.Argument(Path("."), help="Directory to watch"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml, or .json)"
    ),
    debounce_ms: Optional[int] = typer.Option(
        None, "--debounce-ms", help="Quiet period before a rescan, in milliseconds"
    ),
):
    """Rescan a directory whenever its files change."""
    cfg = _load_cli_config(config_path, path)
    if debounce_ms is not None:
        cfg.watch.debounce_ms = debounce_ms

    orchestrator = ScanOrchestrator(path, cfg)
    try:
        watcher = FileWatcher(ignore_rules=orchestrator.watch_rules())
    except ScanError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    service = WatchService(orchestrator, watcher, cfg.watch)
    console.print(
        f"[bold blue]Watching[/bold blue] {path} "
        f"[dim](debounce {cfg.watch.debounce_ms}ms, Ctrl-C to stop)[/dim]"
    )

    try:
        asyncio.run(_run_watch(service))
    except KeyboardInterrupt:
        console.print("\n[cyan]Stopped watching.[/cyan]")
    except WatchServiceError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def config(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml, or .json)"
    ),
):
    """Show the effective configuration."""
    cfg = _load_cli_config(config_path, Path("."))
    console.print(
        Panel(
            Syntax(cfg.to_yaml(), "yaml"),
            title="Configuration",
            border_style="dim",
            expand=False,
        )
    )


if __name__ == "__main__":
    app()

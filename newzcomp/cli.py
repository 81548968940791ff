"""
Command-line interface for newzcomp.

Uses Typer to provide `run` (batch over news themes) and `analyze`
(a single URL). Loads .env files for API keys and search credentials.
"""

from __future__ import annotations

import json
from pathlib import Path
import signal
import threading

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, load_config
from .errors import AllowlistError, ConfigError
from .llm.tracing import flush
from .runner import analyze_single, run_batch

app = typer.Typer(add_completion=False)
console = Console()


def _load(
    config: Path | None,
    allowlist: Path | None,
    log_level: str | None,
    output: Path | None = None,
) -> AppConfig:
    load_dotenv()
    try:
        cfg = load_config(str(config) if config else None)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc
    if allowlist:
        cfg.allowlist.path = str(allowlist)
    if log_level:
        cfg.logging.level = log_level
    if output:
        cfg.output.dir = str(output)
    return cfg


@app.command()
def run(
    theme: list[str] | None = typer.Option(None, "--theme", "-t", help="Theme to process; repeatable."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Overrides output.dir from config."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    allowlist: Path | None = typer.Option(None, "--allowlist", help="Allowed domains file."),
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Workers per theme."),
    max_seeds: int | None = typer.Option(None, "--max-seeds", min=1, help="Seed URLs per theme."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
):
    """Discover seed articles per theme and analyze each against related coverage."""
    cfg = _load(config, allowlist, log_level, output)
    output_dir = Path(cfg.output.dir)
    if concurrency is not None:
        cfg.run.concurrency = concurrency
    if max_seeds is not None:
        cfg.run.max_seeds_per_theme = max_seeds
    themes = theme or cfg.run.themes

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        report = run_batch(themes, cfg, output_dir, cancel=cancel, show_progress=progress, console=console)
    except AllowlistError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        signal.signal(signal.SIGINT, previous)
        flush()

    table = Table(title=f"Batch {report.batch_id}")
    table.add_column("Theme")
    table.add_column("Total", justify="right")
    table.add_column("Valid", justify="right")
    table.add_column("Errors", justify="right")
    for item in report.themes:
        table.add_row(item.theme, str(item.total), str(item.valid), str(item.errors))
    console.print(table)
    if report.cancelled:
        console.print("[yellow]Run cancelled before all seed URLs were processed.[/yellow]")
    console.print(f"Audit files written to: {report.output_dir}")


@app.command()
def analyze(
    url: str = typer.Argument(..., help="Article URL to analyze."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Overrides output.dir from config."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    allowlist: Path | None = typer.Option(None, "--allowlist", help="Allowed domains file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Analyze a single article URL and print the record or error as JSON."""
    cfg = _load(config, allowlist, log_level, output)
    output_dir = Path(cfg.output.dir)
    try:
        result, saved = analyze_single(url, cfg, output_dir)
    except AllowlistError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        flush()

    console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))
    if saved:
        console.print(f"Record saved to: {output_dir / cfg.output.records_file}")
    if not result.ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

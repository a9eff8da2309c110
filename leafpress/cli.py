"""
Command-line interface for leafpress.

Uses Typer to provide ``build`` and ``check`` commands with options for
the most common configuration settings. Exit status is 1 when the build
fails (a fatal error, or any failed post with ``--strict``).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from .config import load_config
from .runner import render_report, run_build, run_check

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def build(
    input: Path = typer.Option(
        ..., "--input", "-i", exists=True, file_okay=False, readable=True,
        help="Directory of source posts.",
    ),
    output: Path = typer.Option(Path("site"), "--output", "-o", help="Output directory."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
    workers: int | None = typer.Option(
        None, "--workers", "-j", min=1, help="Threads used to parse and render posts."
    ),
    strict: bool | None = typer.Option(
        None, "--strict/--no-strict", help="Fail the build when any post fails."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Build the site from a directory of posts.

    Args:
        input: Directory holding source Markdown posts
        output: Directory for generated pages
        config: Optional path to YAML config file
        workers: Thread count for parsing and rendering
        strict: Whether per-post failures fail the build
        progress: Whether to show progress bars
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    cfg = load_config(str(config) if config else None)

    # Override with CLI options
    if workers is not None:
        cfg.build.workers = workers
    if strict is not None:
        cfg.build.strict = strict
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    report = run_build(input, output, cfg, show_progress=progress, console=console)
    render_report(report, console)
    if report.ok:
        console.print(f"Site generated: {output}")
    raise typer.Exit(code=report.exit_code)


@app.command()
def check(
    input: Path = typer.Option(
        ..., "--input", "-i", exists=True, file_okay=False, readable=True,
        help="Directory of source posts.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
    strict: bool | None = typer.Option(
        None, "--strict/--no-strict", help="Fail when any post fails."
    ),
):
    """Validate every post without writing any output."""
    cfg = load_config(str(config) if config else None)
    if strict is not None:
        cfg.build.strict = strict
    report = run_check(input, cfg)
    render_report(report, console)
    raise typer.Exit(code=report.exit_code)


if __name__ == "__main__":
    app()

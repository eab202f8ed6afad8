"""CLI entry-point: retry passes, single-job processing and error classification."""

import json
import logging
import time

import typer
from rich.console import Console

from lmg.config import Settings, get_settings
from lmg.errors import classify_error, is_permanent
from lmg.jobs.store import JobNotFoundError, get_video_store, require_job
from lmg.retry.factory import build_coordinator, build_processor

app = typer.Typer(help="Learning-materials retry pipeline")


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default from LMG_LOG_LEVEL)"),
):
    """Configure logging once for every command."""
    level = (log_level or Settings().lmg_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def retry(
    provider: str = typer.Option(None, help="LLM provider: openai | anthropic (default from env)"),
):
    """Run one retry pass over every job that completed with a warning; print the summary JSON."""
    console = Console()
    try:
        coordinator = build_coordinator(get_settings(), provider)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    summary = coordinator.run()
    console.print_json(json.dumps(summary.to_json_dict()))
    if any(err.startswith("FATAL:") for err in summary.errors):
        raise typer.Exit(1)


@app.command()
def schedule(
    interval: float = typer.Option(None, "--interval", help="Seconds between passes (default from LMG_RETRY_INTERVAL_SECONDS)"),
    once: bool = typer.Option(False, "--once", help="Run a single pass and exit"),
    provider: str = typer.Option(None, help="LLM provider: openai | anthropic (default from env)"),
):
    """Run retry passes forever, sleeping between them (Ctrl+C to stop)."""
    console = Console()
    settings = get_settings()
    every = interval if interval is not None else settings.lmg_retry_interval_seconds
    try:
        coordinator = build_coordinator(settings, provider)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        while True:
            summary = coordinator.run()
            console.print(
                f"[{summary.timestamp:%Y-%m-%d %H:%M:%S}] found={summary.videos_found} "
                f"ok={summary.successful_retries} failed={summary.permanent_failures} "
                f"pending={summary.still_pending} errors={len(summary.errors)}"
            )
            if once:
                break
            time.sleep(every)
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")


@app.command()
def process(
    job_id: str = typer.Argument(..., help="Video job id"),
    provider: str = typer.Option(None, help="LLM provider: openai | anthropic (default from env)"),
):
    """Process one job now, the same way a retry pass would."""
    console = Console()
    try:
        job = require_job(get_video_store(), job_id)
        processor = build_processor(get_settings(), provider)
    except (JobNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        result = processor.process(job)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"{result.job_id}: {result.status.value} (error type {result.error_type})")
    if result.incomplete_materials:
        console.print(f"[yellow]Incomplete: {', '.join(result.incomplete_materials)}[/yellow]")
    if result.success:
        console.print("[green]Done.[/green]")


@app.command()
def classify(
    message: str = typer.Argument(..., help="Raw provider error message"),
):
    """Show how a provider error message would be classified and retried."""
    console = Console()
    failure = classify_error(message)
    if is_permanent(failure.kind):
        action = "fail permanently"
    elif failure.requires_chunking:
        action = "retry with chunked generation"
    else:
        action = "retry with standard generation"
    console.print(f"kind: {failure.kind.value}")
    console.print(f"retryable: {failure.retryable}")
    console.print(f"requires_chunking: {failure.requires_chunking}")
    console.print(f"action: {action}")


if __name__ == "__main__":
    app()

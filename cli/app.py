from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from app.schemas import BatchStatus, ProcessingMode
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import echo_status, render_execution, render_history, render_statistics
from logging_config import configure_logging
from services.processor import ProcessorService, build_default_processor
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Process CSV, JSON and log files sequentially, in parallel, or as a benchmark.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


def _expand_paths(paths: List[Path]) -> List[Path]:
    """Replace directories by the files they contain, sorted by name."""
    expanded: List[Path] = []
    for path in paths:
        if path.is_dir():
            expanded.extend(sorted(child for child in path.iterdir() if child.is_file()))
        else:
            expanded.append(path)
    return expanded


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Processing API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    request_timeout: Optional[float] = typer.Option(
        None,
        "--request-timeout",
        help="Seconds to wait for API responses.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    config = load_config(base_url=base_url, request_timeout=request_timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("process")
def process_command(
    paths: List[Path] = typer.Argument(
        ..., exists=True, readable=True, help="Files or directories to process."
    ),
    mode: ProcessingMode = typer.Option(
        ProcessingMode.parallel, "--mode", "-m", help="Execution mode."
    ),
    timeout_ms: Optional[int] = typer.Option(
        None,
        "--timeout-ms",
        "-t",
        min=1,
        help="Per-worker timeout in milliseconds (defaults to PROCESSOR_WORKER_TIMEOUT_MS).",
    ),
    save: bool = typer.Option(
        False,
        "--save/--no-save",
        help="Record the run in the local execution history.",
    ),
) -> None:
    """Process files locally and print the report."""
    files = _expand_paths(paths)
    if not files:
        typer.secho("No files to process.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if save:
        record = build_default_processor(timeout_ms).execute(files, mode)
    else:
        processor = ProcessorService(timeout_ms=timeout_ms or get_settings().worker_timeout_ms)
        record = processor.run(files, mode)

    typer.echo(record.report.rstrip("\n"))
    typer.echo()
    echo_status(record.status.value)
    if record.status is BatchStatus.error:
        raise typer.Exit(code=1)


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Files to upload."
    ),
    mode: ProcessingMode = typer.Option(
        ProcessingMode.parallel, "--mode", "-m", help="Execution mode."
    ),
) -> None:
    """Upload files to the processing API and print the resulting execution."""
    state = _get_state(ctx)
    typer.echo(f"Submitting {len(paths)} file(s) to {state.config.base_url} ...")
    payload = state.client.submit_files(paths, mode.value)
    typer.echo()
    render_execution(payload)
    if payload.get("status") == BatchStatus.error.value:
        raise typer.Exit(code=1)


@app.command("history")
def history_command(
    ctx: typer.Context,
    mode: Optional[ProcessingMode] = typer.Option(
        None, "--mode", "-m", help="Only list executions of this mode."
    ),
) -> None:
    """List past executions, newest first."""
    state = _get_state(ctx)
    records = state.client.list_executions(mode.value if mode else None)
    render_history(records)


@app.command("show")
def show_command(
    ctx: typer.Context,
    execution_id: str = typer.Argument(..., help="Identifier of a past execution."),
) -> None:
    """Print one execution with its report."""
    state = _get_state(ctx)
    render_execution(state.client.get_execution(execution_id))


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Print execution counts per mode and the average run time."""
    state = _get_state(ctx)
    render_statistics(state.client.get_statistics())

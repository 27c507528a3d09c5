from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_STATUS_COLORS = {
    "success": typer.colors.GREEN,
    "partial": typer.colors.YELLOW,
    "error": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def echo_status(status: str) -> None:
    typer.secho(f"status: {status}", fg=_STATUS_COLORS.get(status))


def render_execution(payload: Dict[str, Any]) -> None:
    echo_heading("Execution")
    echo_key_values(
        [
            ("execution_id", payload.get("execution_id")),
            ("created_at", payload.get("created_at")),
            ("mode", payload.get("mode")),
            ("files", payload.get("files")),
            ("total_ms", payload.get("total_ms")),
        ]
    )
    echo_status(str(payload.get("status")))
    if payload.get("report_path"):
        typer.echo(f"report_path: {payload['report_path']}")

    typer.echo()
    report = payload.get("report") or ""
    if report:
        typer.echo(report.rstrip("\n"))
    else:
        typer.echo("No report available.")


def render_history(records: List[Dict[str, Any]]) -> None:
    echo_heading("Executions")
    if not records:
        typer.echo("No executions recorded.")
        return
    for record in records:
        typer.echo(
            f"  - {record.get('execution_id')} | {record.get('created_at')} | "
            f"{record.get('mode')} | {record.get('status')} | "
            f"{record.get('total_ms')} ms | {record.get('files')}"
        )


def render_statistics(payload: Dict[str, Any]) -> None:
    echo_heading("Statistics")
    echo_key_values(
        (key, payload.get(key))
        for key in ("total", "sequential", "parallel", "benchmark", "avg_time_ms")
    )

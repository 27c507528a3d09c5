from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx
import typer

from cli.config import CLIConfig

_CONTENT_TYPES = {
    ".csv": "text/csv",
    ".json": "application/json",
    ".log": "text/plain",
}


class ApiClient:
    """Minimal HTTP client for the batch processing service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def submit_files(self, paths: Sequence[Path], mode: str) -> Dict[str, Any]:
        for path in paths:
            if not path.is_file():
                raise typer.BadParameter(f"File {path} does not exist.")

        try:
            with ExitStack() as stack:
                files = [
                    (
                        "files",
                        (
                            path.name,
                            stack.enter_context(path.open("rb")),
                            _CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream"),
                        ),
                    )
                    for path in paths
                ]
                response = self._client.post("/executions", data={"mode": mode}, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def list_executions(self, mode: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"mode": mode} if mode else None
        try:
            response = self._client.get("/executions", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_execution(self, execution_id: str) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/executions/{execution_id}")
            if response.status_code == 404:
                raise typer.BadParameter(f"Execution {execution_id} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_statistics(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/executions/statistics")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

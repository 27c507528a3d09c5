from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
# Executions are processed inside the request, so this bounds a whole batch.
DEFAULT_REQUEST_TIMEOUT = 120.0


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _timeout_from_env() -> float:
    raw = os.getenv("CLI_REQUEST_TIMEOUT", "").strip()
    try:
        timeout = float(raw)
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_REQUEST_TIMEOUT


def load_config(
    base_url: Optional[str] = None,
    request_timeout: Optional[float] = None,
) -> CLIConfig:
    """Command-line options win over ``API_BASE_URL`` and ``CLI_REQUEST_TIMEOUT``."""
    url = base_url or os.getenv("API_BASE_URL") or DEFAULT_BASE_URL
    timeout = request_timeout if request_timeout is not None else _timeout_from_env()
    return CLIConfig(base_url=url.rstrip("/"), request_timeout=timeout)

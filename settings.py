"""Environment-driven settings shared by the API, the CLI and the processor."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

DEFAULT_WORKER_TIMEOUT_MS = 5000
DEFAULT_STAGING_PATH = "./tmp/uploads"
DEFAULT_TABLE_PATH = "./tmp/executions.json"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    worker_timeout_ms: int = DEFAULT_WORKER_TIMEOUT_MS
    staging_path: str = DEFAULT_STAGING_PATH
    table_persistence_path: Optional[str] = DEFAULT_TABLE_PATH
    report_output_path: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return None if value is None else value.strip()


def _positive_int(name: str) -> Optional[int]:
    """Read a positive integer; anything else counts as unset."""
    raw = _env(name)
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _optional_path(name: str, default: Optional[str]) -> Optional[str]:
    """An unset variable keeps ``default``; a blank one disables the path."""
    raw = _env(name)
    if raw is None:
        return default
    return raw or None


@lru_cache
def get_settings() -> Settings:
    return Settings(
        worker_timeout_ms=_positive_int("PROCESSOR_WORKER_TIMEOUT_MS") or DEFAULT_WORKER_TIMEOUT_MS,
        staging_path=_env("UPLOAD_STAGING_PATH") or DEFAULT_STAGING_PATH,
        table_persistence_path=_optional_path("EXECUTIONS_TABLE_PATH", DEFAULT_TABLE_PATH),
        report_output_path=_optional_path("REPORT_OUTPUT_PATH", None),
        log_level=(_env("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )

from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable

from settings import get_settings

CONTEXT_KEYS = (
    "execution_id",
    "mode",
    "task_id",
    "file_name",
    "file_format",
    "outcome",
    "line_number",
    "reason",
    "file_count",
    "error_count",
    "timeout_ms",
    "processing_ms",
)

# httpx logs every request at INFO, which drowns CLI output.
_QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(char.isspace() for char in text):
        return repr(text)
    return text


class ContextualFormatter(logging.Formatter):
    """Render ``extra`` fields after the message as ``key=value`` pairs.

    Values containing whitespace (line error reasons, file names) are quoted so
    a line stays splittable. Timestamps are UTC.
    """

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.context_keys = tuple(context_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        pairs = [
            f"{key}={_render_value(getattr(record, key))}"
            for key in self.context_keys
            if getattr(record, key, None) is not None
        ]
        message = super().format(record)
        return f"{message} | {' '.join(pairs)}" if pairs else message


def configure_logging(level: str | int | None = None) -> None:
    """Install the root handler once per process.

    The thread name is part of the prefix because workers for different files
    log concurrently.
    """
    global _configured
    if _configured:
        return

    root_level = level if level is not None else get_settings().log_level
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)sZ %(levelname)-7s [%(threadName)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "context_keys": list(CONTEXT_KEYS),
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "contextual",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            "root": {"handlers": ["stderr"], "level": root_level},
        }
    )
    _configured = True

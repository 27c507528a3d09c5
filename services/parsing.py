"""Helpers shared by the format parsers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

from app.schemas import CsvMetrics, FailureDetail, JsonMetrics, LineError, LogMetrics

SNIPPET_LIMIT = 50

_LEADING_FLOAT = re.compile(r"[+-]?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"[+-]?\d+")


class FileParseError(ValueError):
    """Raised by a parser when a file cannot be processed at all."""

    def __init__(self, reason: str, detail: Optional[FailureDetail] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.detail = detail


@dataclass
class ParsedFile:
    """Metrics and ordered line errors produced by a format parser."""

    metrics: Union[CsvMetrics, JsonMetrics, LogMetrics]
    valid_count: int
    errors: List[LineError] = field(default_factory=list)


def leading_float(text: str) -> Optional[float]:
    """Parse the numeric prefix of ``text``; ``"19.99USD"`` yields ``19.99``."""
    match = _LEADING_FLOAT.match(text.strip())
    if match is None:
        return None
    return float(match.group())


def leading_int(text: str) -> Optional[int]:
    """Parse the integer prefix of ``text``; ``"2.5"`` yields ``2``."""
    match = _LEADING_INT.match(text.strip())
    if match is None:
        return None
    return int(match.group())


def snippet(line: str, limit: int = SNIPPET_LIMIT) -> str:
    if len(line) > limit:
        return line[:limit] + "..."
    return line


def decode_text(raw: bytes) -> str:
    return raw.decode("utf-8-sig", errors="replace")


def split_lines(text: str) -> List[str]:
    """Split on line boundaries; a trailing newline does not add an empty line."""
    return text.splitlines()


def format_number(value: float) -> str:
    return f"{value:g}"

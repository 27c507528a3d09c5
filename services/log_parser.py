"""Parser for line-oriented application logs."""

from __future__ import annotations

import re
from collections import Counter
from typing import List

from app.schemas import LineError, LogMetrics
from services.parsing import FileParseError, ParsedFile, decode_text, snippet, split_lines

LOG_LINE = re.compile(
    r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \[(DEBUG|INFO|WARN|ERROR|FATAL)\]",
    re.IGNORECASE,
)
REASON_PREVIEW = 30
EMPTY_REASON = "Empty file"


def match_level(line: str) -> str | None:
    """Return the upper-cased level of a well-formed log line, else ``None``."""
    match = LOG_LINE.match(line)
    if match is None:
        return None
    return match.group(1).upper()


def _invalid_reason(line: str) -> str:
    preview = line[:REASON_PREVIEW]
    suffix = "..." if len(line) > REASON_PREVIEW else ""
    return f"Invalid format: {preview}{suffix}"


class LogParser:
    """Classifies log lines and counts entries per level.

    Blank lines are ignored and do not count towards ``total_lines``; line
    numbers in errors are physical line numbers in the file.
    """

    def parse(self, raw: bytes) -> ParsedFile:
        levels: Counter[str] = Counter()
        errors: List[LineError] = []
        total_lines = 0

        for line_number, line in enumerate(split_lines(decode_text(raw)), start=1):
            if not line.strip():
                continue
            total_lines += 1
            level = match_level(line)
            if level is None:
                errors.append(
                    LineError(
                        line_number=line_number,
                        reason=_invalid_reason(line),
                        content=snippet(line),
                    )
                )
                continue
            levels[level] += 1

        if total_lines == 0:
            raise FileParseError(EMPTY_REASON)

        valid_lines = total_lines - len(errors)
        metrics = LogMetrics(
            total_lines=total_lines,
            valid_lines=valid_lines,
            invalid_lines=len(errors),
            debug=levels["DEBUG"],
            info=levels["INFO"],
            warn=levels["WARN"],
            error=levels["ERROR"],
            fatal=levels["FATAL"],
        )
        return ParsedFile(metrics=metrics, valid_count=valid_lines, errors=errors)

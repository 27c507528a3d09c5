"""Per-file processing shared by the sequential and parallel paths."""

from __future__ import annotations

import logging
import time
from os import PathLike
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from app.schemas import FailureDetail, LineError, OutcomeState, ProcessingResult
from models.records import FileFormat, FileTask
from services.csv_parser import CsvParser
from services.json_parser import JsonParser
from services.log_parser import LogParser
from services.parsing import FileParseError, ParsedFile

logger = logging.getLogger(__name__)


class FormatParser(Protocol):
    def parse(self, raw: bytes) -> ParsedFile: ...


def default_parsers() -> Dict[FileFormat, FormatParser]:
    return {
        FileFormat.csv: CsvParser(),
        FileFormat.json: JsonParser(),
        FileFormat.log: LogParser(),
    }


def build_tasks(paths: Iterable[Union[str, PathLike[str]]]) -> List[FileTask]:
    """Create one task per path, keeping the submission order."""
    return [FileTask.from_path(path) for path in paths]


def failure_result(
    task: FileTask,
    reason: str,
    detail: Optional[FailureDetail] = None,
    errors: Sequence[LineError] = (),
    processing_ms: Optional[float] = None,
) -> ProcessingResult:
    return ProcessingResult(
        file_name=task.file_name,
        path=task.path,
        file_format=task.file_format,
        outcome=OutcomeState.failure,
        errors=list(errors),
        reason=reason,
        failure=detail,
        processing_ms=processing_ms,
    )


def derive_outcome(parsed: ParsedFile) -> OutcomeState:
    if not parsed.errors:
        return OutcomeState.success
    if parsed.valid_count:
        return OutcomeState.partial
    return OutcomeState.failure


class FilePipeline:
    """Reads one file, dispatches on its format and builds its result.

    Malformed content never raises out of :meth:`process`; it is reported as a
    ``partial`` or ``failure`` outcome instead.
    """

    def __init__(self, parsers: Optional[Mapping[FileFormat, FormatParser]] = None) -> None:
        self.parsers: Dict[FileFormat, FormatParser] = (
            dict(parsers) if parsers is not None else default_parsers()
        )

    def process(self, task: FileTask) -> ProcessingResult:
        start_time = time.perf_counter()
        result = self._process(task)
        processing_ms = round((time.perf_counter() - start_time) * 1000, 3)
        result = result.model_copy(update={"processing_ms": processing_ms})

        for error in result.errors:
            logger.warning(
                "Skipping line %s: %s",
                error.line_number,
                error.reason,
                extra={
                    "task_id": task.task_id,
                    "file_name": task.file_name,
                    "line_number": error.line_number,
                    "reason": error.reason,
                },
            )
        logger.info(
            "Processed file",
            extra={
                "task_id": task.task_id,
                "file_name": task.file_name,
                "file_format": task.file_format.value,
                "outcome": result.outcome.value,
                "error_count": len(result.errors),
                "processing_ms": processing_ms,
                "reason": result.reason,
            },
        )
        return result

    def _process(self, task: FileTask) -> ProcessingResult:
        parser = self.parsers.get(task.file_format)
        if parser is None:
            suffix = Path(task.path).suffix or "(none)"
            return failure_result(task, f"Unsupported file type: {suffix}")

        try:
            raw = Path(task.path).read_bytes()
        except FileNotFoundError:
            return failure_result(task, f"File not found: {task.path}")
        except OSError as exc:
            return failure_result(
                task, f"Could not read file: {task.path} ({exc.strerror or exc})"
            )

        try:
            parsed = parser.parse(raw)
        except FileParseError as exc:
            return failure_result(task, exc.reason, detail=exc.detail)

        outcome = derive_outcome(parsed)
        reason = None
        if outcome is OutcomeState.failure:
            reason = f"No valid records ({len(parsed.errors)} invalid)"

        return ProcessingResult(
            file_name=task.file_name,
            path=task.path,
            file_format=task.file_format,
            outcome=outcome,
            metrics=parsed.metrics,
            errors=parsed.errors,
            reason=reason,
        )


_default_pipeline = FilePipeline()


def process_task(task: FileTask) -> ProcessingResult:
    """Process one task with the default parsers."""
    return _default_pipeline.process(task)

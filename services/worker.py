"""Fault-isolated processing of a single file task."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from app.schemas import ProcessingResult
from models.records import FileTask
from services.pipeline import FilePipeline, failure_result

logger = logging.getLogger(__name__)

CANCELLED_REASON = "Worker cancelled before start"


@dataclass(frozen=True)
class WorkerMessage:
    """The single result a worker delivers, tagged with its originating task."""

    task: FileTask
    result: ProcessingResult


class Worker:
    """Runs the file pipeline for one task at a time.

    Any exception escaping the pipeline is caught here and turned into a
    ``failure`` result, so one broken file cannot take down the coordinator or
    sibling workers.
    """

    def __init__(self, pipeline: Optional[FilePipeline] = None) -> None:
        self.pipeline = pipeline or FilePipeline()

    def process(self, task: FileTask) -> ProcessingResult:
        return self.pipeline.process(task)

    def run(
        self, task: FileTask, cancel_event: Optional[threading.Event] = None
    ) -> WorkerMessage:
        if cancel_event is not None and cancel_event.is_set():
            return WorkerMessage(task=task, result=failure_result(task, CANCELLED_REASON))

        try:
            result = self.process(task)
        except Exception as exc:
            logger.exception(
                "Worker crashed while processing file",
                extra={"task_id": task.task_id, "file_name": task.file_name},
            )
            result = failure_result(
                task, f"Unexpected worker error: {type(exc).__name__}: {exc}"
            )
        return WorkerMessage(task=task, result=result)

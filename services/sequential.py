"""In-process, one-file-at-a-time execution."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

from app.schemas import BatchResult, ProcessingResult
from models.records import FileTask
from services.aggregator import assemble_batch
from services.pipeline import FilePipeline, process_task


def run_sequential(
    tasks: Sequence[FileTask], pipeline: Optional[FilePipeline] = None
) -> List[ProcessingResult]:
    """Process tasks in input order using the same pipeline as the workers."""
    process = pipeline.process if pipeline is not None else process_task
    return [process(task) for task in tasks]


def run_sequential_batch(
    tasks: Sequence[FileTask], pipeline: Optional[FilePipeline] = None
) -> BatchResult:
    start_time = time.perf_counter()
    results = run_sequential(tasks, pipeline)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    by_task = {task.task_id: result for task, result in zip(tasks, results)}
    return assemble_batch(tasks, by_task, elapsed_ms)

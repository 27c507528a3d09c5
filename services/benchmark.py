"""Sequential versus parallel timing over the same batch."""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from app.schemas import BenchmarkReport
from models.records import FileTask
from services.coordinator import Coordinator
from services.sequential import run_sequential_batch

logger = logging.getLogger(__name__)


def compare_timings(sequential_ms: float, parallel_ms: float) -> tuple[float, float, float]:
    """Return ``(improvement, percent_faster, time_saved_ms)``.

    Zero durations yield ``0.0`` instead of dividing by zero.
    """
    improvement = round(sequential_ms / parallel_ms, 2) if parallel_ms > 0 else 0.0
    percent_faster = (
        round((sequential_ms - parallel_ms) / sequential_ms * 100, 1)
        if sequential_ms > 0
        else 0.0
    )
    time_saved_ms = round(abs(sequential_ms - parallel_ms), 3)
    return improvement, percent_faster, time_saved_ms


class BenchmarkDriver:
    """Runs a batch through both execution paths and reports the difference."""

    def __init__(self, coordinator: Optional[Coordinator] = None) -> None:
        self.coordinator = coordinator or Coordinator()

    def run(self, tasks: Sequence[FileTask], timeout_ms: int) -> BenchmarkReport:
        tasks = list(tasks)
        if not tasks:
            logger.info("No files to benchmark", extra={"file_count": 0})
            return BenchmarkReport()

        pipeline = self.coordinator.worker.pipeline

        start_time = time.perf_counter()
        sequential = run_sequential_batch(tasks, pipeline)
        sequential_ms = (time.perf_counter() - start_time) * 1000

        start_time = time.perf_counter()
        parallel = self.coordinator.run(tasks, timeout_ms)
        parallel_ms = (time.perf_counter() - start_time) * 1000

        improvement, percent_faster, time_saved_ms = compare_timings(sequential_ms, parallel_ms)
        logger.info(
            "Benchmark finished: sequential=%.1fms parallel=%.1fms improvement=%.2fx",
            sequential_ms,
            parallel_ms,
            improvement,
            extra={"file_count": len(tasks)},
        )
        return BenchmarkReport(
            file_count=len(tasks),
            sequential_ms=round(sequential_ms, 3),
            parallel_ms=round(parallel_ms, 3),
            improvement=improvement,
            percent_faster=percent_faster,
            time_saved_ms=time_saved_ms,
            sequential=sequential,
            parallel=parallel,
        )

"""Orchestration of upload staging, batch execution and execution history."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from itertools import chain
from os import PathLike
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Protocol, Sequence, Union
from uuid import uuid4

from app.schemas import (
    BatchResult,
    BenchmarkReport,
    ExecutionRecord,
    ExecutionStatistics,
    ProcessingMode,
)
from datastore.executions import ExecutionTable, build_default_table
from services.aggregator import summarize_outcomes
from services.benchmark import BenchmarkDriver
from services.coordinator import Coordinator
from services.pipeline import build_tasks
from services.report import render_batch_report, render_benchmark_report
from services.sequential import run_sequential_batch
from settings import get_settings
from storage.staging import UploadStaging, build_default_staging

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".json", ".log")


class Upload(Protocol):
    """The subset of ``fastapi.UploadFile`` the service relies on."""

    filename: Optional[str]
    file: BinaryIO


class ProcessorService:
    """Coordinates staging, batch execution, reporting and history retrieval."""

    def __init__(
        self,
        staging: Optional[UploadStaging] = None,
        table: Optional[ExecutionTable] = None,
        coordinator: Optional[Coordinator] = None,
        timeout_ms: int = 5000,
        report_dir: Optional[Path] = None,
    ) -> None:
        self.staging = staging
        self.table = table if table is not None else ExecutionTable(name="executions")
        self.coordinator = coordinator or Coordinator()
        self.benchmark_driver = BenchmarkDriver(self.coordinator)
        self.timeout_ms = timeout_ms
        self.report_dir = report_dir

    def run(
        self,
        paths: Iterable[Union[str, PathLike[str]]],
        mode: ProcessingMode,
        display_names: Optional[Sequence[str]] = None,
    ) -> ExecutionRecord:
        """Run a batch of staged files in ``mode`` without recording it."""
        mode = ProcessingMode(mode)
        execution_id = str(uuid4())
        tasks = build_tasks(paths)
        created_at = datetime.now(timezone.utc)
        start_time = time.perf_counter()

        batch: Optional[BatchResult] = None
        benchmark: Optional[BenchmarkReport] = None
        if mode is ProcessingMode.sequential:
            batch = run_sequential_batch(tasks, self.coordinator.worker.pipeline)
            report = render_batch_report(batch, mode)
            status = batch.status
        elif mode is ProcessingMode.parallel:
            batch = self.coordinator.run(tasks, self.timeout_ms)
            report = render_batch_report(batch, mode)
            status = batch.status
        else:
            benchmark = self.benchmark_driver.run(tasks, self.timeout_ms)
            report = render_benchmark_report(benchmark)
            status = summarize_outcomes(
                chain(
                    benchmark.sequential.ordered_results(),
                    benchmark.parallel.ordered_results(),
                )
            ).status

        total_ms = round((time.perf_counter() - start_time) * 1000, 3)
        names = list(display_names) if display_names is not None else [t.file_name for t in tasks]

        record = ExecutionRecord(
            execution_id=execution_id,
            created_at=created_at,
            files=", ".join(names),
            file_count=len(tasks),
            mode=mode,
            total_ms=total_ms,
            status=status,
            report=report,
            report_path=self._write_report(execution_id, report),
            batch=batch,
            benchmark=benchmark,
        )
        logger.info(
            "Execution finished",
            extra={
                "execution_id": execution_id,
                "mode": mode.value,
                "file_count": len(tasks),
                "outcome": status.value,
                "processing_ms": total_ms,
            },
        )
        return record

    def execute(
        self,
        paths: Iterable[Union[str, PathLike[str]]],
        mode: ProcessingMode,
        display_names: Optional[Sequence[str]] = None,
    ) -> ExecutionRecord:
        """Run a batch and add it to the execution history."""
        record = self.run(paths, mode, display_names)
        self.table.save(record)
        return record

    def submit_uploads(self, uploads: Sequence[Upload], mode: ProcessingMode) -> ExecutionRecord:
        """Stage uploaded files, process them and clean the staging area."""
        if not uploads:
            raise ValueError("At least one file must be uploaded.")
        if self.staging is None:
            raise RuntimeError("Upload staging is not configured.")

        names = [Path(upload.filename or "").name for upload in uploads]
        rejected = [
            name or "(unnamed)"
            for name in names
            if Path(name).suffix.lower() not in ALLOWED_EXTENSIONS
        ]
        if rejected:
            raise ValueError(
                f"Only CSV, JSON or LOG files are allowed (rejected: {', '.join(rejected)})."
            )

        batch_id = uuid4().hex
        try:
            paths = []
            for upload, name in zip(uploads, names):
                upload.file.seek(0)
                contents = upload.file.read()
                if isinstance(contents, str):
                    contents = contents.encode("utf-8")
                paths.append(self.staging.put_file(batch_id, name, contents))
            return self.execute(paths, mode, display_names=names)
        finally:
            self.staging.remove_batch(batch_id)

    def fetch_execution(self, execution_id: str) -> ExecutionRecord:
        record = self.table.get(execution_id)
        if record is None:
            raise KeyError(f"Execution {execution_id!r} not found.")
        return record

    def list_executions(self, mode: Optional[ProcessingMode] = None) -> list[ExecutionRecord]:
        """Return executions newest first, optionally restricted to one mode."""
        records = [
            record for record in self.table.list_all() if mode is None or record.mode is mode
        ]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def statistics(self) -> ExecutionStatistics:
        records = self.table.list_all()
        per_mode = {mode: 0 for mode in ProcessingMode}
        for record in records:
            per_mode[record.mode] += 1
        avg_time = round(sum(r.total_ms for r in records) / len(records)) if records else 0
        return ExecutionStatistics(
            total=len(records),
            sequential=per_mode[ProcessingMode.sequential],
            parallel=per_mode[ProcessingMode.parallel],
            benchmark=per_mode[ProcessingMode.benchmark],
            avg_time_ms=avg_time,
        )

    def delete_execution(self, execution_id: str) -> None:
        if not self.table.delete(execution_id):
            raise KeyError(f"Execution {execution_id!r} not found.")

    def delete_all(self) -> int:
        return self.table.clear()

    def _write_report(self, execution_id: str, report: str) -> Optional[str]:
        if self.report_dir is None:
            return None
        self.report_dir.mkdir(parents=True, exist_ok=True)
        path = self.report_dir / f"{execution_id}.txt"
        path.write_text(report, encoding="utf-8")
        return str(path)


@lru_cache
def build_default_processor(timeout_ms: Optional[int] = None) -> ProcessorService:
    """Factory that wires the processor from environment settings."""
    settings = get_settings()
    report_dir = Path(settings.report_output_path) if settings.report_output_path else None
    return ProcessorService(
        staging=build_default_staging(),
        table=build_default_table(),
        timeout_ms=timeout_ms or settings.worker_timeout_ms,
        report_dir=report_dir,
    )

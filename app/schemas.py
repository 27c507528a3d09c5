"""Pydantic schemas shared by the processing core and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.records import FileFormat


class OutcomeState(str, Enum):
    """Per-file outcome of a processing run."""

    success = "success"
    partial = "partial"
    failure = "failure"


class BatchStatus(str, Enum):
    """Overall status derived from the outcomes of a batch."""

    success = "success"
    partial = "partial"
    error = "error"


class ProcessingMode(str, Enum):
    """Execution modes accepted by the processor."""

    sequential = "sequential"
    parallel = "parallel"
    benchmark = "benchmark"


class LineError(BaseModel):
    """A single line or record that failed validation."""

    model_config = ConfigDict(frozen=True)

    line_number: int = Field(..., ge=1)
    reason: str
    content: str = ""


class CsvMetrics(BaseModel):
    """Sales metrics computed over the valid lines of a CSV file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["csv"] = "csv"
    valid_records: int = Field(..., ge=0)
    invalid_records: int = Field(..., ge=0)
    total_lines: int = Field(..., ge=0)
    total_sales: float = 0.0
    unique_products: int = Field(0, ge=0)


class JsonMetrics(BaseModel):
    """User and session counts extracted from a JSON snapshot."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["json"] = "json"
    total_users: int = Field(..., ge=0)
    active_users: int = Field(..., ge=0)
    total_sessions: int = Field(..., ge=0)


class LogMetrics(BaseModel):
    """Line classification and per-level counts for a log file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["log"] = "log"
    total_lines: int = Field(..., ge=0)
    valid_lines: int = Field(..., ge=0)
    invalid_lines: int = Field(..., ge=0)
    debug: int = 0
    info: int = 0
    warn: int = 0
    error: int = 0
    fatal: int = 0


Metrics = Annotated[
    Union[CsvMetrics, JsonMetrics, LogMetrics], Field(discriminator="kind")
]


class FailureDetail(BaseModel):
    """Structured description of a whole-file failure."""

    model_config = ConfigDict(frozen=True)

    error_type: str
    message: str
    position: Optional[int] = None
    line: Optional[int] = None
    column: Optional[int] = None


class ProcessingResult(BaseModel):
    """Outcome of processing exactly one file."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    path: str
    file_format: FileFormat
    outcome: OutcomeState
    metrics: Optional[Metrics] = None
    errors: List[LineError] = Field(default_factory=list)
    reason: Optional[str] = None
    failure: Optional[FailureDetail] = None
    processing_ms: Optional[float] = Field(
        default=None, description="Time spent on this file, in milliseconds."
    )


class BatchEntry(BaseModel):
    """A processing result tagged with the task it belongs to."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    path: str
    result: ProcessingResult


class BatchResult(BaseModel):
    """All per-file results of one batch, in submission order."""

    model_config = ConfigDict(frozen=True)

    entries: List[BatchEntry] = Field(default_factory=list)
    success_count: int = Field(0, ge=0)
    partial_count: int = Field(0, ge=0)
    error_count: int = Field(0, ge=0)
    elapsed_ms: float = Field(0.0, ge=0)
    status: BatchStatus = BatchStatus.success

    @property
    def results(self) -> Dict[str, ProcessingResult]:
        """Results keyed by task identity."""
        return {entry.task_id: entry.result for entry in self.entries}

    def ordered_results(self) -> List[ProcessingResult]:
        return [entry.result for entry in self.entries]


class BenchmarkReport(BaseModel):
    """Timing comparison of the sequential and parallel paths."""

    model_config = ConfigDict(frozen=True)

    file_count: int = Field(0, ge=0)
    sequential_ms: float = Field(0.0, ge=0)
    parallel_ms: float = Field(0.0, ge=0)
    improvement: float = 0.0
    percent_faster: float = 0.0
    time_saved_ms: float = Field(0.0, ge=0)
    sequential: BatchResult = Field(default_factory=BatchResult)
    parallel: BatchResult = Field(default_factory=BatchResult)


class ExecutionRecord(BaseModel):
    """A persisted processing run, as listed in the execution history."""

    execution_id: str
    created_at: datetime
    files: str
    file_count: int = Field(0, ge=0)
    mode: ProcessingMode
    total_ms: float = Field(0.0, ge=0)
    status: BatchStatus
    report: str = ""
    report_path: Optional[str] = None
    batch: Optional[BatchResult] = None
    benchmark: Optional[BenchmarkReport] = None


class ExecutionStatistics(BaseModel):
    """Execution counts per mode and the average run time."""

    total: int = 0
    sequential: int = 0
    parallel: int = 0
    benchmark: int = 0
    avg_time_ms: int = 0

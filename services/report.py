"""Plain-text rendering of batch and benchmark results."""

from __future__ import annotations

from typing import List, Optional

from app.schemas import (
    BatchResult,
    BenchmarkReport,
    CsvMetrics,
    JsonMetrics,
    LogMetrics,
    Metrics,
    OutcomeState,
    ProcessingMode,
    ProcessingResult,
)

_RULE = "=" * 60
_SECTION_RULE = "-" * 40
_OUTCOME_LABELS = {
    OutcomeState.success: "success",
    OutcomeState.partial: "partial",
    OutcomeState.failure: "error",
}


def _metric_lines(metrics: Optional[Metrics]) -> List[str]:
    if isinstance(metrics, CsvMetrics):
        return [
            f"valid records: {metrics.valid_records}",
            f"invalid records: {metrics.invalid_records}",
            f"total lines: {metrics.total_lines}",
            f"unique products: {metrics.unique_products}",
            f"total sales: ${metrics.total_sales:.2f}",
        ]
    if isinstance(metrics, JsonMetrics):
        return [
            f"total users: {metrics.total_users}",
            f"active users: {metrics.active_users}",
            f"total sessions: {metrics.total_sessions}",
        ]
    if isinstance(metrics, LogMetrics):
        return [
            f"valid lines: {metrics.valid_lines}",
            f"invalid lines: {metrics.invalid_lines}",
            f"total lines: {metrics.total_lines}",
            "levels:",
            f"  DEBUG: {metrics.debug}",
            f"  INFO:  {metrics.info}",
            f"  WARN:  {metrics.warn}",
            f"  ERROR: {metrics.error}",
            f"  FATAL: {metrics.fatal}",
        ]
    return []


def render_result(result: ProcessingResult) -> str:
    lines = [
        f"[{result.file_name}] - {result.file_format.value.upper()}",
        _SECTION_RULE,
        f"status: {_OUTCOME_LABELS[result.outcome]}",
    ]
    if result.reason:
        lines.append(f"reason: {result.reason}")
    if result.failure is not None:
        detail = f"detail: {result.failure.error_type}: {result.failure.message}"
        if result.failure.position is not None:
            detail += f" (position {result.failure.position})"
        lines.append(detail)
    lines.extend(_metric_lines(result.metrics))
    if result.errors:
        lines.append(f"line errors ({len(result.errors)}):")
        lines.extend(
            f"  line {error.line_number}: {error.reason} | {error.content}"
            for error in result.errors
        )
    return "\n".join(lines)


def _batch_summary(batch: BatchResult) -> List[str]:
    return [
        f"files: {len(batch.entries)}",
        f"success: {batch.success_count}",
        f"partial: {batch.partial_count}",
        f"error: {batch.error_count}",
        f"elapsed: {batch.elapsed_ms:.1f} ms",
        f"status: {batch.status.value}",
    ]


def _file_sections(batch: BatchResult) -> List[str]:
    return [render_result(result) for result in batch.ordered_results()]


def render_batch_report(batch: BatchResult, mode: ProcessingMode) -> str:
    sections = [
        "\n".join([_RULE, f"PROCESSING REPORT ({mode.value})", _RULE, *_batch_summary(batch)]),
        *_file_sections(batch),
    ]
    return "\n\n".join(sections) + "\n"


def render_benchmark_report(report: BenchmarkReport) -> str:
    header = [
        _RULE,
        "BENCHMARK RESULTS",
        _RULE,
        f"files: {report.file_count}",
        f"sequential: {report.sequential_ms:.1f} ms",
        f"parallel: {report.parallel_ms:.1f} ms",
        f"improvement: {report.improvement:.2f}x",
        f"percent faster: {report.percent_faster:.1f}%",
        f"time saved: {report.time_saved_ms:.1f} ms",
    ]
    sections = ["\n".join(header)]
    if report.file_count:
        sections.append("\n".join([_RULE, "PER-FILE RESULTS (parallel run)", _RULE]))
        sections.extend(_file_sections(report.parallel))
    return "\n\n".join(sections) + "\n"

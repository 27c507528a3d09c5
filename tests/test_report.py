from __future__ import annotations

from app.schemas import (
    BenchmarkReport,
    CsvMetrics,
    FailureDetail,
    LineError,
    OutcomeState,
    ProcessingMode,
    ProcessingResult,
)
from models.records import FileFormat, FileTask
from services.aggregator import assemble_batch
from services.report import render_batch_report, render_benchmark_report, render_result


def _csv_result() -> ProcessingResult:
    return ProcessingResult(
        file_name="sales.csv",
        path="/data/sales.csv",
        file_format=FileFormat.csv,
        outcome=OutcomeState.partial,
        metrics=CsvMetrics(
            valid_records=1,
            invalid_records=1,
            total_lines=2,
            total_sales=18.0,
            unique_products=1,
        ),
        errors=[LineError(line_number=2, reason="Empty product name", content="2024-01-01,,x")],
    )


def test_render_result_lists_metrics_and_line_errors() -> None:
    text = render_result(_csv_result())

    assert text.startswith("[sales.csv] - CSV")
    assert "status: partial" in text
    assert "total sales: $18.00" in text
    assert "line errors (1):" in text
    assert "  line 2: Empty product name | 2024-01-01,,x" in text


def test_render_result_for_failure_shows_detail() -> None:
    result = ProcessingResult(
        file_name="broken.json",
        path="broken.json",
        file_format=FileFormat.json,
        outcome=OutcomeState.failure,
        reason="Malformed JSON",
        failure=FailureDetail(
            error_type="JSONDecodeError", message="Expecting value", position=14
        ),
    )

    text = render_result(result)

    assert "status: error" in text
    assert "reason: Malformed JSON" in text
    assert "detail: JSONDecodeError: Expecting value (position 14)" in text


def test_batch_report_follows_submission_order() -> None:
    tasks = [FileTask.from_path("/data/sales.csv"), FileTask.from_path("/data/other.csv")]
    second = _csv_result().model_copy(update={"file_name": "other.csv"})
    batch = assemble_batch(
        tasks, {tasks[1].task_id: second, tasks[0].task_id: _csv_result()}, 5.0
    )

    text = render_batch_report(batch, ProcessingMode.sequential)

    assert "PROCESSING REPORT (sequential)" in text
    assert "files: 2" in text
    assert "status: partial" in text
    assert text.index("[sales.csv]") < text.index("[other.csv]")
    assert text.endswith("\n")


def test_benchmark_report_for_empty_batch() -> None:
    text = render_benchmark_report(BenchmarkReport())

    assert "BENCHMARK RESULTS" in text
    assert "files: 0" in text
    assert "improvement: 0.00x" in text
    assert "PER-FILE RESULTS" not in text

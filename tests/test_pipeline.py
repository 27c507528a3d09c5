from __future__ import annotations

import logging
from pathlib import Path

from app.schemas import CsvMetrics, OutcomeState
from models.records import FileFormat, FileTask
from services.pipeline import FilePipeline, build_tasks, process_task

CSV_HEADER = "date,product,category,price,quantity,discount\n"


def _write(tmp_path: Path, name: str, content: str | bytes) -> Path:
    path = tmp_path / name
    if isinstance(content, str):
        content = content.encode("utf-8")
    path.write_bytes(content)
    return path


def test_format_is_inferred_from_extension() -> None:
    tasks = build_tasks(["a.csv", "b.JSON", "dir/c.log", "d.txt", "noext"])

    assert [task.file_format for task in tasks] == [
        FileFormat.csv,
        FileFormat.json,
        FileFormat.log,
        FileFormat.unknown,
        FileFormat.unknown,
    ]
    assert tasks[2].file_name == "c.log"
    assert len({task.task_id for task in tasks}) == len(tasks)


def test_missing_file_is_a_failure(tmp_path: Path) -> None:
    missing = tmp_path / "missing.csv"

    result = process_task(FileTask.from_path(missing))

    assert result.outcome is OutcomeState.failure
    assert result.reason == f"File not found: {missing}"
    assert result.metrics is None


def test_unsupported_extension_is_a_failure(tmp_path: Path) -> None:
    path = _write(tmp_path, "notes.txt", "hello")

    result = process_task(FileTask.from_path(path))

    assert result.outcome is OutcomeState.failure
    assert result.file_format is FileFormat.unknown
    assert result.reason == "Unsupported file type: .txt"


def test_csv_outcomes(tmp_path: Path) -> None:
    clean = _write(tmp_path, "clean.csv", CSV_HEADER + "2024-01-01,Widget,Tools,10.00,2,10\n")
    mixed = _write(
        tmp_path,
        "mixed.csv",
        CSV_HEADER + "2024-01-01,Widget,Tools,10.00,2,10\n2024-01-01,,Tools,10.00,2,10\n",
    )
    broken = _write(tmp_path, "broken.csv", CSV_HEADER + "x\ny,z\n")
    empty = _write(tmp_path, "empty.csv", CSV_HEADER)

    results = [process_task(task) for task in build_tasks([clean, mixed, broken, empty])]

    assert [result.outcome for result in results] == [
        OutcomeState.success,
        OutcomeState.partial,
        OutcomeState.failure,
        OutcomeState.failure,
    ]
    assert results[1].metrics == CsvMetrics(
        valid_records=1,
        invalid_records=1,
        total_lines=2,
        total_sales=18.0,
        unique_products=1,
    )
    assert results[2].metrics is not None
    assert len(results[2].errors) == 2
    assert results[2].reason == "No valid records (2 invalid)"
    assert results[3].reason == "Empty file or no data after header"
    assert all(result.processing_ms is not None for result in results)


def test_json_outcomes(tmp_path: Path) -> None:
    empty_object = _write(tmp_path, "empty.json", "{}")
    truncated = _write(tmp_path, "truncated.json", '{"usuarios": [')

    ok = process_task(FileTask.from_path(empty_object))
    bad = process_task(FileTask.from_path(truncated))

    assert ok.outcome is OutcomeState.success
    assert bad.outcome is OutcomeState.failure
    assert bad.reason == "Malformed JSON"
    assert bad.failure is not None
    assert bad.failure.error_type == "JSONDecodeError"


def test_log_outcomes(tmp_path: Path) -> None:
    partial = _write(
        tmp_path, "app.log", "2024-01-01 10:00:00 [ERROR] disk full\ngarbage line\n"
    )
    empty = _write(tmp_path, "empty.log", "")

    partial_result = process_task(FileTask.from_path(partial))
    empty_result = process_task(FileTask.from_path(empty))

    assert partial_result.outcome is OutcomeState.partial
    assert empty_result.outcome is OutcomeState.failure
    assert empty_result.reason == "Empty file"


def test_binary_garbage_never_raises(tmp_path: Path) -> None:
    junk = bytes(range(256)) * 4
    paths = [_write(tmp_path, f"junk.{ext}", junk) for ext in ("csv", "json", "log")]

    results = [process_task(task) for task in build_tasks(paths)]

    assert all(result.outcome is not OutcomeState.success for result in results)


def test_skipped_lines_are_logged(tmp_path: Path, caplog) -> None:
    path = _write(
        tmp_path,
        "invalid.csv",
        CSV_HEADER + "2024-01-01,Widget,Tools,1,1,0\n2024-01-01,Widget,Tools,nope,1,0\n",
    )

    with caplog.at_level(logging.WARNING):
        FilePipeline().process(FileTask.from_path(path))

    records = [record for record in caplog.records if record.name == "services.pipeline"]
    assert records, "Expected line skip warnings to be logged."
    messages = [record.getMessage() for record in records]
    assert any("Skipping line 2" in message and "Invalid price" in message for message in messages)
    assert any(getattr(record, "file_name", None) == "invalid.csv" for record in records)

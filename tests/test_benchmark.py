from __future__ import annotations

from pathlib import Path

from app.schemas import BatchStatus, BenchmarkReport, OutcomeState
from services.benchmark import BenchmarkDriver, compare_timings
from services.coordinator import Coordinator
from services.pipeline import build_tasks
from services.sequential import run_sequential, run_sequential_batch

CSV_BODY = (
    "date,product,category,price,quantity,discount\n"
    "2024-01-01,Widget,Tools,10.00,2,10\n"
    "2024-01-01,,Tools,10.00,2,10\n"
)
JSON_BODY = '{"usuarios": [{"activo": true}, {"activo": false}], "sesiones": [{}]}'
LOG_BODY = "2024-01-01 10:00:00 [INFO] boot\n2024-01-01 10:00:01 [FATAL] crash\n"


def _sample_files(tmp_path: Path) -> list[Path]:
    files = {
        "sales.csv": CSV_BODY,
        "users.json": JSON_BODY,
        "app.log": LOG_BODY,
        "broken.json": '{"usuarios": [',
    }
    paths = []
    for name, body in files.items():
        path = tmp_path / name
        path.write_text(body, encoding="utf-8")
        paths.append(path)
    return paths


def _comparable(result) -> dict:
    return result.model_dump(exclude={"processing_ms"})


def test_sequential_and_parallel_agree(tmp_path: Path) -> None:
    tasks = build_tasks(_sample_files(tmp_path))

    sequential = run_sequential_batch(tasks)
    parallel = Coordinator().run(tasks, timeout_ms=5000)

    assert [_comparable(r) for r in sequential.ordered_results()] == [
        _comparable(r) for r in parallel.ordered_results()
    ]
    assert sequential.status is parallel.status is BatchStatus.partial


def test_sequential_runs_are_repeatable(tmp_path: Path) -> None:
    tasks = build_tasks(_sample_files(tmp_path))

    first = [_comparable(r) for r in run_sequential(tasks)]
    second = [_comparable(r) for r in run_sequential(tasks)]

    assert first == second
    assert [r["outcome"] for r in first] == [
        OutcomeState.partial,
        OutcomeState.success,
        OutcomeState.success,
        OutcomeState.failure,
    ]


def test_benchmark_runs_both_paths(tmp_path: Path) -> None:
    tasks = build_tasks(_sample_files(tmp_path))

    report = BenchmarkDriver().run(tasks, timeout_ms=5000)

    assert report.file_count == 4
    assert report.sequential_ms > 0
    assert report.parallel_ms > 0
    assert len(report.sequential.entries) == len(report.parallel.entries) == 4
    assert report.time_saved_ms == round(abs(report.sequential_ms - report.parallel_ms), 3)


def test_benchmark_of_empty_batch_reports_zeros() -> None:
    report = BenchmarkDriver().run([], timeout_ms=5000)

    assert report == BenchmarkReport()
    assert report.improvement == 0.0
    assert report.percent_faster == 0.0


def test_compare_timings_guards_against_zero() -> None:
    assert compare_timings(0.0, 0.0) == (0.0, 0.0, 0.0)
    assert compare_timings(10.0, 0.0) == (0.0, 100.0, 10.0)
    assert compare_timings(0.0, 4.0) == (0.0, 0.0, 4.0)


def test_compare_timings_values() -> None:
    improvement, percent_faster, time_saved = compare_timings(300.0, 100.0)

    assert improvement == 3.0
    assert percent_faster == 66.7
    assert time_saved == 200.0

    improvement, percent_faster, time_saved = compare_timings(100.0, 200.0)
    assert improvement == 0.5
    assert percent_faster == -100.0
    assert time_saved == 100.0

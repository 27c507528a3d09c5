from __future__ import annotations

import logging
import threading
from pathlib import Path

from app.schemas import OutcomeState
from models.records import FileFormat, FileTask
from services.parsing import ParsedFile
from services.pipeline import FilePipeline
from services.worker import CANCELLED_REASON, Worker


class ExplodingParser:
    def parse(self, raw: bytes) -> ParsedFile:
        raise RuntimeError("parser blew up")


def _csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "sales.csv"
    path.write_text(
        "date,product,category,price,quantity,discount\n2024-01-01,Widget,Tools,1,1,0\n",
        encoding="utf-8",
    )
    return path


def test_worker_tags_result_with_its_task(tmp_path: Path) -> None:
    task = FileTask.from_path(_csv_file(tmp_path))

    message = Worker().run(task)

    assert message.task is task
    assert message.result.outcome is OutcomeState.success
    assert message.result.file_name == "sales.csv"


def test_unexpected_exception_becomes_failure(tmp_path: Path, caplog) -> None:
    task = FileTask.from_path(_csv_file(tmp_path))
    worker = Worker(FilePipeline(parsers={FileFormat.csv: ExplodingParser()}))

    with caplog.at_level(logging.ERROR):
        message = worker.run(task)

    assert message.result.outcome is OutcomeState.failure
    assert message.result.reason == "Unexpected worker error: RuntimeError: parser blew up"
    assert any(record.exc_info for record in caplog.records)


def test_cancelled_worker_does_not_process(tmp_path: Path) -> None:
    calls = []

    class RecordingWorker(Worker):
        def process(self, task):
            calls.append(task)
            return super().process(task)

    cancel = threading.Event()
    cancel.set()

    message = RecordingWorker().run(FileTask.from_path(_csv_file(tmp_path)), cancel)

    assert calls == []
    assert message.result.outcome is OutcomeState.failure
    assert message.result.reason == CANCELLED_REASON

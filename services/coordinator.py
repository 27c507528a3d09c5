"""Fan-out/fan-in execution of a batch of file tasks."""

from __future__ import annotations

import logging
import threading
import time
from queue import Empty, Queue
from typing import Dict, Optional, Sequence

from app.schemas import BatchResult, ProcessingResult
from models.records import FileTask
from services.aggregator import assemble_batch
from services.pipeline import failure_result
from services.worker import Worker, WorkerMessage

logger = logging.getLogger(__name__)


class Coordinator:
    """Starts one worker thread per task and collects every result within a time bound.

    Workers deliver a ``WorkerMessage`` tagged with their task into a shared
    inbox, so a result is always recorded against the task that produced it.
    Each task's ``timeout_ms`` budget runs from the moment its worker starts;
    once it is spent the task is marked as timed out and its cancel event is
    set. A result that shows up for it later is ignored.

    Worker threads are daemons. A worker stuck in a blocking read is never
    interrupted, but it does not keep the process alive once the batch is back.
    """

    def __init__(self, worker: Optional[Worker] = None) -> None:
        self.worker = worker or Worker()

    def run(self, tasks: Sequence[FileTask], timeout_ms: int) -> BatchResult:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive.")

        start_time = time.perf_counter()
        tasks = list(tasks)
        results: Dict[str, ProcessingResult] = {}
        if not tasks:
            return assemble_batch(tasks, results, 0.0)

        logger.info(
            "Dispatching workers",
            extra={"file_count": len(tasks), "timeout_ms": timeout_ms},
        )

        inbox: Queue[WorkerMessage] = Queue()
        started: Dict[str, float] = {}
        cancel_events = {task.task_id: threading.Event() for task in tasks}
        for index, task in enumerate(tasks):
            threading.Thread(
                target=self._work,
                args=(task, cancel_events[task.task_id], started, inbox),
                name=f"file-worker-{index}",
                daemon=True,
            ).start()

        budget = timeout_ms / 1000
        pending: Dict[str, FileTask] = {task.task_id: task for task in tasks}
        while pending:
            now = time.perf_counter()
            running = [started[task_id] for task_id in pending if task_id in started]
            deadline = min(running) + budget if running else now + budget
            try:
                message = inbox.get(timeout=max(0.0, deadline - now))
            except Empty:
                self._expire(pending, started, cancel_events, results, timeout_ms)
                continue

            task = pending.pop(message.task.task_id, None)
            if task is None:
                logger.debug(
                    "Discarding late worker result",
                    extra={"task_id": message.task.task_id, "file_name": message.task.file_name},
                )
                continue
            results[task.task_id] = message.result

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        batch = assemble_batch(tasks, results, elapsed_ms)
        logger.info(
            "Batch collected",
            extra={
                "file_count": len(tasks),
                "error_count": batch.error_count,
                "processing_ms": batch.elapsed_ms,
            },
        )
        return batch

    def _work(
        self,
        task: FileTask,
        cancel_event: threading.Event,
        started: Dict[str, float],
        inbox: Queue[WorkerMessage],
    ) -> None:
        started[task.task_id] = time.perf_counter()
        try:
            message = self.worker.run(task, cancel_event)
        except Exception as exc:
            logger.exception(
                "Worker raised outside its own error handling",
                extra={"task_id": task.task_id, "file_name": task.file_name},
            )
            message = WorkerMessage(
                task=task,
                result=failure_result(task, f"Unexpected worker error: {type(exc).__name__}: {exc}"),
            )
        inbox.put(message)

    @staticmethod
    def _expire(
        pending: Dict[str, FileTask],
        started: Dict[str, float],
        cancel_events: Dict[str, threading.Event],
        results: Dict[str, ProcessingResult],
        timeout_ms: int,
    ) -> None:
        """Time out every started task whose own budget is spent."""
        now = time.perf_counter()
        expired = [
            task_id
            for task_id in pending
            if task_id in started and (now - started[task_id]) * 1000 >= timeout_ms
        ]
        for task_id in expired:
            task = pending.pop(task_id)
            cancel_events[task_id].set()
            results[task_id] = failure_result(task, f"Worker timeout after {timeout_ms}ms")
            logger.warning(
                "Worker timed out",
                extra={
                    "task_id": task_id,
                    "file_name": task.file_name,
                    "timeout_ms": timeout_ms,
                },
            )

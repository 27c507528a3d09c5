"""Unit tests for the aggregation logic."""

from __future__ import annotations

from app.schemas import BatchStatus, FileFormat, OutcomeState, ProcessingResult
from models.records import FileTask, SaleRecord
from services.aggregator import Aggregator, assemble_batch, summarize_outcomes


def _sale(product: str, price: float, quantity: int = 1, discount: float = 0.0) -> SaleRecord:
    """Helper to build deterministic sales records."""

    return SaleRecord(
        date="2024-01-01",
        product=product,
        category="Tools",
        price=price,
        quantity=quantity,
        discount=discount,
    )


def _result(outcome: OutcomeState, name: str = "file.csv") -> ProcessingResult:
    return ProcessingResult(
        file_name=name,
        path=name,
        file_format=FileFormat.csv,
        outcome=outcome,
    )


def test_aggregate_empty_iterable_returns_default_summary() -> None:
    summary = Aggregator().aggregate([])

    assert summary.record_count == 0
    assert summary.total_sales == 0.0
    assert summary.unique_products == 0
    assert summary.per_product_count == {}


def test_aggregate_computes_net_sales() -> None:
    sales = [
        _sale("Widget", 10.0, quantity=2, discount=10),
        _sale("Gadget", 3.335),
        _sale("Widget", 1.0, quantity=3),
    ]

    summary = Aggregator().aggregate(sales)

    assert summary.record_count == 3
    assert summary.total_sales == round(18.0 + 3.335 + 3.0, 2)
    assert summary.unique_products == 2
    assert summary.per_product_count == {"Widget": 2, "Gadget": 1}


def test_summarize_outcomes_derives_status() -> None:
    success, partial, failure = (
        OutcomeState.success,
        OutcomeState.partial,
        OutcomeState.failure,
    )

    assert summarize_outcomes([]).status is BatchStatus.success
    assert summarize_outcomes([_result(success)]).status is BatchStatus.success
    assert summarize_outcomes([_result(success), _result(partial)]).status is BatchStatus.partial
    assert summarize_outcomes([_result(success), _result(failure)]).status is BatchStatus.partial
    assert summarize_outcomes([_result(failure), _result(failure)]).status is BatchStatus.error

    counts = summarize_outcomes([_result(success), _result(partial), _result(failure)])
    assert (counts.success_count, counts.partial_count, counts.error_count) == (1, 1, 1)


def test_assemble_batch_follows_submission_order() -> None:
    tasks = [FileTask.from_path(name) for name in ("b.csv", "a.csv", "c.csv")]
    arrived = {
        tasks[2].task_id: _result(OutcomeState.failure, "c.csv"),
        tasks[0].task_id: _result(OutcomeState.success, "b.csv"),
        tasks[1].task_id: _result(OutcomeState.success, "a.csv"),
    }

    batch = assemble_batch(tasks, arrived, elapsed_ms=12.3456)

    assert [entry.path for entry in batch.entries] == ["b.csv", "a.csv", "c.csv"]
    assert [result.file_name for result in batch.ordered_results()] == ["b.csv", "a.csv", "c.csv"]
    assert batch.results[tasks[2].task_id].outcome is OutcomeState.failure
    assert batch.success_count == 2
    assert batch.error_count == 1
    assert batch.elapsed_ms == 12.346
    assert batch.status is BatchStatus.partial

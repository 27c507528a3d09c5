"""Aggregation logic for sales records and batch outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Sequence

from app.schemas import (
    BatchEntry,
    BatchResult,
    BatchStatus,
    OutcomeState,
    ProcessingResult,
)
from models.records import FileTask, SaleRecord


@dataclass
class SalesSummary:
    """Computed totals for a batch of validated sales records."""

    record_count: int = 0
    total_sales: float = 0.0
    per_product_count: Dict[str, int] = field(default_factory=dict)

    @property
    def unique_products(self) -> int:
        return len(self.per_product_count)


@dataclass(frozen=True)
class OutcomeSummary:
    success_count: int
    partial_count: int
    error_count: int
    status: BatchStatus


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, sales: Iterable[SaleRecord]) -> SalesSummary:
        summary = SalesSummary()
        total = 0.0

        for sale in sales:
            summary.record_count += 1
            total += sale.net_amount
            summary.per_product_count[sale.product] = (
                summary.per_product_count.get(sale.product, 0) + 1
            )

        # Python's round() resolves ties half-to-even.
        summary.total_sales = round(total, 2)
        return summary


def summarize_outcomes(results: Iterable[ProcessingResult]) -> OutcomeSummary:
    """Count outcomes and derive the batch status from them."""
    counts = {state: 0 for state in OutcomeState}
    for result in results:
        counts[result.outcome] += 1

    total = sum(counts.values())
    failures = counts[OutcomeState.failure]
    if failures and failures == total:
        status = BatchStatus.error
    elif failures or counts[OutcomeState.partial]:
        status = BatchStatus.partial
    else:
        status = BatchStatus.success

    return OutcomeSummary(
        success_count=counts[OutcomeState.success],
        partial_count=counts[OutcomeState.partial],
        error_count=failures,
        status=status,
    )


def assemble_batch(
    tasks: Sequence[FileTask],
    results: Mapping[str, ProcessingResult],
    elapsed_ms: float,
) -> BatchResult:
    """Zip results back onto the submitted tasks, in submission order."""
    entries = [
        BatchEntry(task_id=task.task_id, path=task.path, result=results[task.task_id])
        for task in tasks
    ]
    summary = summarize_outcomes(entry.result for entry in entries)
    return BatchResult(
        entries=entries,
        success_count=summary.success_count,
        partial_count=summary.partial_count,
        error_count=summary.error_count,
        elapsed_ms=round(elapsed_ms, 3),
        status=summary.status,
    )

"""Error-aware parser for CSV sales records.

Expected layout is a header line followed by data lines with six
comma-separated columns: ``date,product,category,price,quantity,discount``.
Each data line is validated on its own; invalid lines are reported and
skipped, valid lines feed the sales totals.
"""

from __future__ import annotations

from typing import List, Optional

from app.schemas import CsvMetrics, LineError
from models.records import SaleRecord
from services.aggregator import Aggregator
from services.parsing import (
    FileParseError,
    ParsedFile,
    decode_text,
    format_number,
    leading_float,
    leading_int,
    snippet,
    split_lines,
)

EXPECTED_COLUMNS = 6
MIN_DATE_LENGTH = 8
NO_DATA_REASON = "Empty file or no data after header"


def _check_price(raw: str, problems: List[str]) -> Optional[float]:
    price = leading_float(raw)
    if price is None:
        problems.append("Empty price" if not raw else f"Invalid price: '{raw}'")
    elif price <= 0:
        problems.append(f"Price must be positive (found: {format_number(price)})")
        return None
    return price


def _check_quantity(raw: str, problems: List[str]) -> Optional[int]:
    quantity = leading_int(raw)
    if quantity is None:
        problems.append("Empty quantity" if not raw else f"Invalid quantity: '{raw}'")
    elif quantity <= 0:
        problems.append(f"Quantity must be positive (found: {quantity})")
        return None
    return quantity


def _check_discount(raw: str, problems: List[str]) -> Optional[float]:
    discount = leading_float(raw)
    if discount is None:
        problems.append("Empty discount" if not raw else f"Invalid discount: '{raw}'")
    elif discount < 0:
        problems.append(f"Negative discount: {format_number(discount)}%")
        return None
    elif discount > 100:
        problems.append(f"Discount too high: {format_number(discount)}% (max 100%)")
        return None
    return discount


def parse_sale_line(line: str) -> SaleRecord:
    """Validate one data line, raising ``ValueError`` with every problem found."""
    # Raw comma split: quotes carry no meaning in this layout.
    fields = line.split(",")

    if len(fields) != EXPECTED_COLUMNS:
        raise ValueError(
            f"Incomplete line ({len(fields)} fields instead of {EXPECTED_COLUMNS})"
        )

    date, product, category, price_raw, quantity_raw, discount_raw = (
        value.strip() for value in fields
    )

    problems: List[str] = []
    if not date:
        problems.append("Empty date")
    elif len(date) < MIN_DATE_LENGTH:
        problems.append("Invalid date format (too short)")
    if not product:
        problems.append("Empty product name")
    if not category:
        problems.append("Empty category")
    price = _check_price(price_raw, problems)
    quantity = _check_quantity(quantity_raw, problems)
    discount = _check_discount(discount_raw, problems)

    if problems or price is None or quantity is None or discount is None:
        raise ValueError(", ".join(problems))

    return SaleRecord(
        date=date,
        product=product,
        category=category,
        price=price,
        quantity=quantity,
        discount=discount,
    )


class CsvParser:
    """Turns raw CSV bytes into sales metrics and per-line errors."""

    def __init__(self, aggregator: Optional[Aggregator] = None) -> None:
        self.aggregator = aggregator or Aggregator()

    def parse(self, raw: bytes) -> ParsedFile:
        data_lines = split_lines(decode_text(raw))[1:]
        if not any(line.strip() for line in data_lines):
            raise FileParseError(NO_DATA_REASON)

        sales: List[SaleRecord] = []
        errors: List[LineError] = []
        total_lines = 0

        for line_number, line in enumerate(data_lines, start=1):
            if not line.strip():
                continue
            total_lines += 1
            try:
                sales.append(parse_sale_line(line))
            except ValueError as exc:
                errors.append(
                    LineError(line_number=line_number, reason=str(exc), content=snippet(line))
                )

        summary = self.aggregator.aggregate(sales)
        metrics = CsvMetrics(
            valid_records=summary.record_count,
            invalid_records=len(errors),
            total_lines=total_lines,
            total_sales=summary.total_sales,
            unique_products=summary.unique_products,
        )
        return ParsedFile(metrics=metrics, valid_count=summary.record_count, errors=errors)

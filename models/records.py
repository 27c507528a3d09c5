"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Union
from uuid import uuid4


class FileFormat(str, Enum):
    """Input formats recognised by file extension."""

    csv = "csv"
    json = "json"
    log = "log"
    unknown = "unknown"

    @classmethod
    def from_path(cls, path: Union[str, PathLike[str]]) -> "FileFormat":
        suffix = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError:
            return cls.unknown


@dataclass(frozen=True, slots=True)
class FileTask:
    """One submitted file, consumed by exactly one worker or sequential call."""

    path: str
    file_format: FileFormat
    task_id: str = field(default_factory=lambda: uuid4().hex)

    @classmethod
    def from_path(cls, path: Union[str, PathLike[str]]) -> "FileTask":
        return cls(path=str(path), file_format=FileFormat.from_path(path))

    @property
    def file_name(self) -> str:
        return Path(self.path).name


@dataclass(slots=True)
class SaleRecord:
    """A single validated sales line parsed from a CSV file."""

    date: str
    product: str
    category: str
    price: float
    quantity: int
    discount: float

    @property
    def net_amount(self) -> float:
        return self.price * self.quantity * (1 - self.discount / 100)

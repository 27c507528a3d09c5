"""Execution history store."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.schemas import ExecutionRecord
from settings import get_settings

logger = logging.getLogger(__name__)


class ExecutionTable:
    """Thread-safe map of execution id to record, mirrored to a JSON file.

    Callers always receive deep copies, so mutating a returned record never
    changes the stored history. Every write rewrites the whole file through a
    temporary sibling and ``os.replace``.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._records: Dict[str, ExecutionRecord] = {}
        self._lock = RLock()
        if persistence_path is not None:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._records.update(self._read_file(persistence_path))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def save(self, record: ExecutionRecord) -> None:
        with self._lock:
            self._records[record.execution_id] = record.model_copy(deep=True)
            self._flush()

    def get(self, execution_id: str) -> Optional[ExecutionRecord]:
        with self._lock:
            record = self._records.get(execution_id)
            return None if record is None else record.model_copy(deep=True)

    def list_all(self) -> List[ExecutionRecord]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records.values()]

    def delete(self, execution_id: str) -> bool:
        with self._lock:
            if self._records.pop(execution_id, None) is None:
                return False
            self._flush()
            return True

    def clear(self) -> int:
        """Drop every record and return how many there were."""
        with self._lock:
            removed = len(self._records)
            self._records = {}
            self._flush()
            return removed

    def _flush(self) -> None:
        if self.persistence_path is None:
            return
        document = {key: record.model_dump(mode="json") for key, record in self._records.items()}
        staging = self.persistence_path.with_name(self.persistence_path.name + ".tmp")
        staging.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(staging, self.persistence_path)

    @staticmethod
    def _read_file(path: Path) -> Dict[str, ExecutionRecord]:
        if not path.exists():
            return {}
        try:
            document = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable execution history at %s", path)
            return {}
        if not isinstance(document, dict):
            logger.warning("Ignoring unreadable execution history at %s", path)
            return {}

        records: Dict[str, ExecutionRecord] = {}
        for key, payload in document.items():
            try:
                records[key] = ExecutionRecord.model_validate(payload)
            except ValidationError:
                logger.warning("Skipping invalid execution record", extra={"execution_id": key})
        return records


@lru_cache
def build_default_table(path: Optional[str] = None) -> ExecutionTable:
    table_path = get_settings().table_persistence_path if path is None else path
    return ExecutionTable(
        name="executions",
        persistence_path=Path(table_path) if table_path else None,
    )

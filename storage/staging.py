from __future__ import annotations

import shutil
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Optional

from settings import get_settings


class UploadStaging:
    """Stages uploaded files on disk so the processor can read them by path."""

    def __init__(self, root_path: Path) -> None:
        self.root_path = root_path
        self._lock = Lock()
        root_path.mkdir(parents=True, exist_ok=True)

    def put_file(self, batch_id: str, filename: str, data: bytes) -> Path:
        """Write ``data`` under the batch directory and return its path.

        Only the base name of ``filename`` is kept; a clash inside the same
        batch gets a numeric suffix.
        """
        name = Path(filename).name or "upload"
        batch_dir = self.root_path / batch_id
        with self._lock:
            batch_dir.mkdir(parents=True, exist_ok=True)
            path = batch_dir / name
            counter = 1
            while path.exists():
                path = batch_dir / f"{Path(name).stem}-{counter}{Path(name).suffix}"
                counter += 1
            path.write_bytes(data)
        return path

    def remove_batch(self, batch_id: str) -> None:
        with self._lock:
            shutil.rmtree(self.root_path / batch_id, ignore_errors=True)


@lru_cache
def build_default_staging(root_path: Optional[str] = None) -> UploadStaging:
    settings = get_settings()
    staging_root = settings.staging_path if root_path is None else root_path
    return UploadStaging(root_path=Path(staging_root))

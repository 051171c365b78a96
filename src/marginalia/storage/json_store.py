"""JSON file storage backend.

Stores each entity kind as one JSON array file under a data directory.
Writes go to a temporary file which then replaces the original, so a save
either lands completely or not at all.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from .base import EntityKind, StoreError

logger = logging.getLogger(__name__)


class JSONFileStore:
    """File-per-kind JSON store.

    Implements the DurableStore protocol.
    """

    def __init__(self, data_dir: Path | str) -> None:
        """Initialize JSON store.

        Args:
            data_dir: Directory holding the collection files. Created if missing.
        """
        self._data_dir = Path(data_dir).expanduser()
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, kind: EntityKind) -> Path:
        return self._data_dir / f"{kind.value}.json"

    def load_all(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Load a collection file.

        A missing file is an empty collection.

        Raises:
            StoreError: If the file cannot be read or is not a JSON array
        """
        path = self._path(kind)
        if not path.exists():
            return []

        try:
            with self._lock, open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(kind, f"cannot read {path}: {e}") from e

        if not isinstance(data, list):
            raise StoreError(kind, f"expected a JSON array in {path}")
        return data

    def save_all(self, kind: EntityKind, records: list[dict[str, Any]]) -> None:
        """Rewrite a collection file atomically.

        Raises:
            StoreError: If the file cannot be written
        """
        path = self._path(kind)
        with self._lock:
            tmp_name: str | None = None
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._data_dir, prefix=f".{kind.value}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except (OSError, TypeError, ValueError) as e:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StoreError(kind, f"cannot write {path}: {e}") from e

        logger.debug(f"Saved {len(records)} {kind.value} records to {path}")

    @property
    def data_dir(self) -> Path:
        """Directory holding the collection files."""
        return self._data_dir


__all__ = ["JSONFileStore"]

"""In-memory durable store, used for tests and the mock profile."""

import copy
import threading
from typing import Any

from .base import EntityKind


class InMemoryStore:
    """Keeps deep copies of each saved collection.

    Implements the DurableStore protocol.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._collections: dict[EntityKind, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()
        self._save_count = 0

    def load_all(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Return a copy of the stored collection."""
        with self._lock:
            return copy.deepcopy(self._collections.get(kind, []))

    def save_all(self, kind: EntityKind, records: list[dict[str, Any]]) -> None:
        """Replace the stored collection."""
        with self._lock:
            self._collections[kind] = copy.deepcopy(records)
            self._save_count += 1

    @property
    def save_count(self) -> int:
        """Number of save_all calls so far."""
        return self._save_count


__all__ = ["InMemoryStore"]

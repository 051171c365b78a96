"""Durable store protocol shared by all storage backends.

Each entity kind is stored as a whole collection: loads return every record
and saves rewrite the full collection in one all-or-nothing call.
"""

from enum import Enum
from typing import Any, Protocol


class EntityKind(Enum):
    """Kinds of entities kept in the durable store."""

    NOTES = "notes"
    SESSIONS = "reading_sessions"
    CHATS = "chat_sessions"
    BOOKS = "books"


class StoreError(Exception):
    """Raised when a collection cannot be decoded or written."""

    def __init__(self, kind: EntityKind, message: str) -> None:
        """Initialize store error.

        Args:
            kind: Entity kind the failing operation touched.
            message: Error description.
        """
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind


class DurableStore(Protocol):
    """Interface for whole-collection persistence."""

    def load_all(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Load every record of a kind.

        Raises:
            StoreError: If the stored data cannot be read or decoded
        """
        ...

    def save_all(self, kind: EntityKind, records: list[dict[str, Any]]) -> None:
        """Replace the stored collection of a kind.

        Raises:
            StoreError: If the collection cannot be written
        """
        ...


__all__ = ["DurableStore", "EntityKind", "StoreError"]

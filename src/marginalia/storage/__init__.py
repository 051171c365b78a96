"""Durable storage for Marginalia.

Provides whole-collection persistence keyed by entity kind, with in-memory,
JSON file and MongoDB backends.
"""

from typing import TYPE_CHECKING

from .base import DurableStore, EntityKind, StoreError
from .json_store import JSONFileStore
from .memory import InMemoryStore

if TYPE_CHECKING:
    from ..config import StorageConfig


def create_store(config: "StorageConfig | None" = None) -> DurableStore:
    """Create the durable store selected by configuration.

    Args:
        config: Storage configuration (in-memory store if None)

    Returns:
        DurableStore implementation

    Raises:
        ValueError: If the configured backend is unknown
    """
    if config is None or config.backend == "memory":
        return InMemoryStore()

    if config.backend == "json":
        return JSONFileStore(config.data_dir)

    if config.backend == "mongo":
        from .mongo import MongoStore

        return MongoStore.connect(
            uri=config.mongo_uri,
            database_name=config.database,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
        )

    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "DurableStore",
    "EntityKind",
    "InMemoryStore",
    "JSONFileStore",
    "StoreError",
    "create_store",
]

"""MongoDB storage backend.

One collection per entity kind. A save writes the whole collection into a
staging collection and renames it over the live one, so a failed save
leaves the previous contents in place. The saved order is kept in a
private position field.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from .base import EntityKind, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STAGING_SUFFIX = "__staging"


def retry_on_connection_failure(
    max_retries: int = 3,
    base_delay: float = 0.5,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for exponential backoff retry on connection failures.

    Args:
        max_retries: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).

    Returns:
        Decorated function with retry logic.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            "Connection failed (attempt %d/%d), retrying in %.1fs: %s",
                            attempt + 1,
                            max_retries,
                            delay,
                            str(e),
                        )
                        time.sleep(delay)
                    else:
                        logger.error(
                            "Connection failed after %d attempts: %s",
                            max_retries,
                            str(e),
                        )

            if last_exception:
                raise last_exception
            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator


class MongoStore:
    """MongoDB-backed durable store.

    Implements the DurableStore protocol. Record ids are kept in the "id"
    field; Mongo's own "_id" never leaves this class.
    """

    def __init__(self, database: Database[dict[str, Any]]) -> None:
        """Initialize with a database handle.

        Args:
            database: MongoDB database (a mongomock database works in tests).
        """
        self._db = database

    @classmethod
    def connect(
        cls,
        uri: str = "mongodb://localhost:27017",
        database_name: str = "marginalia",
        server_selection_timeout_ms: int = 5000,
    ) -> "MongoStore":
        """Connect to a MongoDB server and verify it answers.

        Raises:
            ConnectionFailure: If the server cannot be reached.
        """
        client: MongoClient[dict[str, Any]] = MongoClient(
            uri, serverSelectionTimeoutMS=server_selection_timeout_ms
        )
        client.admin.command("ping")
        logger.info("Connected to MongoDB at %s", uri)
        return cls(client[database_name])

    @retry_on_connection_failure()
    def _find_all(self, kind: EntityKind) -> list[dict[str, Any]]:
        return list(self._db[kind.value].find({}, {"_id": 0}).sort("_position", 1))

    @retry_on_connection_failure()
    def _replace_all(self, kind: EntityKind, records: list[dict[str, Any]]) -> None:
        if not records:
            self._db.drop_collection(kind.value)
            return

        staging = self._db[f"{kind.value}{STAGING_SUFFIX}"]
        staging.drop()
        try:
            staging.insert_many(
                [{**record, "_position": position} for position, record in enumerate(records)]
            )
            staging.rename(kind.value, dropTarget=True)
        except PyMongoError:
            staging.drop()
            raise

    def load_all(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Load every record of a kind, in saved order.

        Raises:
            StoreError: If the query fails
        """
        try:
            docs = self._find_all(kind)
        except PyMongoError as e:
            raise StoreError(kind, f"load failed: {e}") from e

        for doc in docs:
            doc.pop("_position", None)
        return docs

    def save_all(self, kind: EntityKind, records: list[dict[str, Any]]) -> None:
        """Rewrite the collection of a kind.

        Raises:
            StoreError: If the write fails
        """
        try:
            self._replace_all(kind, records)
        except PyMongoError as e:
            raise StoreError(kind, f"save failed: {e}") from e


__all__ = ["MongoStore", "retry_on_connection_failure"]

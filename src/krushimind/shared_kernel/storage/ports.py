"""Protocols (ports) for the local store."""

from __future__ import annotations

from collections.abc import AsyncIterable
from typing import Any, Protocol, runtime_checkable

from shared_kernel.storage.value_objects import Collection, IndexFilter


@runtime_checkable
class ILocalStore(Protocol):
    """Durable keyed storage for records, outbox entries, and preferences.

    Records are value objects. Each collection has exactly one value object
    type; putting anything else raises TypeError.
    """

    async def put(self, collection: Collection, record: Any) -> Any:
        """Insert or replace a record.

        Records without an id are appended and receive an auto-incremented
        id. Records with an id (and preferences, keyed by name) replace
        whatever was stored under that key.

        Args:
            collection: Target collection
            record: Value object to store

        Returns:
            The key the record was stored under

        Raises:
            StorageError: If the store is unavailable or rejects the write
        """
        ...

    async def get(self, collection: Collection, key: Any) -> Any | None:
        """Fetch one record by primary key, or None if absent."""
        ...

    def get_all(
        self,
        collection: Collection,
        where: IndexFilter | None = None,
        *,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> AsyncIterable[Any]:
        """Return a lazy, restartable sequence of records.

        Nothing is read until the sequence is iterated. Each iteration
        runs a fresh query, so the same sequence can be iterated again.
        """
        ...

    async def delete(self, collection: Collection, key: Any) -> None:
        """Delete one record by primary key. Missing keys are ignored."""
        ...

"""Protocol for record service observability.

Defines the interface for domain probes that capture record creation
events without cluttering the service with logging calls.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class RecordServiceProbe(Protocol):
    """Domain probe for record service operations."""

    def record_created(
        self,
        collection: str,
        record_id: int,
        queue_entry_id: int | None,
    ) -> None:
        """Record that a record was stored locally."""
        ...

    def record_creation_failed(self, collection: str, error: str) -> None:
        """Record that a record could not be stored."""
        ...

    def preference_saved(self, key: str) -> None:
        """Record that a user preference was written."""
        ...


class DefaultRecordServiceProbe:
    """Default implementation of RecordServiceProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def record_created(
        self,
        collection: str,
        record_id: int,
        queue_entry_id: int | None,
    ) -> None:
        """Record that a record was stored locally."""
        self._logger.info(
            "record_created",
            collection=collection,
            record_id=record_id,
            queue_entry_id=queue_entry_id,
        )

    def record_creation_failed(self, collection: str, error: str) -> None:
        """Record that a record could not be stored."""
        self._logger.error(
            "record_creation_failed",
            collection=collection,
            error=error,
        )

    def preference_saved(self, key: str) -> None:
        """Record that a user preference was written."""
        self._logger.debug("preference_saved", key=key)

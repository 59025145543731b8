"""Sync queue manager backed by the local store.

The queue holds one outbox entry per synchronization obligation. Entries are
created next to the records they refer to and are only ever advanced along
the outbox state machine:

    pending --success--------------------------> completed  (terminal)
    pending --retryable failure, attempts < max--> pending
    pending --attempts >= max or not retryable---> failed     (terminal)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from shared_kernel.outbox.exceptions import (
    OutboxEntryNotFoundError,
    OutboxEntryTerminalError,
    RecordMissingError,
)
from shared_kernel.outbox.observability import DefaultSyncQueueProbe, SyncQueueProbe
from shared_kernel.outbox.routing import route_for
from shared_kernel.outbox.value_objects import (
    AttemptOutcome,
    OutboxEntry,
    OutboxStatus,
    RecordType,
)
from shared_kernel.storage.exceptions import StorageError
from shared_kernel.storage.value_objects import Collection, IndexFilter

if TYPE_CHECKING:
    from shared_kernel.storage.ports import ILocalStore


def utc_now() -> datetime:
    return datetime.now(UTC)


class SyncQueueManager:
    """Maintains the sync queue collection of the local store."""

    def __init__(
        self,
        store: ILocalStore,
        max_attempts: int = 5,
        probe: SyncQueueProbe | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the queue manager.

        Args:
            store: The local store holding the queue
            max_attempts: Attempts after which a retryable failure becomes
                terminal
            probe: Optional observability probe
            clock: Source of UTC timestamps
        """
        self._store = store
        self._max_attempts = max_attempts
        self._probe = probe or DefaultSyncQueueProbe()
        self._clock = clock

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def enqueue(self, record_type: RecordType | str, record_id: int) -> int | None:
        """Create a pending entry with zero attempts.

        A storage failure is reported through the probe and never raised to
        the caller, whose record write has already succeeded.

        Returns:
            The new entry id, or None if the entry could not be stored
        """
        record_type = RecordType(record_type)
        entry = OutboxEntry(
            record_type=record_type,
            record_id=record_id,
            status=OutboxStatus.PENDING,
            attempts=0,
            created_at=self._clock(),
        )
        try:
            entry_id = await self._store.put(Collection.SYNC_QUEUE, entry)
        except StorageError as e:
            self._probe.enqueue_failed(str(record_type), record_id, str(e))
            return None

        self._probe.entry_enqueued(entry_id, str(record_type), record_id)
        return entry_id

    async def list_pending(self, limit: int = 50) -> list[OutboxEntry]:
        """Return pending entries, oldest first, at most ``limit``."""
        return await self._store.get_all(
            Collection.SYNC_QUEUE,
            IndexFilter("status", OutboxStatus.PENDING),
            order_by="createdAt",
            limit=limit,
        ).all()

    async def list_entries(self, status: OutboxStatus | None = None) -> list[OutboxEntry]:
        """Return all entries, or those with ``status``, oldest first."""
        where = IndexFilter("status", OutboxStatus(status)) if status else None
        return await self._store.get_all(
            Collection.SYNC_QUEUE, where, order_by="createdAt"
        ).all()

    async def get(self, entry_id: int) -> OutboxEntry | None:
        return await self._store.get(Collection.SYNC_QUEUE, entry_id)

    async def mark_outcome(
        self,
        entry_id: int,
        outcome: AttemptOutcome | str,
        details: dict[str, Any] | None = None,
        *,
        retryable: bool = False,
    ) -> OutboxEntry:
        """Record the outcome of one attempt.

        Attempts are incremented and the attempt time is stamped whatever
        the outcome. A retryable failure leaves the entry pending until the
        incremented attempt count reaches the maximum.

        Args:
            entry_id: Entry the attempt was made for
            outcome: COMPLETED or FAILED
            details: Diagnostic payload replacing the previous one
            retryable: Whether a FAILED outcome may be retried later

        Returns:
            The updated entry

        Raises:
            OutboxEntryNotFoundError: If the entry does not exist
            OutboxEntryTerminalError: If the entry is already completed or failed
        """
        outcome = AttemptOutcome(outcome)
        entry = await self.get(entry_id)
        if entry is None:
            raise OutboxEntryNotFoundError(entry_id)
        if entry.is_terminal:
            raise OutboxEntryTerminalError(entry_id, str(entry.status))

        attempts = entry.attempts + 1
        if outcome is AttemptOutcome.COMPLETED:
            status = OutboxStatus.COMPLETED
        elif retryable and attempts < self._max_attempts:
            status = OutboxStatus.PENDING
        else:
            status = OutboxStatus.FAILED

        updated = replace(
            entry,
            status=status,
            attempts=attempts,
            last_attempt_at=self._clock(),
            details=details,
        )
        await self._store.put(Collection.SYNC_QUEUE, updated)

        self._probe.outcome_recorded(entry_id, str(outcome), str(status), attempts)
        return updated

    async def purge_completed(self, older_than: datetime | None = None) -> int:
        """Delete completed entries.

        Args:
            older_than: Only delete entries last attempted before this time.
                All completed entries are deleted when omitted.

        Returns:
            Number of entries deleted
        """
        count = 0
        completed = self._store.get_all(
            Collection.SYNC_QUEUE, IndexFilter("status", OutboxStatus.COMPLETED)
        )
        async for entry in completed:
            if older_than is not None and (
                entry.last_attempt_at is None or entry.last_attempt_at >= older_than
            ):
                continue
            await self._store.delete(Collection.SYNC_QUEUE, entry.id)
            count += 1

        self._probe.entries_purged(count)
        return count

    async def requeue(self, entry_id: int) -> int | None:
        """Give a terminally failed entry's record a fresh pending entry.

        The failed entry is left untouched; failure is never reversed.

        Returns:
            The new entry id, or None if it could not be stored

        Raises:
            OutboxEntryNotFoundError: If the entry does not exist
            OutboxEntryTerminalError: If the entry is not in FAILED status
            RecordMissingError: If the entry's record no longer exists
        """
        entry = await self.get(entry_id)
        if entry is None:
            raise OutboxEntryNotFoundError(entry_id)
        if entry.status is not OutboxStatus.FAILED:
            raise OutboxEntryTerminalError(entry_id, str(entry.status))

        route = route_for(entry.record_type)
        if await self._store.get(route.collection, entry.record_id) is None:
            raise RecordMissingError(
                f"{entry.record_type} {entry.record_id} no longer exists"
            )

        new_id = await self.enqueue(entry.record_type, entry.record_id)
        if new_id is not None:
            self._probe.entry_requeued(entry_id, new_id)
        return new_id

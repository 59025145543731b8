"""Unit tests for SyncQueueManager backed by a real local store."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from infrastructure.outbox.sync_queue import SyncQueueManager
from shared_kernel.outbox import (
    AttemptOutcome,
    OutboxEntryNotFoundError,
    OutboxEntryTerminalError,
    OutboxStatus,
    RecordMissingError,
    RecordType,
)
from shared_kernel.storage import Collection, MarketplaceListing, StorageError


@pytest.fixture
def probe() -> MagicMock:
    return MagicMock()


@pytest.fixture
def queue(local_store, probe, clock) -> SyncQueueManager:
    return SyncQueueManager(local_store, max_attempts=5, probe=probe, clock=clock)


async def store_listing(local_store, clock) -> int:
    return await local_store.put(
        Collection.MARKETPLACE,
        MarketplaceListing(payload={"productType": "rice"}, created_at=clock()),
    )


class TestEnqueue:
    """Tests for enqueue()."""

    @pytest.mark.asyncio
    async def test_creates_pending_entry_with_zero_attempts(self, queue, clock):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 7)

        entry = await queue.get(entry_id)
        assert entry.status is OutboxStatus.PENDING
        assert entry.attempts == 0
        assert entry.record_type is RecordType.MARKETPLACE
        assert entry.record_id == 7
        assert entry.created_at == clock()
        assert entry.last_attempt_at is None

    @pytest.mark.asyncio
    async def test_accepts_record_type_strings(self, queue):
        entry_id = await queue.enqueue("identification", 1)

        assert (await queue.get(entry_id)).record_type is RecordType.IDENTIFICATION

    @pytest.mark.asyncio
    async def test_storage_failure_returns_none_without_raising(self, probe, clock):
        """A failed enqueue should be reported to the probe, not the caller."""
        store = MagicMock()
        store.put = AsyncMock(side_effect=StorageError("disk full", "syncQueue"))
        queue = SyncQueueManager(store, probe=probe, clock=clock)

        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        assert entry_id is None
        probe.enqueue_failed.assert_called_once_with("marketplace", 1, "disk full")


class TestListPending:
    """Tests for list_pending()."""

    @pytest.mark.asyncio
    async def test_returns_oldest_first(self, queue, clock):
        first = await queue.enqueue(RecordType.MARKETPLACE, 1)
        clock.advance(minutes=1)
        second = await queue.enqueue(RecordType.MARKETPLACE, 2)

        pending = await queue.list_pending()

        assert [entry.id for entry in pending] == [first, second]

    @pytest.mark.asyncio
    async def test_respects_limit(self, queue, clock):
        for record_id in range(5):
            clock.advance(seconds=1)
            await queue.enqueue(RecordType.MARKETPLACE, record_id)

        pending = await queue.list_pending(limit=3)

        assert [entry.record_id for entry in pending] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_excludes_terminal_entries(self, queue):
        done = await queue.enqueue(RecordType.MARKETPLACE, 1)
        waiting = await queue.enqueue(RecordType.MARKETPLACE, 2)
        await queue.mark_outcome(done, AttemptOutcome.COMPLETED)

        pending = await queue.list_pending()

        assert [entry.id for entry in pending] == [waiting]


class TestMarkOutcome:
    """Tests for mark_outcome()."""

    @pytest.mark.asyncio
    async def test_completed_outcome_is_terminal(self, queue, clock):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)
        clock.advance(minutes=2)

        entry = await queue.mark_outcome(
            entry_id, AttemptOutcome.COMPLETED, {"status": 201}
        )

        assert entry.status is OutboxStatus.COMPLETED
        assert entry.attempts == 1
        assert entry.last_attempt_at == clock()
        assert entry.details == {"status": 201}
        assert await queue.get(entry_id) == entry

    @pytest.mark.asyncio
    async def test_retryable_failure_stays_pending_below_max(self, queue):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        entry = await queue.mark_outcome(
            entry_id, AttemptOutcome.FAILED, {"status": 500}, retryable=True
        )

        assert entry.status is OutboxStatus.PENDING
        assert entry.attempts == 1

    @pytest.mark.asyncio
    async def test_retryable_failure_at_max_becomes_failed(self, queue):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        for _ in range(5):
            entry = await queue.mark_outcome(
                entry_id, AttemptOutcome.FAILED, {"status": 500}, retryable=True
            )

        assert entry.status is OutboxStatus.FAILED
        assert entry.attempts == 5

    @pytest.mark.asyncio
    async def test_non_retryable_failure_is_terminal(self, queue):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        entry = await queue.mark_outcome(
            entry_id, AttemptOutcome.FAILED, {"reason": "record not found"}
        )

        assert entry.status is OutboxStatus.FAILED
        assert entry.attempts == 1

    @pytest.mark.asyncio
    async def test_attempts_count_every_processing(self, queue):
        """attempts should equal the number of recorded outcomes."""
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        for _ in range(3):
            await queue.mark_outcome(entry_id, AttemptOutcome.FAILED, retryable=True)
        entry = await queue.mark_outcome(entry_id, AttemptOutcome.COMPLETED)

        assert entry.attempts == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("outcome", [AttemptOutcome.COMPLETED, AttemptOutcome.FAILED])
    async def test_terminal_entries_never_change(self, queue, outcome):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)
        terminal = await queue.mark_outcome(entry_id, outcome)

        for later in (AttemptOutcome.COMPLETED, AttemptOutcome.FAILED):
            with pytest.raises(OutboxEntryTerminalError):
                await queue.mark_outcome(entry_id, later, retryable=True)

        assert await queue.get(entry_id) == terminal

    @pytest.mark.asyncio
    async def test_missing_entry_raises(self, queue):
        with pytest.raises(OutboxEntryNotFoundError):
            await queue.mark_outcome(404, AttemptOutcome.COMPLETED)

    @pytest.mark.asyncio
    async def test_reports_outcome_to_probe(self, queue, probe):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        await queue.mark_outcome(entry_id, AttemptOutcome.FAILED, retryable=True)

        probe.outcome_recorded.assert_called_once_with(entry_id, "failed", "pending", 1)


class TestPurgeCompleted:
    """Tests for purge_completed()."""

    @pytest.mark.asyncio
    async def test_removes_only_completed_entries_older_than_cutoff(self, queue, clock):
        old = await queue.enqueue(RecordType.MARKETPLACE, 1)
        recent = await queue.enqueue(RecordType.MARKETPLACE, 2)
        pending = await queue.enqueue(RecordType.MARKETPLACE, 3)

        await queue.mark_outcome(old, AttemptOutcome.COMPLETED)
        clock.advance(days=7)
        await queue.mark_outcome(recent, AttemptOutcome.COMPLETED)
        clock.advance(days=1)

        removed = await queue.purge_completed(older_than=clock() - timedelta(days=7))

        assert removed == 1
        assert await queue.get(old) is None
        assert await queue.get(recent) is not None
        assert await queue.get(pending) is not None

    @pytest.mark.asyncio
    async def test_second_identical_purge_removes_nothing(self, queue, clock):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)
        await queue.mark_outcome(entry_id, AttemptOutcome.COMPLETED)
        cutoff = clock() + timedelta(seconds=1)

        assert await queue.purge_completed(cutoff) == 1
        assert await queue.purge_completed(cutoff) == 0

    @pytest.mark.asyncio
    async def test_without_cutoff_removes_all_completed(self, queue):
        for record_id in range(3):
            entry_id = await queue.enqueue(RecordType.MARKETPLACE, record_id)
            await queue.mark_outcome(entry_id, AttemptOutcome.COMPLETED)
        failed = await queue.enqueue(RecordType.MARKETPLACE, 9)
        await queue.mark_outcome(failed, AttemptOutcome.FAILED)

        assert await queue.purge_completed() == 3
        assert [e.id for e in await queue.list_entries()] == [failed]


class TestRequeue:
    """Tests for requeue() and list_entries()."""

    @pytest.mark.asyncio
    async def test_requeue_creates_new_pending_entry(self, queue, local_store, clock, probe):
        record_id = await store_listing(local_store, clock)
        failed = await queue.enqueue(RecordType.MARKETPLACE, record_id)
        await queue.mark_outcome(failed, AttemptOutcome.FAILED)

        new_id = await queue.requeue(failed)

        assert new_id is not None and new_id > failed
        assert (await queue.get(failed)).status is OutboxStatus.FAILED
        fresh = await queue.get(new_id)
        assert fresh.status is OutboxStatus.PENDING
        assert fresh.attempts == 0
        assert fresh.record_id == record_id
        probe.entry_requeued.assert_called_once_with(failed, new_id)

    @pytest.mark.asyncio
    async def test_requeue_rejects_non_failed_entries(self, queue):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 1)

        with pytest.raises(OutboxEntryTerminalError):
            await queue.requeue(entry_id)

    @pytest.mark.asyncio
    async def test_requeue_rejects_missing_records(self, queue):
        entry_id = await queue.enqueue(RecordType.MARKETPLACE, 999)
        await queue.mark_outcome(entry_id, AttemptOutcome.FAILED)

        with pytest.raises(RecordMissingError):
            await queue.requeue(entry_id)

    @pytest.mark.asyncio
    async def test_requeue_missing_entry_raises(self, queue):
        with pytest.raises(OutboxEntryNotFoundError):
            await queue.requeue(1)

    @pytest.mark.asyncio
    async def test_list_entries_filters_by_status(self, queue):
        done = await queue.enqueue(RecordType.MARKETPLACE, 1)
        await queue.enqueue(RecordType.MARKETPLACE, 2)
        await queue.mark_outcome(done, AttemptOutcome.COMPLETED)

        completed = await queue.list_entries(OutboxStatus.COMPLETED)
        everything = await queue.list_entries()

        assert [entry.id for entry in completed] == [done]
        assert len(everything) == 2

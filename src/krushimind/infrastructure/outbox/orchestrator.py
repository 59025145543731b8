"""Sync orchestrator that drains the sync queue to the remote server.

The orchestrator runs as a set of background tasks within the application
and is the only component that moves outbox entries out of PENDING.
Passes are triggered three ways:

1. Connectivity: a fresh offline -> online transition from the monitor
2. Interval: a fixed timer while the application runs
3. Manual: an explicit call to ``trigger()`` (the "sync now" button)

Passes never overlap. A trigger that arrives while a pass is in flight is
reported as SKIPPED.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from shared_kernel.outbox.exceptions import (
    RecordMissingError,
    SyncAttemptFailedError,
    SyncError,
    SyncExhaustedError,
)
from shared_kernel.outbox.observability import (
    DefaultSyncOrchestratorProbe,
    SyncOrchestratorProbe,
)
from shared_kernel.outbox.routing import route_for
from shared_kernel.outbox.value_objects import (
    AttemptOutcome,
    OutboxEntry,
    OutboxStatus,
    SyncPassResult,
    SyncPassStatus,
    SyncState,
    SyncStatus,
)
from shared_kernel.storage.exceptions import StorageError

if TYPE_CHECKING:
    from infrastructure.connectivity.monitor import ConnectivityMonitor
    from infrastructure.settings import SyncSettings
    from shared_kernel.outbox.ports import ISyncQueue, RemoteGateway
    from shared_kernel.storage.ports import ILocalStore


class _PassCounts:
    def __init__(self) -> None:
        self.synced = 0
        self.failed = 0
        self.deferred = 0


class SyncOrchestrator:
    """Background orchestrator that pushes pending records to the server."""

    def __init__(
        self,
        store: ILocalStore,
        queue: ISyncQueue,
        connectivity: ConnectivityMonitor,
        gateway: RemoteGateway,
        settings: SyncSettings,
        probe: SyncOrchestratorProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Local store holding the records referenced by entries
            queue: Sync queue to drain
            connectivity: Monitor used to confirm reachability and to
                subscribe to online transitions
            gateway: Transport that pushes one record at a time
            settings: Sync settings (interval, batch size, limits, retention)
            probe: Observability probe for logging
            clock: Source of UTC timestamps
        """
        self._store = store
        self._queue = queue
        self._connectivity = connectivity
        self._gateway = gateway
        self._settings = settings
        self._probe = probe or DefaultSyncOrchestratorProbe()
        self._clock = clock or (lambda: datetime.now(UTC))

        self._in_flight = False
        self._running = False
        self._status = SyncStatus(is_online=False, state=SyncState.IDLE)
        self._interval_task: asyncio.Task | None = None
        self._pass_tasks: set[asyncio.Task] = set()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def status(self) -> SyncStatus:
        """Current sync status snapshot."""
        return self._status

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_syncing(self) -> bool:
        return self._in_flight

    async def start(self) -> None:
        """Start reacting to triggers.

        Subscribes to connectivity transitions, starts the link watcher and
        the interval loop, then schedules an initial pass in the background.
        """
        if self._running:
            return

        self._running = True
        self._unsubscribe = self._connectivity.subscribe(
            on_online=self._on_online, on_offline=self._on_offline
        )
        await self._connectivity.start()
        self._interval_task = asyncio.create_task(self._interval_loop())
        self._probe.orchestrator_started(self._settings.interval_seconds)

        self._schedule_pass("startup")

    async def stop(self) -> None:
        """Gracefully stop the orchestrator.

        Unsubscribes from the monitor and cancels the interval loop and any
        pass scheduled by a connectivity transition.
        """
        if not self._running:
            return

        self._running = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        await self._connectivity.stop()

        tasks = [*self._pass_tasks]
        if self._interval_task is not None:
            tasks.append(self._interval_task)
            self._interval_task = None

        for task in tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._pass_tasks.clear()
        self._probe.orchestrator_stopped()

    async def trigger(self) -> SyncPassResult:
        """Run a pass on explicit user request."""
        return await self.run_pass("manual")

    async def run_pass(self, trigger: str = "manual") -> SyncPassResult:
        """Run one sync pass.

        Args:
            trigger: What caused the pass, for logging

        Returns:
            Statistics of the pass. Never raises for per-entry or
            pass-level failures; those are reflected in the result.
        """
        if self._in_flight:
            self._probe.pass_skipped(trigger)
            return SyncPassResult(status=SyncPassStatus.SKIPPED)

        with self._pass_guard():
            self._probe.pass_started(trigger)
            try:
                result = await self._run_pass(trigger)
            except Exception as e:
                self._probe.pass_aborted(trigger, str(e))
                result = SyncPassResult(status=SyncPassStatus.ABORTED, error=str(e))

        self._record_result(result)
        return result

    @contextmanager
    def _pass_guard(self) -> Iterator[None]:
        self._in_flight = True
        self._status = replace(self._status, state=SyncState.SYNCING)
        try:
            yield
        finally:
            self._in_flight = False

    async def _run_pass(self, trigger: str) -> SyncPassResult:
        online = await self._connectivity.check_now()
        self._status = replace(self._status, is_online=online)
        if not online:
            self._probe.pass_offline(trigger)
            return SyncPassResult(status=SyncPassStatus.OFFLINE)

        entries = await self._queue.list_pending(self._settings.batch_limit)

        counts = _PassCounts()
        for entry in entries:
            try:
                await self._process_entry(entry, counts)
            except (StorageError, SyncError) as e:
                self._probe.entry_processing_error(entry.id, str(e))

        await self._purge()

        self._probe.pass_completed(counts.synced, counts.failed, counts.deferred)
        return SyncPassResult(
            status=SyncPassStatus.COMPLETED,
            synced=counts.synced,
            failed=counts.failed,
            deferred=counts.deferred,
        )

    async def _process_entry(self, entry: OutboxEntry, counts: _PassCounts) -> None:
        """Attempt one entry and record its outcome."""
        if entry.attempts >= self._settings.max_attempts:
            await self._fail(entry, SyncExhaustedError.reason, counts)
            return

        route = route_for(entry.record_type)
        record = await self._store.get(route.collection, entry.record_id)
        if record is None:
            await self._fail(entry, RecordMissingError.reason, counts)
            return

        try:
            result = await self._gateway.push(entry.record_type, record.to_payload())
        except SyncAttemptFailedError as e:
            details = {"error": str(e)}
            if e.status_code is not None:
                details["status"] = e.status_code
            await self._retry(entry, details, str(e), counts)
            return
        except Exception as e:
            error = str(e) or type(e).__name__
            await self._retry(entry, {"error": error}, error, counts)
            return

        if not result.success:
            await self._retry(
                entry,
                result.as_details(),
                f"HTTP {result.status_code} {result.reason or ''}".strip(),
                counts,
            )
            return

        # The synced flag is written before the entry turns terminal, so a
        # failed flag write leaves the entry retryable.
        try:
            await self._store.put(route.collection, record.mark_synced())
        except StorageError as e:
            await self._retry(entry, {"error": str(e)}, str(e), counts)
            return

        await self._queue.mark_outcome(
            entry.id, AttemptOutcome.COMPLETED, result.as_details()
        )
        counts.synced += 1
        self._probe.entry_synced(entry.id, str(entry.record_type), entry.record_id)

    async def _fail(self, entry: OutboxEntry, reason: str, counts: _PassCounts) -> None:
        await self._queue.mark_outcome(
            entry.id, AttemptOutcome.FAILED, {"reason": reason}, retryable=False
        )
        counts.failed += 1
        self._probe.entry_failed(entry.id, str(entry.record_type), reason)

    async def _retry(
        self,
        entry: OutboxEntry,
        details: dict,
        error: str,
        counts: _PassCounts,
    ) -> None:
        updated = await self._queue.mark_outcome(
            entry.id, AttemptOutcome.FAILED, details, retryable=True
        )
        if updated.status is OutboxStatus.PENDING:
            counts.deferred += 1
            self._probe.entry_retry_scheduled(entry.id, updated.attempts, error)
        else:
            counts.failed += 1
            self._probe.entry_failed(entry.id, str(entry.record_type), error)

    async def _purge(self) -> None:
        cutoff = self._clock() - self._settings.retention
        try:
            await self._queue.purge_completed(older_than=cutoff)
        except StorageError as e:
            self._probe.purge_failed(str(e))

    def _record_result(self, result: SyncPassResult) -> None:
        match result.status:
            case SyncPassStatus.COMPLETED:
                self._status = replace(
                    self._status,
                    state=SyncState.SUCCESS,
                    last_sync_at=self._clock(),
                    last_result=result,
                )
            case SyncPassStatus.ABORTED:
                self._status = replace(
                    self._status, state=SyncState.ERROR, last_result=result
                )
            case SyncPassStatus.OFFLINE:
                self._status = replace(
                    self._status, state=SyncState.IDLE, last_result=result
                )

    def _on_online(self) -> None:
        self._status = replace(self._status, is_online=True)
        if self._running:
            self._schedule_pass("online")

    def _schedule_pass(self, trigger: str) -> None:
        task = asyncio.create_task(self.run_pass(trigger))
        self._pass_tasks.add(task)
        task.add_done_callback(self._pass_tasks.discard)

    def _on_offline(self) -> None:
        self._status = replace(self._status, is_online=False)

    async def _interval_loop(self) -> None:
        """Run a pass every interval while the orchestrator is running.

        Each pass re-confirms connectivity itself, so a pass that finds the
        server unreachable costs one probe request.
        """
        while self._running:
            await asyncio.sleep(self._settings.interval_seconds)
            try:
                await self.run_pass("interval")
            except Exception as e:
                self._probe.interval_loop_error(str(e))

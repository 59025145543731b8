"""Observability probes for the sync queue and the sync orchestrator.

Following Domain Oriented Observability, probes capture domain-significant
events and metrics without cluttering sync logic with logging concerns.
"""

from __future__ import annotations

from typing import Protocol

import structlog


logger = structlog.get_logger()


class SyncQueueProbe(Protocol):
    """Protocol for sync queue observability.

    Implementations can log, emit metrics, or send traces.
    """

    def entry_enqueued(self, entry_id: int, record_type: str, record_id: int) -> None:
        """Called when a pending entry is created for a record."""
        ...

    def enqueue_failed(self, record_type: str, record_id: int, error: str) -> None:
        """Called when an entry could not be created.

        The record itself was stored; only this sync opportunity is lost.
        """
        ...

    def outcome_recorded(
        self, entry_id: int, outcome: str, status: str, attempts: int
    ) -> None:
        """Called after an attempt's outcome is written back."""
        ...

    def entries_purged(self, count: int) -> None:
        """Called after completed entries are cleaned up."""
        ...

    def entry_requeued(self, entry_id: int, new_entry_id: int) -> None:
        """Called when a failed entry is explicitly re-enqueued."""
        ...


class DefaultSyncQueueProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        """Initialize the probe with a logger."""
        self._log = logger.bind(component="sync_queue")

    def entry_enqueued(self, entry_id: int, record_type: str, record_id: int) -> None:
        """Log entry creation."""
        self._log.debug(
            "sync_entry_enqueued",
            entry_id=entry_id,
            record_type=record_type,
            record_id=record_id,
        )

    def enqueue_failed(self, record_type: str, record_id: int, error: str) -> None:
        """Log a lost sync opportunity."""
        self._log.error(
            "sync_enqueue_failed",
            record_type=record_type,
            record_id=record_id,
            error=error,
        )

    def outcome_recorded(
        self, entry_id: int, outcome: str, status: str, attempts: int
    ) -> None:
        """Log the outcome of an attempt."""
        self._log.debug(
            "sync_outcome_recorded",
            entry_id=entry_id,
            outcome=outcome,
            status=status,
            attempts=attempts,
        )

    def entries_purged(self, count: int) -> None:
        """Log cleanup of completed entries."""
        if count > 0:
            self._log.info("sync_entries_purged", count=count)

    def entry_requeued(self, entry_id: int, new_entry_id: int) -> None:
        """Log explicit re-enqueue."""
        self._log.info(
            "sync_entry_requeued",
            entry_id=entry_id,
            new_entry_id=new_entry_id,
        )


class SyncOrchestratorProbe(Protocol):
    """Protocol for sync orchestrator observability."""

    def orchestrator_started(self, interval_seconds: float) -> None:
        """Called when the orchestrator starts its triggers."""
        ...

    def orchestrator_stopped(self) -> None:
        """Called when the orchestrator stops."""
        ...

    def pass_started(self, trigger: str) -> None:
        """Called when a sync pass begins."""
        ...

    def pass_skipped(self, trigger: str) -> None:
        """Called when a pass is requested while another is in flight."""
        ...

    def pass_offline(self, trigger: str) -> None:
        """Called when a pass ends early because the server is unreachable."""
        ...

    def pass_aborted(self, trigger: str, error: str) -> None:
        """Called when a pass-level failure aborts the pass."""
        ...

    def entry_synced(self, entry_id: int, record_type: str, record_id: int) -> None:
        """Called when a record is confirmed by the server."""
        ...

    def entry_retry_scheduled(self, entry_id: int, attempts: int, error: str) -> None:
        """Called when an attempt fails but the entry stays pending."""
        ...

    def entry_failed(self, entry_id: int, record_type: str, reason: str) -> None:
        """Called when an entry becomes terminally failed."""
        ...

    def entry_processing_error(self, entry_id: int, error: str) -> None:
        """Called when recording an entry's outcome itself fails."""
        ...

    def purge_failed(self, error: str) -> None:
        """Called when cleanup of completed entries fails."""
        ...

    def pass_completed(self, synced: int, failed: int, deferred: int) -> None:
        """Called when a pass finishes processing its entries."""
        ...

    def interval_loop_error(self, error: str) -> None:
        """Called when the interval loop hits an unexpected error."""
        ...


class DefaultSyncOrchestratorProbe:
    """Default implementation using structlog.

    Logs all orchestrator events with appropriate log levels.
    """

    def __init__(self) -> None:
        """Initialize the probe with a logger."""
        self._log = logger.bind(component="sync_orchestrator")

    def orchestrator_started(self, interval_seconds: float) -> None:
        """Log orchestrator start."""
        self._log.info("sync_orchestrator_started", interval_seconds=interval_seconds)

    def orchestrator_stopped(self) -> None:
        """Log orchestrator stop."""
        self._log.info("sync_orchestrator_stopped")

    def pass_started(self, trigger: str) -> None:
        """Log pass start."""
        self._log.info("sync_pass_started", trigger=trigger)

    def pass_skipped(self, trigger: str) -> None:
        """Log a pass request that overlapped a running pass."""
        self._log.debug("sync_pass_skipped", trigger=trigger)

    def pass_offline(self, trigger: str) -> None:
        """Log a pass abandoned for lack of connectivity."""
        self._log.info("sync_pass_offline", trigger=trigger)

    def pass_aborted(self, trigger: str, error: str) -> None:
        """Log an aborted pass."""
        self._log.error("sync_pass_aborted", trigger=trigger, error=error)

    def entry_synced(self, entry_id: int, record_type: str, record_id: int) -> None:
        """Log a successful push."""
        self._log.info(
            "sync_entry_synced",
            entry_id=entry_id,
            record_type=record_type,
            record_id=record_id,
        )

    def entry_retry_scheduled(self, entry_id: int, attempts: int, error: str) -> None:
        """Log a failed attempt that will be retried on a later pass."""
        self._log.warning(
            "sync_entry_retry_scheduled",
            entry_id=entry_id,
            attempts=attempts,
            error=error,
        )

    def entry_failed(self, entry_id: int, record_type: str, reason: str) -> None:
        """Log a terminal failure."""
        self._log.error(
            "sync_entry_failed",
            entry_id=entry_id,
            record_type=record_type,
            reason=reason,
        )

    def entry_processing_error(self, entry_id: int, error: str) -> None:
        """Log a failure to record an entry's outcome."""
        self._log.error("sync_entry_processing_error", entry_id=entry_id, error=error)

    def purge_failed(self, error: str) -> None:
        """Log a cleanup failure."""
        self._log.warning("sync_purge_failed", error=error)

    def pass_completed(self, synced: int, failed: int, deferred: int) -> None:
        """Log pass statistics."""
        self._log.info(
            "sync_pass_completed",
            synced=synced,
            failed=failed,
            deferred=deferred,
        )

    def interval_loop_error(self, error: str) -> None:
        """Log interval loop error."""
        self._log.warning("sync_interval_loop_error", error=error)

"""Value objects for the sync outbox.

Value objects are immutable descriptors that provide type safety and
domain semantics for outbox entries, gateway responses, and pass results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class RecordType(StrEnum):
    """Record variants that are delivered to the remote server."""

    IDENTIFICATION = "identification"
    MARKETPLACE = "marketplace"


class OutboxStatus(StrEnum):
    """Lifecycle status of an outbox entry.

    PENDING is the only non-terminal status. COMPLETED and FAILED are never
    left once entered.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OutboxStatus.PENDING


class AttemptOutcome(StrEnum):
    """Outcome of a single sync attempt."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class OutboxEntry:
    """Represents a single entry in the sync queue.

    This is an immutable value object that captures the state of an outbox
    entry as it exists in the local store.

    Attributes:
        record_type: Which record variant the entry targets
        record_id: Local id of the targeted record (weak reference)
        status: Current lifecycle status
        attempts: Number of sync attempts made so far
        created_at: When the entry was enqueued
        id: Locally unique, monotonically assigned identifier (None until stored)
        last_attempt_at: When the most recent attempt happened, if any
        details: Diagnostic payload from the most recent attempt
    """

    record_type: RecordType
    record_id: int
    status: OutboxStatus
    attempts: int
    created_at: datetime
    id: int | None = None
    last_attempt_at: datetime | None = None
    details: dict[str, Any] | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is OutboxStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class PushResult:
    """Response of the remote server to a single record push.

    Attributes:
        success: True for any 2xx response
        status_code: HTTP status code returned by the server
        reason: HTTP reason phrase for unsuccessful responses
        remote_id: Identifier assigned by the server, when it returns one
    """

    success: bool
    status_code: int
    reason: str | None = None
    remote_id: Any = None

    def as_details(self) -> dict[str, Any]:
        """Render the result as an outbox entry diagnostic payload."""
        details: dict[str, Any] = {"status": self.status_code}
        if self.reason:
            details["statusText"] = self.reason
        if self.remote_id is not None:
            details["remoteId"] = self.remote_id
        return details


class SyncPassStatus(StrEnum):
    """How a sync pass ended."""

    COMPLETED = "completed"
    OFFLINE = "offline"
    SKIPPED = "skipped"
    ABORTED = "aborted"


@dataclass(frozen=True)
class SyncPassResult:
    """Aggregate statistics of one sync pass.

    Attributes:
        status: How the pass ended
        synced: Entries transitioned to COMPLETED during the pass
        failed: Entries transitioned to terminal FAILED during the pass
        deferred: Entries that failed but remain PENDING for a later pass
        error: Reason the pass was aborted, if it was
    """

    status: SyncPassStatus
    synced: int = 0
    failed: int = 0
    deferred: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status is SyncPassStatus.COMPLETED


class SyncState(StrEnum):
    """Coarse state of the orchestrator, as shown to the user."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the orchestrator for status indicators."""

    is_online: bool
    state: SyncState
    last_sync_at: datetime | None = None
    last_result: SyncPassResult | None = field(default=None)

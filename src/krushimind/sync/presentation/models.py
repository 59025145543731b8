"""Pydantic models for sync API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from shared_kernel.outbox.value_objects import (
    OutboxEntry,
    OutboxStatus,
    RecordType,
    SyncPassResult,
    SyncPassStatus,
    SyncState,
    SyncStatus,
)


class SyncPassResponse(BaseModel):
    """Response model for the statistics of one sync pass."""

    success: bool = Field(..., description="True when the pass ran to completion")
    status: SyncPassStatus
    synced: int = Field(..., description="Entries confirmed by the server")
    failed: int = Field(..., description="Entries that failed permanently")
    deferred: int = Field(..., description="Entries left pending for a later pass")
    error: str | None = None

    @classmethod
    def from_domain(cls, result: SyncPassResult) -> SyncPassResponse:
        return cls(
            success=result.success,
            status=result.status,
            synced=result.synced,
            failed=result.failed,
            deferred=result.deferred,
            error=result.error,
        )


class SyncStatusResponse(BaseModel):
    """Response model for the sync status indicator."""

    is_online: bool
    state: SyncState
    last_sync_at: datetime | None = None
    last_result: SyncPassResponse | None = None

    @classmethod
    def from_domain(cls, sync_status: SyncStatus) -> SyncStatusResponse:
        last_result = sync_status.last_result
        return cls(
            is_online=sync_status.is_online,
            state=sync_status.state,
            last_sync_at=sync_status.last_sync_at,
            last_result=(
                SyncPassResponse.from_domain(last_result) if last_result else None
            ),
        )


class OutboxEntryResponse(BaseModel):
    """Response model for a sync queue entry."""

    id: int
    record_type: RecordType
    record_id: int
    status: OutboxStatus
    attempts: int
    created_at: datetime
    last_attempt_at: datetime | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def from_domain(cls, entry: OutboxEntry) -> OutboxEntryResponse:
        return cls(
            id=entry.id,
            record_type=entry.record_type,
            record_id=entry.record_id,
            status=entry.status,
            attempts=entry.attempts,
            created_at=entry.created_at,
            last_attempt_at=entry.last_attempt_at,
            details=entry.details,
        )


class RequeueResponse(BaseModel):
    """Response model for an explicit re-enqueue."""

    entry_id: int = Field(..., description="ID of the new pending entry")

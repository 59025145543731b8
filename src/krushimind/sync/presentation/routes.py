"""HTTP routes for sync status, manual sync and queue inspection."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from infrastructure.outbox.orchestrator import SyncOrchestrator
from shared_kernel.outbox.exceptions import (
    OutboxEntryNotFoundError,
    OutboxEntryTerminalError,
    RecordMissingError,
)
from shared_kernel.outbox.ports import ISyncQueue
from shared_kernel.outbox.value_objects import OutboxStatus
from sync.dependencies import get_sync_orchestrator, get_sync_queue
from sync.presentation.models import (
    OutboxEntryResponse,
    RequeueResponse,
    SyncPassResponse,
    SyncStatusResponse,
)

router = APIRouter(
    prefix="/sync",
    tags=["sync"],
)


@router.get("/status")
async def get_sync_status(
    orchestrator: Annotated[SyncOrchestrator, Depends(get_sync_orchestrator)],
) -> SyncStatusResponse:
    """Report connectivity, sync state and the last pass result."""
    return SyncStatusResponse.from_domain(orchestrator.status)


@router.post(
    "",
    summary="Sync now",
    description="Run a sync pass immediately and return its statistics",
    responses={
        200: {"description": "Pass finished (possibly offline or skipped)"},
    },
)
async def trigger_sync(
    orchestrator: Annotated[SyncOrchestrator, Depends(get_sync_orchestrator)],
) -> SyncPassResponse:
    """Run a manual sync pass."""
    result = await orchestrator.trigger()
    return SyncPassResponse.from_domain(result)


@router.get("/queue")
async def list_queue(
    queue: Annotated[ISyncQueue, Depends(get_sync_queue)],
    status_filter: Annotated[OutboxStatus | None, Query(alias="status")] = None,
) -> list[OutboxEntryResponse]:
    """List sync queue entries, optionally of a single status."""
    entries = await queue.list_entries(status_filter)
    return [OutboxEntryResponse.from_domain(entry) for entry in entries]


@router.post("/queue/{entry_id}/requeue", status_code=status.HTTP_201_CREATED)
async def requeue_entry(
    entry_id: int,
    queue: Annotated[ISyncQueue, Depends(get_sync_queue)],
) -> RequeueResponse:
    """Give a permanently failed entry's record a fresh pending entry.

    Args:
        entry_id: ID of the failed entry
        queue: Sync queue manager

    Returns:
        RequeueResponse with the new entry's ID

    Raises:
        HTTPException: 404 if the entry does not exist
        HTTPException: 409 if the entry is not failed or its record is gone
        HTTPException: 503 if the new entry could not be stored
    """
    try:
        new_id = await queue.requeue(entry_id)
    except OutboxEntryNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sync queue entry not found",
        )
    except OutboxEntryTerminalError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Only failed entries can be requeued; entry is {e.status}",
        )
    except RecordMissingError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The entry's record no longer exists",
        )

    if new_id is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to store the new sync queue entry",
        )
    return RequeueResponse(entry_id=new_id)

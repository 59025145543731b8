"""Dependency providers for the sync context."""

from fastapi import Request

from infrastructure.outbox.orchestrator import SyncOrchestrator
from shared_kernel.outbox.ports import ISyncQueue


def get_sync_orchestrator(request: Request) -> SyncOrchestrator:
    """Get the SyncOrchestrator started by the application lifespan."""
    return request.app.state.sync_orchestrator


def get_sync_queue(request: Request) -> ISyncQueue:
    """Get the sync queue manager built at startup."""
    return request.app.state.sync_queue

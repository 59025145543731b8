"""Sync infrastructure: queue manager, remote gateway and orchestrator."""

from infrastructure.outbox.gateway import HttpRemoteGateway
from infrastructure.outbox.orchestrator import SyncOrchestrator
from infrastructure.outbox.sync_queue import SyncQueueManager

__all__ = [
    "HttpRemoteGateway",
    "SyncOrchestrator",
    "SyncQueueManager",
]

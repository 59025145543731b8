"""Outbox synchronization shared between record creation and sync.

Records created on the device are paired with an outbox entry in the same
operation; the orchestrator later drains those entries to the server.
"""

from shared_kernel.outbox.exceptions import (
    ConnectivityUnknown,
    OutboxEntryNotFoundError,
    OutboxEntryTerminalError,
    RecordMissingError,
    SyncAttemptFailedError,
    SyncError,
    SyncExhaustedError,
)
from shared_kernel.outbox.ports import (
    ConnectivityChecker,
    ISyncQueue,
    LinkStateProvider,
    RemoteGateway,
)
from shared_kernel.outbox.value_objects import (
    AttemptOutcome,
    OutboxEntry,
    OutboxStatus,
    PushResult,
    RecordType,
    SyncPassResult,
    SyncPassStatus,
    SyncState,
    SyncStatus,
)

__all__ = [
    "AttemptOutcome",
    "ConnectivityChecker",
    "ConnectivityUnknown",
    "ISyncQueue",
    "LinkStateProvider",
    "OutboxEntry",
    "OutboxEntryNotFoundError",
    "OutboxEntryTerminalError",
    "OutboxStatus",
    "PushResult",
    "RecordMissingError",
    "RecordType",
    "RemoteGateway",
    "SyncAttemptFailedError",
    "SyncError",
    "SyncExhaustedError",
    "SyncPassResult",
    "SyncPassStatus",
    "SyncState",
    "SyncStatus",
]

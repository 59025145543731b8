"""Exceptions for outbox synchronization.

Only StorageError (see shared_kernel.storage) and the queue contract errors
below ever reach callers. The per-entry errors are recorded into the
entry's details and reflected in pass statistics instead.
"""


class SyncError(Exception):
    """Base exception for synchronization errors."""

    pass


class ConnectivityUnknown(SyncError):
    """Raised when a liveness probe times out without a clear answer.

    Callers treat this conservatively as offline.
    """

    pass


class SyncAttemptFailedError(SyncError):
    """Raised when pushing one record fails in a recoverable way."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SyncExhaustedError(SyncError):
    """Raised when an entry has used up its allowed attempts."""

    reason = "exceeded maximum attempts"


class RecordMissingError(SyncError):
    """Raised when the record an entry refers to no longer exists."""

    reason = "record not found"


class OutboxEntryNotFoundError(SyncError):
    """Raised when an outbox entry does not exist."""

    def __init__(self, entry_id: int):
        super().__init__(f"Outbox entry {entry_id} not found")
        self.entry_id = entry_id


class OutboxEntryTerminalError(SyncError):
    """Raised when an operation would change a terminal entry's status."""

    def __init__(self, entry_id: int, status: str):
        super().__init__(f"Outbox entry {entry_id} is already {status}")
        self.entry_id = entry_id
        self.status = status

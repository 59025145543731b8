"""Exceptions for local storage operations."""


class StorageError(Exception):
    """Raised when the local store is unavailable or rejects a write.

    The triggering operation fails, but no other record is affected. The
    store never drops a write silently; it raises this instead.
    """

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection

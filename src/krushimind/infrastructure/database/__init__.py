"""Database infrastructure - the SQLite-backed local store."""

from infrastructure.database.local_store import LocalStore, StoreQuery
from shared_kernel.storage.exceptions import StorageError

__all__ = [
    "LocalStore",
    "StorageError",
    "StoreQuery",
]

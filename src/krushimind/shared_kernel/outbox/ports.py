"""Protocols (ports) for outbox synchronization.

These protocols define the seams between the orchestrator and its
collaborators, so each can be swapped for a fake in tests or replaced by a
different implementation (another transport, another link-state source).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shared_kernel.outbox.value_objects import (
        AttemptOutcome,
        OutboxEntry,
        OutboxStatus,
        PushResult,
        RecordType,
    )

TransitionCallback = Callable[[], Awaitable[None] | None]
"""Subscriber callback; may be a plain function or a coroutine function."""


@runtime_checkable
class ISyncQueue(Protocol):
    """Queue of outbox entries kept in the local store."""

    async def enqueue(self, record_type: "RecordType", record_id: int) -> int | None:
        """Create a pending entry for a record.

        Never raises. A failed enqueue is logged and reported as None so the
        record write that triggered it still succeeds.
        """
        ...

    async def list_pending(self, limit: int = 50) -> list["OutboxEntry"]:
        """Return pending entries, oldest first, at most ``limit``."""
        ...

    async def mark_outcome(
        self,
        entry_id: int,
        outcome: "AttemptOutcome",
        details: dict[str, Any] | None = None,
        *,
        retryable: bool = False,
    ) -> "OutboxEntry":
        """Record the outcome of one attempt and return the updated entry.

        Raises:
            OutboxEntryNotFoundError: If the entry does not exist
            OutboxEntryTerminalError: If the entry is already terminal
        """
        ...

    async def purge_completed(self, older_than: datetime | None = None) -> int:
        """Delete completed entries last attempted before ``older_than``."""
        ...

    async def get(self, entry_id: int) -> "OutboxEntry | None":
        """Fetch one entry, or None if absent."""
        ...

    async def list_entries(
        self, status: "OutboxStatus | None" = None
    ) -> list["OutboxEntry"]:
        """Return entries, optionally filtered by status, oldest first."""
        ...

    async def requeue(self, entry_id: int) -> int | None:
        """Create a fresh pending entry for a terminally failed one."""
        ...


@runtime_checkable
class RemoteGateway(Protocol):
    """Pushes one record to the remote server."""

    async def push(
        self, record_type: "RecordType", payload: dict[str, Any]
    ) -> "PushResult":
        """POST a record payload to the endpoint for its type.

        Returns:
            PushResult describing the server's response

        Raises:
            SyncAttemptFailedError: On transport errors or timeouts
        """
        ...


@runtime_checkable
class ConnectivityChecker(Protocol):
    """Answers whether the remote server is reachable right now."""

    async def check_now(self) -> bool:
        """Probe the server. Never raises; unknown counts as offline."""
        ...

    def subscribe(
        self,
        on_online: TransitionCallback | None = None,
        on_offline: TransitionCallback | None = None,
    ) -> Callable[[], None]:
        """Register transition callbacks and return an unsubscribe function."""
        ...


@runtime_checkable
class LinkStateProvider(Protocol):
    """Platform-level network link indicator."""

    def is_link_up(self) -> bool:
        """Return False only when the platform reports no usable link."""
        ...

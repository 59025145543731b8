"""Value objects for the local store.

Domain records are immutable snapshots of what the store holds. The only
mutation the sync subsystem ever applies to a record is flipping ``synced``
after a confirmed remote write, which produces a new snapshot that is put
back into the store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar

from shared_kernel.outbox.value_objects import RecordType


class Collection(StrEnum):
    """Collections held by the local store."""

    IDENTIFICATIONS = "identifications"
    MARKETPLACE = "marketplace"
    FINANCE = "finance"
    USER_PREFERENCES = "userPreferences"
    SYNC_QUEUE = "syncQueue"


@dataclass(frozen=True)
class IndexFilter:
    """Equality filter on a secondary index.

    Attributes:
        name: Index name as declared by the collection (e.g., "status")
        value: Value the indexed column must equal
    """

    name: str
    value: Any


@dataclass(frozen=True)
class DomainRecord:
    """A user-generated record awaiting eventual delivery to the server.

    Attributes:
        payload: User-supplied fields, stored as-is
        created_at: When the record was created locally (UTC)
        synced: Whether the server has confirmed the record
        id: Local identifier, None until the store assigns one
    """

    payload: dict[str, Any]
    created_at: datetime
    synced: bool = False
    id: int | None = None

    collection: ClassVar[Collection]
    record_type: ClassVar[RecordType | None] = None

    def with_id(self, record_id: int) -> DomainRecord:
        """Return a copy carrying the store-assigned identifier."""
        return replace(self, id=record_id)

    def mark_synced(self) -> DomainRecord:
        """Return a copy flagged as confirmed by the server."""
        return replace(self, synced=True)

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body pushed to the remote server.

        The body is the full record: user fields plus the local id,
        creation time, and sync flag.
        """
        return {
            **self.payload,
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "synced": self.synced,
        }


@dataclass(frozen=True)
class Identification(DomainRecord):
    """Result of a crop-disease identification."""

    collection: ClassVar[Collection] = Collection.IDENTIFICATIONS
    record_type: ClassVar[RecordType | None] = RecordType.IDENTIFICATION

    @property
    def image_data(self) -> str | None:
        return self.payload.get("imageData")

    @property
    def result(self) -> Any:
        return self.payload.get("result")

    def to_payload(self) -> dict[str, Any]:
        body = super().to_payload()
        # The identification endpoint keys records by "timestamp"
        body["timestamp"] = body["createdAt"]
        return body


@dataclass(frozen=True)
class MarketplaceListing(DomainRecord):
    """A produce listing offered on the marketplace."""

    collection: ClassVar[Collection] = Collection.MARKETPLACE
    record_type: ClassVar[RecordType | None] = RecordType.MARKETPLACE

    @property
    def product_type(self) -> str | None:
        return self.payload.get("productType")


@dataclass(frozen=True)
class FinancialInfo(DomainRecord):
    """Financial details kept on the device only.

    Financial info has no record type: it is never enqueued for sync.
    """

    collection: ClassVar[Collection] = Collection.FINANCE


@dataclass(frozen=True)
class UserPreference:
    """A single key-value user preference."""

    key: str
    value: Any

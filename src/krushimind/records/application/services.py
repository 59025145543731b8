"""Record application service.

Orchestrates record creation: the record is written to the local store and
then, for syncable record types, a sync queue entry is created for it.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from records.application.observability import (
    DefaultRecordServiceProbe,
    RecordServiceProbe,
)
from shared_kernel.outbox.ports import ISyncQueue
from shared_kernel.storage.exceptions import StorageError
from shared_kernel.storage.ports import ILocalStore
from shared_kernel.storage.value_objects import (
    Collection,
    DomainRecord,
    FinancialInfo,
    Identification,
    IndexFilter,
    MarketplaceListing,
    UserPreference,
)

RecordT = TypeVar("RecordT", bound=DomainRecord)


class RecordService:
    """Application service for the records kept on the device."""

    def __init__(
        self,
        store: ILocalStore,
        queue: ISyncQueue,
        probe: RecordServiceProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize RecordService with dependencies.

        Args:
            store: Local store the records are written to
            queue: Sync queue receiving an entry per syncable record
            probe: Optional domain probe for observability
            clock: Source of UTC timestamps
        """
        self._store = store
        self._queue = queue
        self._probe = probe or DefaultRecordServiceProbe()
        self._clock = clock or (lambda: datetime.now(UTC))

    async def _create(self, record: RecordT) -> RecordT:
        """Store a record and enqueue it when its type is synced.

        Raises:
            StorageError: If the record itself could not be written
        """
        try:
            record_id = await self._store.put(record.collection, record)
        except StorageError as e:
            self._probe.record_creation_failed(str(record.collection), str(e))
            raise

        stored = record.with_id(record_id)
        entry_id = None
        if stored.record_type is not None:
            entry_id = await self._queue.enqueue(stored.record_type, record_id)

        self._probe.record_created(str(stored.collection), record_id, entry_id)
        return stored

    async def create_identification(
        self, image_data: str | None, result: Any
    ) -> Identification:
        """Persist an identification result and queue it for sync."""
        record = Identification(
            payload={"imageData": image_data, "result": result},
            created_at=self._clock(),
        )
        return await self._create(record)

    async def create_marketplace_listing(
        self, listing: dict[str, Any]
    ) -> MarketplaceListing:
        """Persist a marketplace listing and queue it for sync."""
        record = MarketplaceListing(payload=dict(listing), created_at=self._clock())
        return await self._create(record)

    async def store_financial_info(self, info: dict[str, Any]) -> FinancialInfo:
        """Persist financial info. It stays on the device."""
        now = self._clock()
        record = FinancialInfo(
            payload={**info, "updatedAt": now.isoformat()},
            created_at=now,
        )
        return await self._create(record)

    async def list_identifications(self) -> list[Identification]:
        return await self._store.get_all(Collection.IDENTIFICATIONS).all()

    async def list_marketplace_listings(
        self, product_type: str | None = None
    ) -> list[MarketplaceListing]:
        """List listings, optionally only those of one product type."""
        where = IndexFilter("productType", product_type) if product_type else None
        return await self._store.get_all(
            Collection.MARKETPLACE, where, order_by="createdAt"
        ).all()

    async def get_financial_info(self, record_id: int) -> FinancialInfo | None:
        return await self._store.get(Collection.FINANCE, record_id)

    async def list_financial_info(self) -> list[FinancialInfo]:
        return await self._store.get_all(Collection.FINANCE).all()

    async def set_preference(self, key: str, value: Any) -> None:
        await self._store.put(Collection.USER_PREFERENCES, UserPreference(key, value))
        self._probe.preference_saved(key)

    async def find_preference(self, key: str) -> UserPreference | None:
        """Return the stored preference, or None if the key was never set.

        A preference stored with a null value is returned, not treated as
        missing.
        """
        return await self._store.get(Collection.USER_PREFERENCES, key)

    async def get_preference(self, key: str) -> Any | None:
        """Return a preference's value, or None if it was never set."""
        preference = await self.find_preference(key)
        return preference.value if preference is not None else None

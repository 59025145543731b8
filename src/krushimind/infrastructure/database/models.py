"""SQLAlchemy ORM models for the local store.

Each store collection maps to exactly one table and one value object type.
Models know how to convert to and from their value objects and which
secondary indexes they can be queried by.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, ClassVar

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from shared_kernel.outbox.value_objects import OutboxEntry, OutboxStatus, RecordType
from shared_kernel.storage.value_objects import (
    Collection,
    DomainRecord,
    FinancialInfo,
    Identification,
    MarketplaceListing,
    UserPreference,
)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes on top of SQLite's naive DATETIME.

    Values are normalized to UTC and stored naive; the UTC zone is restored
    when they are loaded.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("Naive datetimes are not accepted; use UTC-aware values")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Base(DeclarativeBase):
    """Base class for all local store ORM models."""

    type_annotation_map: dict[type, Any] = {}


class StoreModel:
    """Conversion and index metadata shared by all store models.

    Attributes:
        value_object_class: The value object type held by the collection
        key_attribute: Name of the value object attribute used as primary key
        indexes: Secondary index name -> mapped column attribute name
    """

    value_object_class: ClassVar[type]
    key_attribute: ClassVar[str] = "id"
    indexes: ClassVar[Mapping[str, str]] = MappingProxyType({})

    @classmethod
    def key_of(cls, value_object: Any) -> Any:
        return getattr(value_object, cls.key_attribute)

    @classmethod
    def from_value_object(cls, value_object: Any) -> StoreModel:
        raise NotImplementedError

    def to_value_object(self) -> Any:
        raise NotImplementedError

    @property
    def primary_key(self) -> Any:
        return getattr(self, self.key_attribute)


class DomainRecordColumns(StoreModel):
    """Columns shared by every domain record table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    synced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @classmethod
    def from_value_object(cls, value_object: DomainRecord) -> DomainRecordColumns:
        return cls(
            id=value_object.id,
            payload=dict(value_object.payload),
            created_at=value_object.created_at,
            synced=value_object.synced,
        )

    def to_value_object(self) -> DomainRecord:
        return self.value_object_class(
            payload=dict(self.payload),
            created_at=self.created_at,
            synced=self.synced,
            id=self.id,
        )


class IdentificationModel(DomainRecordColumns, Base):
    """ORM model for crop identifications."""

    __tablename__ = "identifications"
    __table_args__ = {"sqlite_autoincrement": True}

    value_object_class = Identification


class MarketplaceListingModel(DomainRecordColumns, Base):
    """ORM model for marketplace listings.

    ``product_type`` is denormalized out of the payload so listings can be
    filtered by the productType index.
    """

    __tablename__ = "marketplace"
    __table_args__ = (
        Index("ix_marketplace_product_type", "product_type"),
        Index("ix_marketplace_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    value_object_class = MarketplaceListing
    indexes = MappingProxyType({"productType": "product_type", "createdAt": "created_at"})

    product_type: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @classmethod
    def from_value_object(cls, value_object: DomainRecord) -> MarketplaceListingModel:
        model = super().from_value_object(value_object)
        model.product_type = value_object.payload.get("productType")
        return model


class FinancialInfoModel(DomainRecordColumns, Base):
    """ORM model for financial info."""

    __tablename__ = "finance"
    __table_args__ = {"sqlite_autoincrement": True}

    value_object_class = FinancialInfo


class UserPreferenceModel(StoreModel, Base):
    """ORM model for key-value user preferences."""

    __tablename__ = "user_preferences"

    value_object_class = UserPreference
    key_attribute = "key"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    @classmethod
    def from_value_object(cls, value_object: UserPreference) -> UserPreferenceModel:
        return cls(key=value_object.key, value=value_object.value)

    def to_value_object(self) -> UserPreference:
        return UserPreference(key=self.key, value=self.value)


class SyncQueueModel(StoreModel, Base):
    """ORM model for the sync outbox.

    AUTOINCREMENT keeps entry ids monotonic: ids of purged entries are never
    handed out again.
    """

    __tablename__ = "sync_queue"
    __table_args__ = (
        Index("ix_sync_queue_status", "status"),
        Index("ix_sync_queue_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    value_object_class = OutboxEntry
    indexes = MappingProxyType({"status": "status", "createdAt": "created_at"})

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_type: Mapped[str] = mapped_column(String(32), nullable=False)
    record_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    @classmethod
    def from_value_object(cls, value_object: OutboxEntry) -> SyncQueueModel:
        return cls(
            id=value_object.id,
            record_type=str(value_object.record_type),
            record_id=value_object.record_id,
            status=str(value_object.status),
            attempts=value_object.attempts,
            last_attempt_at=value_object.last_attempt_at,
            details=value_object.details,
            created_at=value_object.created_at,
        )

    def to_value_object(self) -> OutboxEntry:
        return OutboxEntry(
            id=self.id,
            record_type=RecordType(self.record_type),
            record_id=self.record_id,
            status=OutboxStatus(self.status),
            attempts=self.attempts,
            last_attempt_at=self.last_attempt_at,
            details=self.details,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<SyncQueueModel("
            f"id={self.id}, "
            f"record_type={self.record_type}, "
            f"record_id={self.record_id}, "
            f"status={self.status}, "
            f"attempts={self.attempts}"
            f")>"
        )


COLLECTION_MODELS: Mapping[Collection, type[StoreModel]] = MappingProxyType(
    {
        Collection.IDENTIFICATIONS: IdentificationModel,
        Collection.MARKETPLACE: MarketplaceListingModel,
        Collection.FINANCE: FinancialInfoModel,
        Collection.USER_PREFERENCES: UserPreferenceModel,
        Collection.SYNC_QUEUE: SyncQueueModel,
    }
)

_unmapped = set(Collection) - set(COLLECTION_MODELS)
if _unmapped:
    raise RuntimeError(f"Collections without a model: {sorted(_unmapped)}")

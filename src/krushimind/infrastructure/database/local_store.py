"""SQLite implementation of the local store.

The store is the single source of truth on the device. Every operation runs
in its own short-lived session and transaction; nothing is cached between
operations, so readers always see the latest committed state.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_store_engine
from infrastructure.database.models import COLLECTION_MODELS, Base, StoreModel
from infrastructure.observability import DefaultStoreProbe, StoreProbe
from shared_kernel.storage.exceptions import StorageError
from shared_kernel.storage.value_objects import Collection, IndexFilter

if TYPE_CHECKING:
    from infrastructure.settings import StoreSettings


def _model_for(collection: Collection | str) -> type[StoreModel]:
    return COLLECTION_MODELS[Collection(collection)]


def _index_column(model_cls: type[StoreModel], index_name: str) -> Any:
    attribute = model_cls.indexes.get(index_name)
    if attribute is None:
        raise ValueError(
            f"Collection {model_cls.__tablename__!r} has no index {index_name!r}. "
            f"Available indexes: {sorted(model_cls.indexes)}"
        )
    return getattr(model_cls, attribute)


class StoreQuery:
    """Lazy, finite, restartable sequence of records from one collection.

    No query runs until the sequence is iterated. Every iteration runs a
    fresh SELECT, so iterating twice reflects writes made in between.
    """

    def __init__(
        self,
        store: LocalStore,
        collection: Collection,
        where: IndexFilter | None,
        order_by: str | None,
        limit: int | None,
    ) -> None:
        model_cls = _model_for(collection)
        stmt = select(model_cls)
        if where is not None:
            stmt = stmt.where(_index_column(model_cls, where.name) == where.value)
        if order_by is not None:
            stmt = stmt.order_by(_index_column(model_cls, order_by))
        stmt = stmt.order_by(getattr(model_cls, model_cls.key_attribute))
        if limit is not None:
            stmt = stmt.limit(limit)

        self._store = store
        self._collection = collection
        self._stmt = stmt

    async def __aiter__(self) -> AsyncIterator[Any]:
        async with self._store._transaction("get_all", self._collection) as session:
            models = (await session.scalars(self._stmt)).all()
        for model in models:
            yield model.to_value_object()

    async def all(self) -> list[Any]:
        """Materialize the sequence into a list."""
        return [record async for record in self]


class LocalStore:
    """Durable keyed storage for records, outbox entries, and preferences.

    The store must be initialized before use; every operation on an
    uninitialized (or closed) store raises StorageError. Driver failures
    such as a full disk or a locked database are raised as StorageError
    with the original exception chained.
    """

    def __init__(
        self,
        settings: StoreSettings,
        probe: StoreProbe | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            settings: Local store settings (database path, echo)
            probe: Optional domain probe for observability
            engine: Optional pre-built engine, used instead of one built
                from settings
        """
        self._settings = settings
        self._probe = probe or DefaultStoreProbe()
        self._engine = engine
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._sessionmaker is not None

    async def initialize(self) -> None:
        """Open the database and create missing collections.

        Safe to call more than once.

        Raises:
            StorageError: If the database cannot be opened or created
        """
        if self._sessionmaker is not None:
            return

        try:
            if self._engine is None:
                if self._settings.path != ":memory:":
                    Path(self._settings.path).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_store_engine(self._settings)

            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            self._probe.store_operation_failed("initialize", "*", e)
            raise StorageError(f"Failed to initialize local store: {e}") from e

        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        self._probe.store_initialized(self._settings.path)

    async def close(self) -> None:
        """Dispose of the engine. The store can be initialized again later."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        if self._sessionmaker is not None:
            self._sessionmaker = None
            self._probe.store_closed()

    @asynccontextmanager
    async def _transaction(
        self, operation: str, collection: Collection | str
    ) -> AsyncIterator[AsyncSession]:
        """Run one store operation in its own session and transaction."""
        if self._sessionmaker is None:
            raise StorageError(
                "Local store not initialized. Call initialize() first.",
                collection=str(collection),
            )

        try:
            async with self._sessionmaker() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            self._probe.store_operation_failed(operation, str(collection), e)
            raise StorageError(
                f"Failed to {operation} in {collection}: {e}",
                collection=str(collection),
            ) from e

    async def put(self, collection: Collection, record: Any) -> Any:
        """Insert or replace a record.

        Records without a key are appended and receive an auto-incremented
        id. Records with a key replace whatever was stored under it.

        Args:
            collection: Target collection
            record: Value object of the collection's type

        Returns:
            The key the record was stored under

        Raises:
            TypeError: If the record does not belong in the collection
            StorageError: If the store is unavailable or rejects the write
        """
        model_cls = _model_for(collection)
        if not isinstance(record, model_cls.value_object_class):
            raise TypeError(
                f"Collection {collection!s} holds "
                f"{model_cls.value_object_class.__name__}, "
                f"got {type(record).__name__}"
            )

        async with self._transaction("put", collection) as session:
            model = model_cls.from_value_object(record)
            if model_cls.key_of(record) is None:
                session.add(model)
            else:
                model = await session.merge(model)
            await session.flush()
            return model.primary_key

    async def get(self, collection: Collection, key: Any) -> Any | None:
        """Fetch one record by primary key.

        Returns:
            The record's value object, or None if absent
        """
        model_cls = _model_for(collection)
        async with self._transaction("get", collection) as session:
            model = await session.get(model_cls, key)
            return model.to_value_object() if model is not None else None

    def get_all(
        self,
        collection: Collection,
        where: IndexFilter | None = None,
        *,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> StoreQuery:
        """Return a lazy, restartable sequence of records.

        Records are ordered by the ``order_by`` index (if any) and then by
        primary key.

        Raises:
            ValueError: If ``where`` or ``order_by`` names an index the
                collection does not declare
        """
        return StoreQuery(self, Collection(collection), where, order_by, limit)

    async def delete(self, collection: Collection, key: Any) -> None:
        """Delete one record by primary key. Missing keys are ignored."""
        model_cls = _model_for(collection)
        async with self._transaction("delete", collection) as session:
            model = await session.get(model_cls, key)
            if model is not None:
                await session.delete(model)

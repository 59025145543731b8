"""Unit test fixtures shared across the sync subsystem tests."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from infrastructure.database.local_store import LocalStore
from infrastructure.settings import StoreSettings, SyncSettings


class FakeClock:
    """Controllable UTC clock for time-dependent tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 9, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store_settings(tmp_path) -> StoreSettings:
    """Store settings pointing at a temporary SQLite file."""
    return StoreSettings(path=str(tmp_path / "store" / "krushimind.db"))


@pytest.fixture
def sync_settings() -> SyncSettings:
    """Sync settings for a fake server."""
    return SyncSettings(
        server_url="http://sync.test",
        interval_minutes=15,
        max_attempts=5,
        batch_limit=50,
        retention_days=7,
        probe_timeout_seconds=0.5,
        request_timeout_seconds=1.0,
        link_watch_interval_seconds=0.01,
    )


@pytest_asyncio.fixture
async def local_store(store_settings: StoreSettings):
    """Initialized local store, closed after the test."""
    store = LocalStore(store_settings)
    await store.initialize()
    yield store
    await store.close()

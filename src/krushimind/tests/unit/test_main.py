"""Unit tests for the application entry point and its lifespan."""

from __future__ import annotations

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from infrastructure.connectivity import ConnectivityMonitor, StaticLinkState
from infrastructure.outbox import SyncOrchestrator
from infrastructure.settings import get_settings, get_store_settings, get_sync_settings


def _clear_settings_caches() -> None:
    get_settings.cache_clear()
    get_store_settings.cache_clear()
    get_sync_settings.cache_clear()


@pytest.fixture
def offline_environment(monkeypatch, tmp_path):
    """Point the app at a temporary store and a link that is down."""
    monkeypatch.setenv("KRUSHIMIND_STORE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("KRUSHIMIND_SYNC_SERVER_URL", "http://sync.invalid")
    monkeypatch.setattr(
        "main.ConnectivityMonitor",
        lambda settings: ConnectivityMonitor(
            settings, link_state=StaticLinkState(link_up=False)
        ),
    )
    _clear_settings_caches()
    yield tmp_path
    _clear_settings_caches()


@pytest_asyncio.fixture
async def async_client(offline_environment):
    """Create async HTTP client for testing with lifespan support."""
    from main import app

    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


class TestLifespan:
    """Tests for component wiring in the application lifespan."""

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_components_are_on_app_state(self, async_client: AsyncClient):
        from main import app

        assert app.state.local_store.is_initialized
        assert isinstance(app.state.sync_orchestrator, SyncOrchestrator)
        assert app.state.sync_orchestrator.is_running

    @pytest.mark.asyncio
    async def test_offline_record_is_queued(self, async_client: AsyncClient):
        """A listing created while offline stays pending in the queue."""
        created = await async_client.post(
            "/records/marketplace", json={"productType": "groundnut"}
        )
        sync = await async_client.post("/sync")
        queue = await async_client.get("/sync/queue", params={"status": "pending"})

        assert created.status_code == 201
        assert sync.json()["status"] == "offline"
        [entry] = queue.json()
        assert entry["record_id"] == created.json()["id"]
        assert entry["attempts"] == 0

    @pytest.mark.asyncio
    async def test_shutdown_closes_store(self, offline_environment):
        from main import app

        async with LifespanManager(app):
            store = app.state.local_store
            orchestrator = app.state.sync_orchestrator

        assert store.is_initialized is False
        assert orchestrator.is_running is False

"""Unit tests for ConnectivityMonitor using httpx.MockTransport."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from infrastructure.connectivity import ConnectivityMonitor, StaticLinkState


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def respond(status_code: int):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code)

    return handler


class TestCheckNow:
    """Tests for ConnectivityMonitor.check_now()."""

    @pytest.mark.asyncio
    async def test_link_down_is_offline_without_request(self, sync_settings):
        """No request should be made when the platform reports no link."""
        handler = MagicMock(return_value=httpx.Response(200))
        monitor = ConnectivityMonitor(
            sync_settings,
            link_state=StaticLinkState(link_up=False),
            client=make_client(handler),
        )

        assert await monitor.check_now() is False
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_response_is_online(self, sync_settings):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        monitor = ConnectivityMonitor(
            sync_settings, link_state=StaticLinkState(), client=make_client(handler)
        )

        assert await monitor.check_now() is True
        assert requests[0].method == "HEAD"
        assert requests[0].url.path == "/api/ping"
        assert requests[0].url.host == "sync.test"
        assert "_" in requests[0].url.params

    @pytest.mark.asyncio
    async def test_error_status_is_offline(self, sync_settings):
        monitor = ConnectivityMonitor(
            sync_settings, link_state=StaticLinkState(), client=make_client(respond(503))
        )

        assert await monitor.check_now() is False

    @pytest.mark.asyncio
    async def test_transport_error_is_offline(self, sync_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        probe = MagicMock()
        monitor = ConnectivityMonitor(
            sync_settings,
            link_state=StaticLinkState(),
            client=make_client(handler),
            probe=probe,
        )

        assert await monitor.check_now() is False
        probe.probe_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeout_is_offline(self, sync_settings):
        """A timed out probe counts as offline rather than raising."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        probe = MagicMock()
        monitor = ConnectivityMonitor(
            sync_settings,
            link_state=StaticLinkState(),
            client=make_client(handler),
            probe=probe,
        )

        assert await monitor.check_now() is False
        probe.probe_timed_out.assert_called_once_with(
            sync_settings.ping_url, sync_settings.probe_timeout_seconds
        )


class TestSubscriptions:
    """Tests for subscribe() and notify_link_change()."""

    @pytest.mark.asyncio
    async def test_online_transition_is_revalidated(self, sync_settings):
        """A link-up hint should only notify online if the probe succeeds."""
        monitor = ConnectivityMonitor(
            sync_settings, link_state=StaticLinkState(), client=make_client(respond(500))
        )
        on_online = MagicMock()
        on_offline = MagicMock()
        monitor.subscribe(on_online=on_online, on_offline=on_offline)

        assert await monitor.notify_link_change(True) is False

        on_online.assert_not_called()
        on_offline.assert_called_once()

    @pytest.mark.asyncio
    async def test_notifies_sync_and_async_callbacks(self, sync_settings):
        monitor = ConnectivityMonitor(
            sync_settings, link_state=StaticLinkState(), client=make_client(respond(200))
        )
        sync_callback = MagicMock()
        async_callback = AsyncMock()
        monitor.subscribe(on_online=sync_callback)
        monitor.subscribe(on_online=async_callback)

        await monitor.notify_link_change(True)

        sync_callback.assert_called_once()
        async_callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_others(self, sync_settings):
        probe = MagicMock()
        monitor = ConnectivityMonitor(
            sync_settings,
            link_state=StaticLinkState(),
            client=make_client(respond(200)),
            probe=probe,
        )
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        monitor.subscribe(on_online=broken)
        monitor.subscribe(on_online=healthy)

        await monitor.notify_link_change(True)

        healthy.assert_called_once()
        probe.subscriber_callback_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self, sync_settings):
        monitor = ConnectivityMonitor(
            sync_settings, link_state=StaticLinkState(), client=make_client(respond(200))
        )
        callback = MagicMock()
        keep = monitor.subscribe(on_online=MagicMock())
        unsubscribe = monitor.subscribe(on_online=callback)

        unsubscribe()
        unsubscribe()
        await monitor.notify_link_change(True)

        callback.assert_not_called()
        assert monitor.subscriber_count == 1
        keep()
        assert monitor.subscriber_count == 0


class TestLinkWatcher:
    """Tests for the start()/stop() link watcher."""

    @pytest.mark.asyncio
    async def test_link_change_triggers_notification(self, sync_settings):
        link_state = StaticLinkState(link_up=False)
        monitor = ConnectivityMonitor(
            sync_settings, link_state=link_state, client=make_client(respond(200))
        )
        came_online = asyncio.Event()
        monitor.subscribe(on_online=came_online.set)

        await monitor.start()
        try:
            link_state.link_up = True
            await asyncio.wait_for(came_online.wait(), timeout=2)
        finally:
            await monitor.aclose()

        assert came_online.is_set()

    @pytest.mark.asyncio
    async def test_stop_is_safe_without_start(self, sync_settings):
        monitor = ConnectivityMonitor(sync_settings, link_state=StaticLinkState())

        await monitor.stop()
        await monitor.aclose()

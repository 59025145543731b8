"""Connectivity monitor: can the remote server be reached right now?

The check has two stages. The platform link state is consulted first; if
it reports no link, the answer is offline without touching the network.
Otherwise a HEAD request to the server's liveness endpoint decides, which
catches devices that have a link but no route (captive portals, dead
upstreams).

Platform link transitions are hints, not facts: subscribers are only
notified after the transition has been re-validated with a fresh probe.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from infrastructure.connectivity.link_state import PsutilLinkState
from infrastructure.observability import ConnectivityProbe, DefaultConnectivityProbe
from shared_kernel.outbox.exceptions import ConnectivityUnknown

if TYPE_CHECKING:
    from infrastructure.settings import SyncSettings
    from shared_kernel.outbox.ports import LinkStateProvider, TransitionCallback


class ConnectivityMonitor:
    """Best-effort reachability signal with transition subscriptions.

    The monitor owns a watcher task (see start()) that polls the link-state
    provider and turns changes into validated online/offline notifications.
    Hosts with their own platform events can call notify_link_change()
    directly instead.
    """

    def __init__(
        self,
        settings: SyncSettings,
        link_state: LinkStateProvider | None = None,
        client: httpx.AsyncClient | None = None,
        probe: ConnectivityProbe | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            settings: Sync settings (ping URL, probe timeout, watch interval)
            link_state: Platform link indicator (defaults to psutil)
            client: Optional HTTP client; one is created lazily otherwise
            probe: Optional domain probe for observability
        """
        self._ping_url = settings.ping_url
        self._timeout = settings.probe_timeout_seconds
        self._watch_interval = settings.link_watch_interval_seconds
        self._link_state = link_state or PsutilLinkState()
        self._client = client
        self._owns_client = client is None
        self._probe = probe or DefaultConnectivityProbe()

        self._subscribers: dict[
            int, tuple[TransitionCallback | None, TransitionCallback | None]
        ] = {}
        self._tokens = itertools.count()
        self._last_link_up: bool | None = None
        self._watch_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def check_now(self) -> bool:
        """Return True if the remote server is reachable right now.

        Never raises. A probe that times out counts as offline.
        """
        if not self._link_state.is_link_up():
            self._probe.link_down()
            return False

        try:
            return await self._probe_server()
        except ConnectivityUnknown:
            return False

    async def _probe_server(self) -> bool:
        """HEAD the liveness endpoint.

        Raises:
            ConnectivityUnknown: If the probe timed out
        """
        try:
            response = await self._get_client().head(
                self._ping_url,
                # cache buster
                params={"_": int(time.time() * 1000)},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            self._probe.probe_timed_out(self._ping_url, self._timeout)
            raise ConnectivityUnknown(
                f"Liveness probe timed out after {self._timeout}s"
            ) from e
        except httpx.HTTPError as e:
            self._probe.probe_failed(self._ping_url, str(e) or type(e).__name__)
            return False

        if response.is_success:
            self._probe.probe_succeeded(self._ping_url, response.status_code)
            return True

        self._probe.probe_failed(self._ping_url, f"HTTP {response.status_code}")
        return False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        on_online: TransitionCallback | None = None,
        on_offline: TransitionCallback | None = None,
    ) -> Callable[[], None]:
        """Register transition callbacks.

        Callbacks may be plain functions or coroutine functions. Each
        subscription is independent of the others.

        Returns:
            A function that removes this subscription (calling it again
            does nothing)
        """
        token = next(self._tokens)
        self._subscribers[token] = (on_online, on_offline)

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def notify_link_change(self, link_up: bool) -> bool:
        """Handle a platform link transition.

        The hint is re-validated with check_now() before any subscriber is
        notified.

        Args:
            link_up: What the platform claims the link state now is

        Returns:
            The validated reachability that subscribers were notified of
        """
        self._probe.link_changed(link_up)
        online = await self.check_now()
        await self._notify(online)
        return online

    async def _notify(self, online: bool) -> None:
        transition = "online" if online else "offline"
        for on_online, on_offline in list(self._subscribers.values()):
            callback = on_online if online else on_offline
            if callback is None:
                continue
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._probe.subscriber_callback_failed(transition, e)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start watching the platform link state for transitions."""
        if self._watch_task is not None:
            return
        self._last_link_up = self._link_state.is_link_up()
        self._watch_task = asyncio.create_task(self._watch_loop())

    async def stop(self) -> None:
        """Stop the link watcher."""
        if self._watch_task is None:
            return
        self._watch_task.cancel()
        try:
            await self._watch_task
        except asyncio.CancelledError:
            pass
        self._watch_task = None

    async def aclose(self) -> None:
        """Stop watching and release the HTTP client if the monitor owns it."""
        await self.stop()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _watch_loop(self) -> None:
        while True:
            await asyncio.sleep(self._watch_interval)
            try:
                link_up = self._link_state.is_link_up()
                if link_up != self._last_link_up:
                    self._last_link_up = link_up
                    await self.notify_link_change(link_up)
            except Exception as e:
                self._probe.link_watch_failed(e)

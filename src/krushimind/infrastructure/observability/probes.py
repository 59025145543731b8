"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class StoreProbe(Protocol):
    """Domain probe for local store observability."""

    def store_initialized(self, path: str) -> None:
        """Record that the store was opened and its collections created."""
        ...

    def store_closed(self) -> None:
        """Record that the store was closed."""
        ...

    def store_operation_failed(
        self, operation: str, collection: str, error: Exception
    ) -> None:
        """Record that a store operation was rejected by the backing database."""
        ...


class DefaultStoreProbe:
    """Default implementation of StoreProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def store_initialized(self, path: str) -> None:
        """Record that the store was opened and its collections created."""
        self._logger.info("local_store_initialized", path=path)

    def store_closed(self) -> None:
        """Record that the store was closed."""
        self._logger.info("local_store_closed")

    def store_operation_failed(
        self, operation: str, collection: str, error: Exception
    ) -> None:
        """Record that a store operation was rejected by the backing database."""
        self._logger.error(
            "local_store_operation_failed",
            operation=operation,
            collection=collection,
            error=str(error),
        )


class ConnectivityProbe(Protocol):
    """Domain probe for connectivity monitoring.

    Distinguishes the platform link state from actual server reachability,
    which is what makes captive portals and dead upstreams diagnosable.
    """

    def link_down(self) -> None:
        """Record that the platform reported no usable link."""
        ...

    def link_changed(self, link_up: bool) -> None:
        """Record a platform link transition."""
        ...

    def probe_succeeded(self, url: str, status_code: int) -> None:
        """Record that the liveness endpoint answered successfully."""
        ...

    def probe_failed(self, url: str, reason: str) -> None:
        """Record that the liveness endpoint was unreachable or unhealthy."""
        ...

    def probe_timed_out(self, url: str, timeout: float) -> None:
        """Record that the liveness probe timed out (reachability unknown)."""
        ...

    def subscriber_callback_failed(self, transition: str, error: Exception) -> None:
        """Record that a subscriber's callback raised."""
        ...

    def link_watch_failed(self, error: Exception) -> None:
        """Record that polling the platform link state failed."""
        ...


class DefaultConnectivityProbe:
    """Default implementation of ConnectivityProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def link_down(self) -> None:
        """Record that the platform reported no usable link."""
        self._logger.debug("connectivity_link_down")

    def link_changed(self, link_up: bool) -> None:
        """Record a platform link transition."""
        self._logger.info("connectivity_link_changed", link_up=link_up)

    def probe_succeeded(self, url: str, status_code: int) -> None:
        """Record that the liveness endpoint answered successfully."""
        self._logger.debug(
            "connectivity_probe_succeeded",
            url=url,
            status_code=status_code,
        )

    def probe_failed(self, url: str, reason: str) -> None:
        """Record that the liveness endpoint was unreachable or unhealthy."""
        self._logger.info("connectivity_probe_failed", url=url, reason=reason)

    def probe_timed_out(self, url: str, timeout: float) -> None:
        """Record that the liveness probe timed out (reachability unknown)."""
        self._logger.info("connectivity_probe_timed_out", url=url, timeout=timeout)

    def subscriber_callback_failed(self, transition: str, error: Exception) -> None:
        """Record that a subscriber's callback raised."""
        self._logger.warning(
            "connectivity_subscriber_callback_failed",
            transition=transition,
            error=str(error),
        )

    def link_watch_failed(self, error: Exception) -> None:
        """Record that polling the platform link state failed."""
        self._logger.warning("connectivity_link_watch_failed", error=str(error))

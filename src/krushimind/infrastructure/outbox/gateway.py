"""HTTP gateway pushing records to the remote server.

The gateway is stateless apart from its connection pool: one call pushes
one record and reports what the server said. It does not retry; retry
policy belongs to the orchestrator and the outbox.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from shared_kernel.outbox.exceptions import SyncAttemptFailedError
from shared_kernel.outbox.routing import route_for
from shared_kernel.outbox.value_objects import PushResult, RecordType

if TYPE_CHECKING:
    from infrastructure.settings import SyncSettings


class HttpRemoteGateway:
    """Pushes records to the server's per-type endpoints over HTTP.

    No idempotency key is sent. If a request times out after the server
    committed the write, the next pass pushes the record again.
    """

    def __init__(
        self,
        settings: SyncSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            settings: Sync settings (server URL, request timeout)
            client: Optional HTTP client; one is created lazily otherwise.
                A supplied client's base_url is ignored in favour of
                absolute endpoint URLs.
        """
        self._server_url = settings.server_url
        self._timeout = settings.request_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def endpoint_url(self, record_type: RecordType) -> str:
        return f"{self._server_url}{route_for(record_type).endpoint}"

    async def push(self, record_type: RecordType, payload: dict[str, Any]) -> PushResult:
        """POST a record to the endpoint for its type.

        Args:
            record_type: Which endpoint receives the record
            payload: Full record body, sent as JSON

        Returns:
            PushResult; ``success`` is True for any 2xx response

        Raises:
            SyncAttemptFailedError: On timeouts and transport errors
        """
        url = self.endpoint_url(record_type)
        try:
            response = await self._get_client().post(
                url,
                json=payload,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise SyncAttemptFailedError(
                f"Push to {url} timed out after {self._timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise SyncAttemptFailedError(
                f"Push to {url} failed: {str(e) or type(e).__name__}"
            ) from e

        if not response.is_success:
            return PushResult(
                success=False,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )

        return PushResult(
            success=True,
            status_code=response.status_code,
            remote_id=_remote_id(response),
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        """Release the HTTP client if the gateway owns it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


def _remote_id(response: httpx.Response) -> Any:
    """Extract the server-assigned id from a response body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("id")
    return None

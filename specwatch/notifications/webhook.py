"""Repository-dispatch webhook channel.

Posts one payload per changed route::

    {"event_type": "api:{provider}:{operationId}",
     "client_payload": {"provider", "relativePath", "status", "operationId"}}

The shape is that of a GitHub ``POST /repos/{owner}/{repo}/dispatches``
body, so the URL can point at a repository directly or at any relay that
forwards such events.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from specwatch.models.result import ChangedRoute
from specwatch.notifications.manager import NotificationChannel, event_type

_log = structlog.get_logger(component="notifications.webhook")

_DEFAULT_HEADERS = {
    "Accept": "application/vnd.github+json",
    "User-Agent": "specwatch",
}


def dispatch_payload(provider: str, route: ChangedRoute) -> dict[str, Any]:
    return {
        "event_type": event_type(provider, route.operation_id or ""),
        "client_payload": {"provider": provider, **route.to_dict()},
    }


class WebhookNotificationChannel(NotificationChannel):
    """Sends dispatch events over one pooled HTTP client.

    Use as an async context manager (or call ``aclose``) so the client is
    released once every route has been sent.

    Args:
        url:       Dispatch endpoint.
        headers:   Extra headers, typically Authorization.
        timeout:   Per-request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("Webhook url must not be empty")
        self._url = url
        self._client = httpx.AsyncClient(
            headers={**_DEFAULT_HEADERS, **(headers or {})},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> WebhookNotificationChannel:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def channel_name(self) -> str:
        return "webhook"

    async def send(self, provider: str, route: ChangedRoute) -> bool:
        """True when the endpoint answers 2xx."""
        payload = dispatch_payload(provider, route)
        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.TimeoutException:
            _log.warning("dispatch_timeout", event_type=payload["event_type"], url=self._url)
            return False
        except httpx.HTTPError as exc:
            _log.warning("dispatch_http_error", event_type=payload["event_type"], error=str(exc))
            return False

        if not response.is_success:
            _log.warning(
                "dispatch_rejected",
                event_type=payload["event_type"],
                status_code=response.status_code,
                body=response.text[:200],
            )
            return False
        return True

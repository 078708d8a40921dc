"""Route-change notification dispatch.

NotificationChannel    -- what a delivery mechanism must provide.
NotificationDispatcher -- one notification per addressable changed route,
                          to every channel; a failing channel is counted,
                          never raised.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from specwatch.models.result import ChangedRoute
from specwatch.observability.metrics import notifications_total

_log = structlog.get_logger(component="notifications.manager")


def event_type(provider: str, operation_id: str) -> str:
    """Dispatch event name, e.g. ``api:openai:createChatCompletion``."""
    return f"api:{provider}:{operation_id}"


class NotificationChannel(ABC):
    """A delivery mechanism for changed-route notifications.

    ``send`` reports failure by returning False; the dispatcher still guards
    against channels that raise.
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Label used in metrics and logs."""

    @abstractmethod
    async def send(self, provider: str, route: ChangedRoute) -> bool:
        """Deliver one notification for *route*; True when accepted."""


@dataclass
class DispatchSummary:
    """Counts of one dispatch run."""

    sent: int = 0
    failed: int = 0
    skipped: int = 0


class NotificationDispatcher:
    """Sends every changed route to every channel concurrently.

    Routes without an operation id have no event name subscribers could
    match on and are skipped.
    """

    def __init__(self, channels: list[NotificationChannel]) -> None:
        self._channels = channels

    async def dispatch(self, provider: str, routes: list[ChangedRoute]) -> DispatchSummary:
        summary = DispatchSummary()
        addressable = []
        for route in routes:
            if route.operation_id:
                addressable.append(route)
            else:
                _log.info("notification_skipped_no_operation_id", relative_path=route.relative_path)
                summary.skipped += 1

        outcomes = await asyncio.gather(
            *(self._deliver(channel, provider, route) for route in addressable for channel in self._channels)
        )
        summary.sent = sum(outcomes)
        summary.failed = len(outcomes) - summary.sent
        _log.info(
            "notifications_done",
            provider=provider,
            sent=summary.sent,
            failed=summary.failed,
            skipped=summary.skipped,
        )
        return summary

    async def _deliver(self, channel: NotificationChannel, provider: str, route: ChangedRoute) -> bool:
        name = event_type(provider, route.operation_id or "")
        try:
            accepted = await channel.send(provider, route)
        except Exception as exc:  # noqa: BLE001
            _log.error("notification_channel_error", channel=channel.channel_name, event_type=name, error=str(exc))
            accepted = False

        notifications_total.labels(channel=channel.channel_name, success=str(accepted).lower()).inc()
        if accepted:
            _log.info("notification_sent", channel=channel.channel_name, event_type=name, status=route.status.value)
        else:
            _log.warning("notification_failed", channel=channel.channel_name, event_type=name)
        return accepted

"""Notifications for changed routes.

Submodules:
    manager  -- NotificationChannel ABC and the fan-out dispatcher.
    webhook  -- JSON webhook channel (repository-dispatch payloads).
"""

from specwatch.notifications.manager import (
    DispatchSummary,
    NotificationChannel,
    NotificationDispatcher,
    event_type,
)
from specwatch.notifications.webhook import WebhookNotificationChannel

__all__ = [
    "DispatchSummary",
    "NotificationChannel",
    "NotificationDispatcher",
    "WebhookNotificationChannel",
    "event_type",
]

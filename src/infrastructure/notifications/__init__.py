"""Notification sink implementations."""

from src.config import get_settings
from src.core.interfaces.notification import INotificationSink
from src.infrastructure.notifications.webhook import WebhookNotificationSink

_sink: INotificationSink | None = None


def get_notification_sink() -> INotificationSink:
    """Get the configured notification sink (singleton)."""
    global _sink
    if _sink is None:
        settings = get_settings()
        if settings.notifications.backend == "webhook":
            _sink = WebhookNotificationSink()
        else:
            from src.infrastructure.storage.sqlite.notification_store import (
                SQLiteNotificationStore,
            )

            _sink = SQLiteNotificationStore()
    return _sink


def reset_notification_sink() -> None:
    """Reset the sink singleton (for testing)."""
    global _sink
    _sink = None


__all__ = [
    "WebhookNotificationSink",
    "get_notification_sink",
    "reset_notification_sink",
]

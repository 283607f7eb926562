"""Abstract interface for notification delivery."""

from abc import ABC, abstractmethod

from src.core.entities.notification import Notification


class INotificationSink(ABC):
    """
    Accepts tenant-scoped notifications.

    Display and delivery to users are the sink's responsibility.
    """

    @abstractmethod
    async def send(self, notification: Notification) -> Notification:
        """
        Write one notification.

        Raises NotificationDeliveryError (or a storage error) on failure.
        """
        pass

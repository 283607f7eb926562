"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.notification import INotificationSink
from src.core.interfaces.storage import (
    ICheckNoteSource,
    IInvoiceSource,
    IPaymentReminderStore,
)

__all__ = [
    # Storage interfaces
    "IPaymentReminderStore",
    "IInvoiceSource",
    "ICheckNoteSource",
    # Notification interfaces
    "INotificationSink",
]

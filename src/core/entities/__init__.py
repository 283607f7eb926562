"""Core domain entities."""

from src.core.entities.check_note import (
    OUTSTANDING_CHECK_NOTE_STATUSES,
    CheckNote,
    CheckNoteDirection,
    CheckNoteKind,
    CheckNoteStatus,
)
from src.core.entities.invoice import (
    OPEN_INVOICE_STATUSES,
    Invoice,
    InvoiceDirection,
    InvoiceStatus,
)
from src.core.entities.notification import Notification, NotificationType
from src.core.entities.payment_reminder import (
    DEFAULT_CURRENCY,
    DEFAULT_DAYS_BEFORE,
    PaymentReminder,
    ReminderAggregate,
    ReminderFilter,
    ReminderType,
    SourceType,
)

__all__ = [
    # Reminder ledger
    "PaymentReminder",
    "ReminderType",
    "SourceType",
    "ReminderFilter",
    "ReminderAggregate",
    "DEFAULT_CURRENCY",
    "DEFAULT_DAYS_BEFORE",
    # Invoice source
    "Invoice",
    "InvoiceDirection",
    "InvoiceStatus",
    "OPEN_INVOICE_STATUSES",
    # Check/note source
    "CheckNote",
    "CheckNoteDirection",
    "CheckNoteKind",
    "CheckNoteStatus",
    "OUTSTANDING_CHECK_NOTE_STATUSES",
    # Notifications
    "Notification",
    "NotificationType",
]

"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.notification_store import SQLiteNotificationStore
from src.infrastructure.storage.sqlite.payment_reminder_store import (
    SQLitePaymentReminderStore,
)
from src.infrastructure.storage.sqlite.source_readers import (
    SQLiteCheckNoteSource,
    SQLiteInvoiceSource,
)

# Aliases
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_reminder_store: SQLitePaymentReminderStore | None = None
_invoice_source: SQLiteInvoiceSource | None = None
_check_note_source: SQLiteCheckNoteSource | None = None
_notification_store: SQLiteNotificationStore | None = None


async def get_payment_reminder_store() -> SQLitePaymentReminderStore:
    """Get singleton reminder ledger store."""
    global _reminder_store
    if _reminder_store is None:
        _reminder_store = SQLitePaymentReminderStore()
    return _reminder_store


async def get_invoice_source() -> SQLiteInvoiceSource:
    """Get singleton invoice source reader."""
    global _invoice_source
    if _invoice_source is None:
        _invoice_source = SQLiteInvoiceSource()
    return _invoice_source


async def get_check_note_source() -> SQLiteCheckNoteSource:
    """Get singleton check/note source reader."""
    global _check_note_source
    if _check_note_source is None:
        _check_note_source = SQLiteCheckNoteSource()
    return _check_note_source


async def get_notification_store() -> SQLiteNotificationStore:
    """Get singleton notification inbox store."""
    global _notification_store
    if _notification_store is None:
        _notification_store = SQLiteNotificationStore()
    return _notification_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLitePaymentReminderStore",
    "SQLiteInvoiceSource",
    "SQLiteCheckNoteSource",
    "SQLiteNotificationStore",
    # Factory functions
    "get_payment_reminder_store",
    "get_invoice_source",
    "get_check_note_source",
    "get_notification_store",
]

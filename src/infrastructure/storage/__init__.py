"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteCheckNoteSource,
    SQLiteInvoiceSource,
    SQLiteNotificationStore,
    SQLitePaymentReminderStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLitePaymentReminderStore",
    "SQLiteInvoiceSource",
    "SQLiteCheckNoteSource",
    "SQLiteNotificationStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]

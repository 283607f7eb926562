"""Pytest fixtures for SQLite storage tests."""

from datetime import date
from pathlib import Path

import pytest

from src.core.entities import PaymentReminder, ReminderType
from src.infrastructure.storage.sqlite import (
    SQLiteCheckNoteSource,
    SQLiteInvoiceSource,
    SQLiteNotificationStore,
    SQLitePaymentReminderStore,
)


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def reminder_store(migrated_db: Path) -> SQLitePaymentReminderStore:
    return SQLitePaymentReminderStore()


@pytest.fixture
def invoice_source(migrated_db: Path) -> SQLiteInvoiceSource:
    return SQLiteInvoiceSource()


@pytest.fixture
def check_note_source(migrated_db: Path) -> SQLiteCheckNoteSource:
    return SQLiteCheckNoteSource()


@pytest.fixture
def notification_store(migrated_db: Path) -> SQLiteNotificationStore:
    return SQLiteNotificationStore()


@pytest.fixture
def make_reminder():
    """Factory for unsaved reminders."""

    def _make(**overrides) -> PaymentReminder:
        fields = {
            "tenant_id": "tenant-a",
            "type": ReminderType.PAYMENT,
            "due_date": date(2026, 11, 1),
            "amount": "100.00",
            "description": "Office rent",
        }
        fields.update(overrides)
        return PaymentReminder(**fields)

    return _make

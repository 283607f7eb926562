"""Tests for PaymentReminder entity."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.core.entities.money import MAX_AMOUNT, from_minor, to_decimal, to_minor
from src.core.entities.payment_reminder import (
    DEFAULT_CURRENCY,
    DEFAULT_DAYS_BEFORE,
    PaymentReminder,
    ReminderType,
    SourceType,
)


def _make_reminder(**overrides) -> PaymentReminder:
    fields = {
        "tenant_id": "tenant-a",
        "type": ReminderType.COLLECTION,
        "due_date": date(2026, 11, 1),
        "amount": "1250.50",
        "description": "Collection: Acme Ltd - 12345678",
    }
    fields.update(overrides)
    return PaymentReminder(**fields)


class TestPaymentReminder:
    """Tests for PaymentReminder entity."""

    def test_create_minimal(self):
        reminder = _make_reminder()
        assert reminder.currency == DEFAULT_CURRENCY
        assert reminder.reminder_days_before == DEFAULT_DAYS_BEFORE
        assert reminder.is_paid is False
        assert reminder.reminder_sent is False
        assert reminder.paid_at is None
        assert len(reminder.id) == 32

    def test_amount_normalized_to_two_places(self):
        reminder = _make_reminder(amount=0.1 + 0.2)
        assert reminder.amount == Decimal("0.30")

    def test_manual_reminder_has_no_source(self):
        reminder = _make_reminder()
        assert reminder.is_automated is False
        assert reminder.source_type is None
        assert reminder.source_id is None

    def test_invoice_link(self):
        reminder = _make_reminder(invoice_id="inv-1")
        assert reminder.is_automated is True
        assert reminder.source_type is SourceType.INVOICE
        assert reminder.source_id == "inv-1"

    def test_check_note_link(self):
        reminder = _make_reminder(type=ReminderType.CHECK_DUE, check_note_id="cn-1")
        assert reminder.source_type is SourceType.CHECK_NOTE
        assert reminder.source_id == "cn-1"

    def test_both_links_rejected(self):
        with pytest.raises(PydanticValidationError):
            _make_reminder(invoice_id="inv-1", check_note_id="cn-1")

    def test_negative_offset_rejected(self):
        with pytest.raises(PydanticValidationError):
            _make_reminder(reminder_days_before=-1)

    def test_fire_date(self):
        reminder = _make_reminder(due_date=date(2026, 11, 1), reminder_days_before=3)
        assert reminder.fire_date == date(2026, 10, 29)

    def test_due_for_notification_on_fire_date(self):
        reminder = _make_reminder(due_date=date(2026, 11, 1), reminder_days_before=3)
        assert reminder.is_due_for_notification(date(2026, 10, 29)) is True
        assert reminder.is_due_for_notification(date(2026, 10, 28)) is False

    def test_past_due_still_fires(self):
        reminder = _make_reminder(due_date=date(2026, 10, 1))
        assert reminder.is_due_for_notification(date(2026, 10, 18)) is True

    def test_sent_or_paid_never_fires(self):
        sent = _make_reminder(due_date=date(2026, 10, 1), reminder_sent=True)
        paid = _make_reminder(due_date=date(2026, 10, 1), is_paid=True)
        assert sent.is_due_for_notification(date(2026, 10, 18)) is False
        assert paid.is_due_for_notification(date(2026, 10, 18)) is False

    def test_is_overdue_on(self):
        reminder = _make_reminder(due_date=date(2026, 10, 18))
        assert reminder.is_overdue_on(date(2026, 10, 19)) is True
        assert reminder.is_overdue_on(date(2026, 10, 18)) is False
        paid = _make_reminder(due_date=date(2026, 10, 18), is_paid=True)
        assert paid.is_overdue_on(date(2026, 10, 19)) is False

    def test_is_overdue_uses_utc_date(self):
        today = datetime.now(UTC).date()
        past = _make_reminder(due_date=today - timedelta(days=1))
        future = _make_reminder(due_date=today + timedelta(days=1))
        paid = _make_reminder(due_date=today - timedelta(days=1), is_paid=True)
        assert past.is_overdue is True
        assert future.is_overdue is False
        assert paid.is_overdue is False


class TestMoney:
    """Tests for minor-unit conversion."""

    def test_to_decimal_rounds_half_up(self):
        assert to_decimal("10.005") == Decimal("10.01")
        assert to_decimal(None) == Decimal("0.00")

    def test_minor_units(self):
        assert to_minor(Decimal("1234.56")) == 123456
        assert to_minor("0.1") == 10
        assert from_minor(123456) == Decimal("1234.56")
        assert from_minor(None) == Decimal("0.00")

    @pytest.mark.parametrize("value", ["1e30", "NaN", "Infinity", "ten"])
    def test_to_decimal_rejects_unrepresentable(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_to_minor_rejects_values_beyond_int64(self):
        assert to_minor(MAX_AMOUNT) == 99999999999999
        with pytest.raises(ValueError):
            to_minor(Decimal("100000000000000000"))

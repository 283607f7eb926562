"""
Locale-aware notification text for payment reminders.

Amounts and dates are rendered with Babel so a tenant sees its own
separators and date order.
"""

from babel.dates import format_date
from babel.numbers import format_currency

from src.core.entities.notification import Notification, NotificationType
from src.core.entities.payment_reminder import PaymentReminder, ReminderType

DEFAULT_LOCALE = "tr_TR"

_OBLIGATION_LABELS = {
    ReminderType.COLLECTION: "A collection",
    ReminderType.PAYMENT: "A payment",
    ReminderType.CHECK_DUE: "A check",
    ReminderType.NOTE_DUE: "A promissory note",
}


class ReminderMessageFormatter:
    """Builds the PAYMENT_REMINDER notification for a reminder."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale

    def format_amount(self, reminder: PaymentReminder) -> str:
        return format_currency(reminder.amount, reminder.currency, locale=self.locale)

    def format_due_date(self, reminder: PaymentReminder) -> str:
        return format_date(reminder.due_date, format="short", locale=self.locale)

    def build(self, reminder: PaymentReminder) -> Notification:
        """
        Tenant-wide notification keyed on the reminder id.

        The key lets sinks drop a second delivery of the same reminder.
        """
        label = _OBLIGATION_LABELS[reminder.type]
        return Notification(
            tenant_id=reminder.tenant_id,
            user_id=None,
            type=NotificationType.PAYMENT_REMINDER,
            title=f"Payment reminder: {reminder.description}",
            message=(
                f"{label} of {self.format_amount(reminder)} "
                f"is due on {self.format_due_date(reminder)}."
            ),
            meta={
                "reminder_id": reminder.id,
                "type": reminder.type.value,
                "amount": str(reminder.amount),
                "currency": reminder.currency,
                "due_date": reminder.due_date.isoformat(),
            },
            idempotency_key=reminder.id,
        )

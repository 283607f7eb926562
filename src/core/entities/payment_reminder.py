"""
Payment reminder entity.

A reminder is one row of the reminder ledger: an upcoming or past payment or
collection obligation plus its notification state. Automated reminders mirror
exactly one source record (an invoice or a check/note); manual reminders have
no source link.
"""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.entities.money import to_decimal

DEFAULT_DAYS_BEFORE = 3
DEFAULT_CURRENCY = "TRY"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


class ReminderType(str, Enum):
    """Closed set of reminder categories."""

    COLLECTION = "COLLECTION"  # receivable invoice
    PAYMENT = "PAYMENT"  # payable invoice
    CHECK_DUE = "CHECK_DUE"
    NOTE_DUE = "NOTE_DUE"


class SourceType(str, Enum):
    """Kind of record an automated reminder mirrors."""

    INVOICE = "invoice"
    CHECK_NOTE = "check_note"


class PaymentReminder(BaseModel):
    """
    Reminder ledger row.

    ``reminder_sent`` and ``is_paid`` only ever move from False to True.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    tenant_id: str
    client_company_id: str | None = None
    invoice_id: str | None = None
    check_note_id: str | None = None
    type: ReminderType
    due_date: date
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    description: str = ""
    reminder_days_before: int = Field(default=DEFAULT_DAYS_BEFORE, ge=0)
    is_paid: bool = False
    paid_at: datetime | None = None
    reminder_sent: bool = False
    reminder_sent_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: object) -> Decimal:
        return to_decimal(v)

    @model_validator(mode="after")
    def single_source_link(self) -> "PaymentReminder":
        if self.invoice_id is not None and self.check_note_id is not None:
            raise ValueError("a reminder links to an invoice or a check/note, not both")
        return self

    @property
    def is_automated(self) -> bool:
        """True when the reminder is maintained by reconciliation."""
        return self.invoice_id is not None or self.check_note_id is not None

    @property
    def source_type(self) -> SourceType | None:
        if self.invoice_id is not None:
            return SourceType.INVOICE
        if self.check_note_id is not None:
            return SourceType.CHECK_NOTE
        return None

    @property
    def source_id(self) -> str | None:
        return self.invoice_id or self.check_note_id

    @property
    def fire_date(self) -> date:
        """Earliest day the reminder is eligible for notification."""
        return self.due_date - timedelta(days=self.reminder_days_before)

    def is_overdue_on(self, today: date) -> bool:
        """Whether the reminder is unpaid and its due date is before ``today``."""
        return not self.is_paid and self.due_date < today

    @property
    def is_overdue(self) -> bool:
        """Overdue as of the current UTC date."""
        return self.is_overdue_on(utcnow().date())

    def is_due_for_notification(self, today: date) -> bool:
        """Whether the scheduler should notify for this reminder on ``today``."""
        if self.is_paid or self.reminder_sent:
            return False
        return self.fire_date <= today


class ReminderFilter(BaseModel):
    """Store-level filter over one tenant's ledger."""

    type: ReminderType | None = None
    is_paid: bool | None = None
    due_from: date | None = None  # inclusive
    due_to: date | None = None  # inclusive
    due_before: date | None = None  # exclusive


class ReminderAggregate(BaseModel):
    """Count and summed amount for a filtered slice of the ledger."""

    count: int = 0
    amount: Decimal = Decimal("0.00")

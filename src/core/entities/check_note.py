"""
Negotiable instrument (check / promissory note) source record.

Instruments move through a portfolio lifecycle: held in portfolio, submitted
for collection, then collected, bounced, returned or endorsed away.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, field_validator

from src.core.entities.money import to_decimal


class CheckNoteKind(str, Enum):
    """Instrument kind."""

    CHECK = "CHECK"
    PROMISSORY_NOTE = "PROMISSORY_NOTE"


class CheckNoteDirection(str, Enum):
    """Whether the tenant receives or pays the instrument."""

    RECEIVABLE = "RECEIVABLE"
    PAYABLE = "PAYABLE"


class CheckNoteStatus(str, Enum):
    """Portfolio lifecycle status."""

    IN_PORTFOLIO = "IN_PORTFOLIO"
    SENT_FOR_COLLECTION = "SENT_FOR_COLLECTION"
    COLLECTED = "COLLECTED"
    BOUNCED = "BOUNCED"
    RETURNED = "RETURNED"
    ENDORSED = "ENDORSED"


OUTSTANDING_CHECK_NOTE_STATUSES: tuple[CheckNoteStatus, ...] = (
    CheckNoteStatus.IN_PORTFOLIO,
    CheckNoteStatus.SENT_FOR_COLLECTION,
)


class CheckNote(BaseModel):
    """Check or promissory note as seen by reconciliation."""

    id: str
    tenant_id: str
    client_company_id: str | None = None
    direction: CheckNoteDirection
    kind: CheckNoteKind
    status: CheckNoteStatus = CheckNoteStatus.IN_PORTFOLIO
    amount: Decimal
    currency: str = "TRY"
    due_date: date
    document_number: str

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: object) -> Decimal:
        return to_decimal(v)

    @property
    def is_outstanding(self) -> bool:
        return self.status in OUTSTANDING_CHECK_NOTE_STATUSES

"""
Invoice source record.

Invoices are owned by the invoicing module; the reminder engine only reads
them. Only the fields reconciliation needs are modelled here.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, field_validator

from src.core.entities.money import to_decimal


class InvoiceDirection(str, Enum):
    """Which side of the trade the tenant is on."""

    SALES = "SALES"  # receivable
    PURCHASE = "PURCHASE"  # payable


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# Statuses for which payment is still expected
OPEN_INVOICE_STATUSES: tuple[InvoiceStatus, ...] = (
    InvoiceStatus.ISSUED,
    InvoiceStatus.DRAFT,
)


class Invoice(BaseModel):
    """Invoice as seen by reconciliation."""

    id: str
    tenant_id: str
    client_company_id: str | None = None
    direction: InvoiceDirection
    status: InvoiceStatus = InvoiceStatus.ISSUED
    total_amount: Decimal
    currency: str = "TRY"
    due_date: date | None = None
    counterparty_name: str | None = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: object) -> Decimal:
        return to_decimal(v)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_INVOICE_STATUSES

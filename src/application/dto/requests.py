"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.core.entities.money import MAX_AMOUNT
from src.core.entities.payment_reminder import (
    DEFAULT_CURRENCY,
    DEFAULT_DAYS_BEFORE,
    ReminderType,
)


def _upper_currency(v: str | None) -> str | None:
    return v.strip().upper() if v is not None else None


class CreateReminderRequest(BaseModel):
    """Request to create a manual payment reminder."""

    type: ReminderType = Field(
        ...,
        description="Reminder category",
        examples=["COLLECTION", "PAYMENT"],
    )
    due_date: date = Field(..., description="Due date (YYYY-MM-DD)", examples=["2026-11-30"])
    amount: Decimal = Field(
        ..., gt=0, le=MAX_AMOUNT, description="Amount due", examples=["1250.00"]
    )
    currency: str = Field(
        default=DEFAULT_CURRENCY,
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code",
        examples=["TRY", "EUR"],
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Short description shown in notifications",
    )
    reminder_days_before: int = Field(
        default=DEFAULT_DAYS_BEFORE,
        ge=0,
        le=30,
        description="Days before the due date to send the notification",
    )
    client_company_id: str | None = Field(
        default=None,
        description="Client company the reminder belongs to",
    )

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


class UpdateReminderRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    type: ReminderType | None = None
    due_date: date | None = None
    amount: Decimal | None = Field(default=None, gt=0, le=MAX_AMOUNT)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    reminder_days_before: int | None = Field(default=None, ge=0, le=30)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)

"""
Payment reminder queries and lifecycle.

Read side: paginated listing, upcoming/overdue views and the dashboard
aggregates. Write side: manual create, partial update, delete and
mark-as-paid. Every operation is scoped by an explicit tenant id.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from src.config import get_logger
from src.core.entities.money import MAX_AMOUNT, to_decimal
from src.core.entities.payment_reminder import (
    DEFAULT_CURRENCY,
    DEFAULT_DAYS_BEFORE,
    PaymentReminder,
    ReminderFilter,
    ReminderType,
    utcnow,
)
from src.core.exceptions import (
    ReminderAlreadyPaidError,
    ReminderNotFoundError,
    ValidationError,
)
from src.core.interfaces.storage import IPaymentReminderStore

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
UPCOMING_WINDOW_DAYS = 7
MAX_DAYS_BEFORE = 30

# Fields copied from the source record of an automated reminder
SOURCE_FIELDS = frozenset({"type", "due_date", "amount", "currency"})


class ListRemindersQuery(BaseModel):
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    type: ReminderType | None = None
    is_paid: bool | None = None
    upcoming: bool = False
    overdue: bool = False


class ReminderPage(BaseModel):
    items: list[PaymentReminder]
    page: int
    page_size: int
    total: int
    total_pages: int


class DashboardStats(BaseModel):
    upcoming_count: int = 0
    upcoming_amount: Decimal = Decimal("0.00")
    overdue_count: int = 0
    overdue_amount: Decimal = Decimal("0.00")


class ReminderCreate(BaseModel):
    """Input for a manual reminder."""

    type: ReminderType
    due_date: date
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    description: str
    reminder_days_before: int = DEFAULT_DAYS_BEFORE
    client_company_id: str | None = None


class ReminderUpdate(BaseModel):
    """Partial update; only explicitly set fields are applied."""

    type: ReminderType | None = None
    due_date: date | None = None
    amount: Decimal | None = None
    currency: str | None = None
    description: str | None = None
    reminder_days_before: int | None = None


class PaymentReminderService:
    """
    Query facade and lifecycle operations over the reminder ledger.

    ``clock`` supplies the current time; "today" for the upcoming and
    overdue windows is its UTC date.
    """

    def __init__(
        self,
        reminder_store: IPaymentReminderStore,
        clock: Callable[[], datetime] = utcnow,
        upcoming_window_days: int = UPCOMING_WINDOW_DAYS,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._store = reminder_store
        self._clock = clock
        self._upcoming_window_days = upcoming_window_days
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    def today(self) -> date:
        """Current UTC date according to the service clock."""
        return self._clock().date()

    def _upcoming_filter(self, days_ahead: int) -> ReminderFilter:
        today = self.today()
        return ReminderFilter(
            is_paid=False,
            due_from=today,
            due_to=today + timedelta(days=days_ahead),
        )

    def _overdue_filter(self) -> ReminderFilter:
        return ReminderFilter(is_paid=False, due_before=self.today())

    # Queries

    async def list_reminders(
        self, tenant_id: str, query: ListRemindersQuery | None = None
    ) -> ReminderPage:
        """
        List one page of a tenant's reminders ordered by due date.

        Raises:
            ValidationError: page below 1, or upcoming and overdue both set
        """
        query = query or ListRemindersQuery(page_size=self._default_page_size)

        if query.page < 1:
            raise ValidationError("page", "must be at least 1", query.page)
        if query.upcoming and query.overdue:
            raise ValidationError(
                "overdue", "upcoming and overdue cannot be combined", query.overdue
            )

        page_size = max(1, min(query.page_size, self._max_page_size))

        if query.upcoming:
            filters = self._upcoming_filter(self._upcoming_window_days)
        elif query.overdue:
            filters = self._overdue_filter()
        else:
            filters = ReminderFilter(is_paid=query.is_paid)
        filters.type = query.type

        total = await self._store.count(tenant_id, filters)
        items = await self._store.list_reminders(
            tenant_id,
            filters,
            limit=page_size,
            offset=(query.page - 1) * page_size,
        )
        return ReminderPage(
            items=items,
            page=query.page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if total else 0,
        )

    async def get_by_id(self, tenant_id: str, reminder_id: str) -> PaymentReminder:
        reminder = await self._store.get(tenant_id, reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id, tenant_id)
        return reminder

    async def get_upcoming(
        self, tenant_id: str, days_ahead: int | None = None
    ) -> list[PaymentReminder]:
        """Unpaid reminders due between today and today + days_ahead, inclusive."""
        if days_ahead is None:
            days_ahead = self._upcoming_window_days
        if days_ahead < 0:
            raise ValidationError("days", "must not be negative", days_ahead)
        return await self._store.list_reminders(
            tenant_id, self._upcoming_filter(days_ahead), limit=None
        )

    async def get_overdue(self, tenant_id: str) -> list[PaymentReminder]:
        """Unpaid reminders due before today."""
        return await self._store.list_reminders(tenant_id, self._overdue_filter(), limit=None)

    async def get_dashboard_stats(self, tenant_id: str) -> DashboardStats:
        """Counts and amount sums of the upcoming and overdue views."""
        upcoming = await self._store.aggregate(
            tenant_id, self._upcoming_filter(self._upcoming_window_days)
        )
        overdue = await self._store.aggregate(tenant_id, self._overdue_filter())
        return DashboardStats(
            upcoming_count=upcoming.count,
            upcoming_amount=upcoming.amount,
            overdue_count=overdue.count,
            overdue_amount=overdue.amount,
        )

    # Lifecycle

    async def create(self, tenant_id: str, payload: ReminderCreate) -> PaymentReminder:
        """Create a manual reminder (no source link)."""
        values = _validated(payload.model_dump())
        reminder = PaymentReminder(tenant_id=tenant_id, **values)
        created = await self._store.create(reminder)
        logger.info(
            "manual_reminder_created",
            tenant_id=tenant_id,
            reminder_id=created.id,
            type=created.type.value,
        )
        return created

    async def update(
        self, tenant_id: str, reminder_id: str, payload: ReminderUpdate
    ) -> PaymentReminder:
        """
        Apply the fields present in ``payload``.

        Raises:
            ReminderNotFoundError: reminder is not in the tenant
            ValidationError: invalid value, or a source field of an
                automated reminder would change
        """
        reminder = await self.get_by_id(tenant_id, reminder_id)
        changes = _validated(payload.model_dump(exclude_unset=True, exclude_none=True))

        if reminder.is_automated:
            for name in sorted(SOURCE_FIELDS & changes.keys()):
                if getattr(reminder, name) != changes[name]:
                    raise ValidationError(
                        name,
                        "is maintained from the linked source record",
                        changes[name],
                    )

        if not changes:
            return reminder

        updated = reminder.model_copy(update=changes)
        return await self._store.update(updated)

    async def delete(self, tenant_id: str, reminder_id: str) -> None:
        """
        Delete a manual reminder.

        Raises:
            ReminderNotFoundError: reminder is not in the tenant
            ValidationError: reminder is linked to a source record
        """
        reminder = await self.get_by_id(tenant_id, reminder_id)
        if reminder.is_automated:
            raise ValidationError(
                "id", "reminders linked to a source record cannot be deleted", reminder_id
            )
        if not await self._store.delete(tenant_id, reminder_id):
            raise ReminderNotFoundError(reminder_id, tenant_id)

    async def mark_as_paid(self, tenant_id: str, reminder_id: str) -> PaymentReminder:
        """
        Set is_paid and paid_at.

        Raises:
            ReminderNotFoundError: reminder is not in the tenant
            ReminderAlreadyPaidError: reminder is already paid
        """
        reminder = await self.get_by_id(tenant_id, reminder_id)
        if reminder.is_paid:
            raise ReminderAlreadyPaidError(reminder_id)

        if not await self._store.mark_paid(tenant_id, reminder_id, self._clock()):
            # Paid concurrently between the read and the update
            raise ReminderAlreadyPaidError(reminder_id)

        logger.info("reminder_marked_paid", tenant_id=tenant_id, reminder_id=reminder_id)
        return await self.get_by_id(tenant_id, reminder_id)


def _validated(values: dict[str, Any]) -> dict[str, Any]:
    """Check and normalize writable reminder fields present in ``values``."""
    if "amount" in values:
        try:
            amount = to_decimal(values["amount"])
        except ValueError as e:
            raise ValidationError("amount", "must be a number", values["amount"]) from e
        if amount <= 0:
            raise ValidationError("amount", "must be positive", values["amount"])
        if amount > MAX_AMOUNT:
            raise ValidationError("amount", f"must not exceed {MAX_AMOUNT}", values["amount"])
        values["amount"] = amount

    if "currency" in values:
        currency = str(values["currency"]).strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError("currency", "must be a three-letter code", values["currency"])
        values["currency"] = currency

    if "description" in values:
        description = str(values["description"]).strip()
        if not description:
            raise ValidationError("description", "must not be empty")
        values["description"] = description

    if "reminder_days_before" in values:
        days = values["reminder_days_before"]
        if not 0 <= days <= MAX_DAYS_BEFORE:
            raise ValidationError(
                "reminder_days_before", f"must be between 0 and {MAX_DAYS_BEFORE}", days
            )

    return values

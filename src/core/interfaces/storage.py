"""
Abstract interfaces for storage providers.

Defines contracts for the reminder ledger and the two read-only source
collections it is reconciled against.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal

from src.core.entities.check_note import CheckNote
from src.core.entities.invoice import Invoice
from src.core.entities.payment_reminder import (
    PaymentReminder,
    ReminderAggregate,
    ReminderFilter,
)


class IPaymentReminderStore(ABC):
    """
    Abstract interface for the reminder ledger.

    Every tenant-facing method is scoped by ``tenant_id``; only the
    notification scan works across tenants.
    """

    @abstractmethod
    async def create(self, reminder: PaymentReminder) -> PaymentReminder:
        """
        Insert a reminder.

        Raises DuplicateSourceLinkError when the tenant already has a
        reminder for the same invoice or check/note.
        """
        pass

    @abstractmethod
    async def get(self, tenant_id: str, reminder_id: str) -> PaymentReminder | None:
        """Get reminder by ID within a tenant."""
        pass

    @abstractmethod
    async def find_by_invoice(
        self, tenant_id: str, invoice_id: str
    ) -> PaymentReminder | None:
        """Find the reminder mirroring an invoice."""
        pass

    @abstractmethod
    async def find_by_check_note(
        self, tenant_id: str, check_note_id: str
    ) -> PaymentReminder | None:
        """Find the reminder mirroring a check/note."""
        pass

    @abstractmethod
    async def update(self, reminder: PaymentReminder) -> PaymentReminder:
        """Persist the editable fields of an existing reminder."""
        pass

    @abstractmethod
    async def update_source_fields(
        self,
        tenant_id: str,
        reminder_id: str,
        amount: Decimal,
        due_date: date,
    ) -> bool:
        """Overwrite only amount and due date (reconciliation drift fix)."""
        pass

    @abstractmethod
    async def delete(self, tenant_id: str, reminder_id: str) -> bool:
        """Delete a reminder. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def mark_paid(
        self, tenant_id: str, reminder_id: str, paid_at: datetime
    ) -> bool:
        """Set is_paid if not already set. Returns False if nothing changed."""
        pass

    @abstractmethod
    async def list_reminders(
        self,
        tenant_id: str,
        filters: ReminderFilter | None = None,
        limit: int | None = 20,
        offset: int = 0,
    ) -> list[PaymentReminder]:
        """List reminders ordered by due date."""
        pass

    @abstractmethod
    async def count(self, tenant_id: str, filters: ReminderFilter | None = None) -> int:
        """Count reminders matching the filter."""
        pass

    @abstractmethod
    async def aggregate(
        self, tenant_id: str, filters: ReminderFilter | None = None
    ) -> ReminderAggregate:
        """Count and sum amounts for reminders matching the filter."""
        pass

    # Notification pipeline (global, not tenant scoped)
    @abstractmethod
    async def list_pending_notifications(self) -> list[PaymentReminder]:
        """All unsent, unpaid reminders across tenants."""
        pass

    @abstractmethod
    async def claim_for_notification(
        self, reminder_id: str, now: datetime, lease_until: datetime
    ) -> bool:
        """
        Take a short lease on an unsent reminder.

        Returns False when the reminder is already sent, paid, or leased by
        another worker until after ``now``.
        """
        pass

    @abstractmethod
    async def release_claim(self, reminder_id: str) -> None:
        """Drop a lease so the next run can retry immediately."""
        pass

    @abstractmethod
    async def mark_sent(self, reminder_id: str, sent_at: datetime) -> bool:
        """Set reminder_sent if not already set. Returns False if nothing changed."""
        pass


class IInvoiceSource(ABC):
    """Read-only access to the invoice collection."""

    @abstractmethod
    async def list_open_invoices(self, tenant_id: str) -> list[Invoice]:
        """Invoices in an open status that carry a due date."""
        pass

    @abstractmethod
    async def list_tenant_ids(self) -> list[str]:
        """Tenants that own at least one invoice."""
        pass


class ICheckNoteSource(ABC):
    """Read-only access to the check/note collection."""

    @abstractmethod
    async def list_outstanding(self, tenant_id: str) -> list[CheckNote]:
        """Instruments still held in portfolio or out for collection."""
        pass

    @abstractmethod
    async def list_tenant_ids(self) -> list[str]:
        """Tenants that own at least one check/note."""
        pass

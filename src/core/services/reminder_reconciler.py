"""
Reminder reconciliation.

Mirrors open invoices and outstanding checks/notes into the reminder ledger.
Each source record gets at most one reminder per tenant; a re-run creates
nothing new for sources that already have one and only rewrites amount and
due date when they have drifted.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.check_note import CheckNote, CheckNoteKind
from src.core.entities.invoice import Invoice, InvoiceDirection
from src.core.entities.payment_reminder import (
    DEFAULT_DAYS_BEFORE,
    PaymentReminder,
    ReminderType,
)
from src.core.exceptions import DuplicateSourceLinkError
from src.core.interfaces.storage import (
    ICheckNoteSource,
    IInvoiceSource,
    IPaymentReminderStore,
)

logger = get_logger(__name__)


@dataclass
class ReconcileResult:
    """Counts produced by one reconciliation of one tenant."""

    created: int = 0
    updated: int = 0

    def __add__(self, other: ReconcileResult) -> ReconcileResult:
        return ReconcileResult(
            created=self.created + other.created,
            updated=self.updated + other.updated,
        )


@dataclass
class TenantReconcileFailure:
    tenant_id: str
    message: str


@dataclass
class BulkReconcileResult:
    """Outcome of reconciling several tenants in one job."""

    results: dict[str, ReconcileResult] = field(default_factory=dict)
    failures: list[TenantReconcileFailure] = field(default_factory=list)

    @property
    def totals(self) -> ReconcileResult:
        total = ReconcileResult()
        for result in self.results.values():
            total = total + result
        return total


def reminder_type_for_invoice(invoice: Invoice) -> ReminderType:
    """Sales invoices are collected, purchase invoices are paid."""
    if invoice.direction is InvoiceDirection.SALES:
        return ReminderType.COLLECTION
    return ReminderType.PAYMENT


def reminder_type_for_check_note(note: CheckNote) -> ReminderType:
    if note.kind is CheckNoteKind.CHECK:
        return ReminderType.CHECK_DUE
    return ReminderType.NOTE_DUE


def describe_invoice(invoice: Invoice, reminder_type: ReminderType) -> str:
    label = "Collection" if reminder_type is ReminderType.COLLECTION else "Payment"
    counterparty = invoice.counterparty_name or "Invoice"
    return f"{label}: {counterparty} - {invoice.id[-8:]}"


def describe_check_note(note: CheckNote) -> str:
    label = "Check" if note.kind is CheckNoteKind.CHECK else "Promissory note"
    return f"{label} due: {note.document_number}"


class ReminderReconciler:
    """
    Layer-pure reconciliation service.

    Reads both sources for a tenant and brings the ledger in line:
    missing reminders are created, drifted ones have amount and due date
    overwritten. Other fields, including the paid and sent flags, are
    never touched, and reminders are not removed when their source closes.

    Check/note drift is only synchronized when ``sync_check_note_drift``
    is enabled; by default a check/note reminder keeps the amount and
    due date it was created with.
    """

    def __init__(
        self,
        reminder_store: IPaymentReminderStore,
        invoice_source: IInvoiceSource,
        check_note_source: ICheckNoteSource,
        days_before: int = DEFAULT_DAYS_BEFORE,
        sync_check_note_drift: bool = False,
    ) -> None:
        self._reminders = reminder_store
        self._invoices = invoice_source
        self._check_notes = check_note_source
        self._days_before = days_before
        self._sync_check_note_drift = sync_check_note_drift

    async def reconcile(self, tenant_id: str) -> ReconcileResult:
        """
        Reconcile one tenant's ledger against its sources.

        Any read or write failure propagates and aborts the run; rows
        already written stay, and a re-run picks up the rest.

        Args:
            tenant_id: Tenant whose ledger is reconciled

        Returns:
            Number of reminders created and updated
        """
        result = ReconcileResult()

        invoices = await self._invoices.list_open_invoices(tenant_id)
        for invoice in invoices:
            # Open invoices without a due date have nothing to remind about
            if invoice.due_date is None:
                continue
            await self._reconcile_invoice(tenant_id, invoice, result)

        notes = await self._check_notes.list_outstanding(tenant_id)
        for note in notes:
            await self._reconcile_check_note(tenant_id, note, result)

        logger.info(
            "reconcile_complete",
            tenant_id=tenant_id,
            invoices=len(invoices),
            check_notes=len(notes),
            created=result.created,
            updated=result.updated,
        )
        return result

    async def discover_tenants(self) -> list[str]:
        """Tenants that own at least one source record."""
        tenant_ids = set(await self._invoices.list_tenant_ids())
        tenant_ids.update(await self._check_notes.list_tenant_ids())
        return sorted(tenant_ids)

    async def reconcile_all(self, tenant_ids: list[str] | None = None) -> BulkReconcileResult:
        """
        Reconcile several tenants, isolating failures per tenant.

        Args:
            tenant_ids: Tenants to reconcile; discovered from the sources if None

        Returns:
            Per-tenant results plus the tenants whose run failed
        """
        if tenant_ids is None:
            tenant_ids = await self.discover_tenants()

        bulk = BulkReconcileResult()
        for tenant_id in tenant_ids:
            try:
                bulk.results[tenant_id] = await self.reconcile(tenant_id)
            except Exception as e:
                logger.error("reconcile_tenant_failed", tenant_id=tenant_id, error=str(e))
                bulk.failures.append(TenantReconcileFailure(tenant_id=tenant_id, message=str(e)))

        totals = bulk.totals
        logger.info(
            "reconcile_all_complete",
            tenants=len(tenant_ids),
            failed=len(bulk.failures),
            created=totals.created,
            updated=totals.updated,
        )
        return bulk

    async def _reconcile_invoice(
        self, tenant_id: str, invoice: Invoice, result: ReconcileResult
    ) -> None:
        assert invoice.due_date is not None
        existing = await self._reminders.find_by_invoice(tenant_id, invoice.id)

        if existing is None:
            reminder_type = reminder_type_for_invoice(invoice)
            candidate = PaymentReminder(
                tenant_id=tenant_id,
                client_company_id=invoice.client_company_id,
                invoice_id=invoice.id,
                type=reminder_type,
                due_date=invoice.due_date,
                amount=invoice.total_amount,
                currency=invoice.currency,
                description=describe_invoice(invoice, reminder_type),
                reminder_days_before=self._days_before,
            )
            existing = await self._create_or_fetch(candidate)
            if existing is None:
                result.created += 1
                return

        if existing.amount != invoice.total_amount or existing.due_date != invoice.due_date:
            await self._reminders.update_source_fields(
                tenant_id, existing.id, invoice.total_amount, invoice.due_date
            )
            result.updated += 1
            logger.debug(
                "reminder_drift_synced",
                tenant_id=tenant_id,
                reminder_id=existing.id,
                invoice_id=invoice.id,
            )

    async def _reconcile_check_note(
        self, tenant_id: str, note: CheckNote, result: ReconcileResult
    ) -> None:
        existing = await self._reminders.find_by_check_note(tenant_id, note.id)

        if existing is None:
            candidate = PaymentReminder(
                tenant_id=tenant_id,
                client_company_id=note.client_company_id,
                check_note_id=note.id,
                type=reminder_type_for_check_note(note),
                due_date=note.due_date,
                amount=note.amount,
                currency=note.currency,
                description=describe_check_note(note),
                reminder_days_before=self._days_before,
            )
            existing = await self._create_or_fetch(candidate)
            if existing is None:
                result.created += 1
                return

        if not self._sync_check_note_drift:
            return

        if existing.amount != note.amount or existing.due_date != note.due_date:
            await self._reminders.update_source_fields(
                tenant_id, existing.id, note.amount, note.due_date
            )
            result.updated += 1
            logger.debug(
                "reminder_drift_synced",
                tenant_id=tenant_id,
                reminder_id=existing.id,
                check_note_id=note.id,
            )

    async def _create_or_fetch(self, candidate: PaymentReminder) -> PaymentReminder | None:
        """
        Insert a new reminder.

        Returns None when the insert succeeded. When a concurrent run
        inserted the same source link first, returns that row instead so
        the caller can continue with the drift check.
        """
        try:
            await self._reminders.create(candidate)
            return None
        except DuplicateSourceLinkError:
            assert candidate.source_id is not None
            if candidate.invoice_id is not None:
                existing = await self._reminders.find_by_invoice(
                    candidate.tenant_id, candidate.source_id
                )
            else:
                existing = await self._reminders.find_by_check_note(
                    candidate.tenant_id, candidate.source_id
                )
            if existing is None:
                raise
            logger.info(
                "reminder_create_raced",
                tenant_id=candidate.tenant_id,
                source_id=candidate.source_id,
            )
            return existing

"""
Sync Payment Reminders Use Case.

Reconciles the reminder ledger against open invoices and outstanding
checks/notes, for one tenant or for every tenant found in the sources.
"""

from src.config import get_settings, job_context
from src.core.interfaces.storage import (
    ICheckNoteSource,
    IInvoiceSource,
    IPaymentReminderStore,
)
from src.core.services.reminder_reconciler import (
    BulkReconcileResult,
    ReconcileResult,
    ReminderReconciler,
)


class SyncPaymentRemindersUseCase:
    """
    Use case wiring the reconciler to its stores.

    Stores are resolved lazily from the SQLite layer unless injected.
    """

    def __init__(
        self,
        reminder_store: IPaymentReminderStore | None = None,
        invoice_source: IInvoiceSource | None = None,
        check_note_source: ICheckNoteSource | None = None,
    ):
        self._reminder_store = reminder_store
        self._invoice_source = invoice_source
        self._check_note_source = check_note_source

    async def _get_reminder_store(self) -> IPaymentReminderStore:
        if self._reminder_store is None:
            from src.infrastructure.storage.sqlite import get_payment_reminder_store
            self._reminder_store = await get_payment_reminder_store()
        return self._reminder_store

    async def _get_invoice_source(self) -> IInvoiceSource:
        if self._invoice_source is None:
            from src.infrastructure.storage.sqlite import get_invoice_source
            self._invoice_source = await get_invoice_source()
        return self._invoice_source

    async def _get_check_note_source(self) -> ICheckNoteSource:
        if self._check_note_source is None:
            from src.infrastructure.storage.sqlite import get_check_note_source
            self._check_note_source = await get_check_note_source()
        return self._check_note_source

    async def _build_reconciler(self) -> ReminderReconciler:
        settings = get_settings().reminders
        return ReminderReconciler(
            reminder_store=await self._get_reminder_store(),
            invoice_source=await self._get_invoice_source(),
            check_note_source=await self._get_check_note_source(),
            days_before=settings.default_days_before,
            sync_check_note_drift=settings.sync_check_note_drift,
        )

    async def execute(self, tenant_id: str) -> ReconcileResult:
        """
        Reconcile a single tenant.

        Args:
            tenant_id: Tenant to reconcile

        Returns:
            ReconcileResult with created and updated counts
        """
        reconciler = await self._build_reconciler()
        with job_context("reminder_sync", tenant_id=tenant_id):
            return await reconciler.reconcile(tenant_id)

    async def execute_all(self, tenant_ids: list[str] | None = None) -> BulkReconcileResult:
        """
        Reconcile every tenant (or the given ones), one after another.

        A failing tenant is reported in the result and does not stop the
        remaining tenants.
        """
        reconciler = await self._build_reconciler()
        with job_context("reminder_sync_all"):
            return await reconciler.reconcile_all(tenant_ids)

"""Unit tests for ReminderReconciler."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.core.entities import (
    CheckNote,
    CheckNoteDirection,
    CheckNoteKind,
    CheckNoteStatus,
    Invoice,
    InvoiceDirection,
    InvoiceStatus,
    PaymentReminder,
    ReminderType,
)
from src.core.exceptions import DatabaseError, DuplicateSourceLinkError
from src.core.services.reminder_reconciler import (
    ReconcileResult,
    ReminderReconciler,
    describe_check_note,
    describe_invoice,
)


def _make_invoice(
    invoice_id: str = "inv-0000000012345678",
    direction: InvoiceDirection = InvoiceDirection.SALES,
    amount: str = "1000.00",
    due_date: date | None = date(2026, 11, 1),
    counterparty_name: str | None = "Acme Ltd",
) -> Invoice:
    return Invoice(
        id=invoice_id,
        tenant_id="tenant-a",
        client_company_id="client-1",
        direction=direction,
        status=InvoiceStatus.ISSUED,
        total_amount=amount,
        currency="TRY",
        due_date=due_date,
        counterparty_name=counterparty_name,
    )


def _make_note(
    note_id: str = "cn-1",
    kind: CheckNoteKind = CheckNoteKind.CHECK,
    amount: str = "500.00",
    due_date: date = date(2026, 11, 15),
) -> CheckNote:
    return CheckNote(
        id=note_id,
        tenant_id="tenant-a",
        direction=CheckNoteDirection.RECEIVABLE,
        kind=kind,
        status=CheckNoteStatus.IN_PORTFOLIO,
        amount=amount,
        currency="TRY",
        due_date=due_date,
        document_number="CK-0001",
    )


def _existing_for(source: Invoice | CheckNote, **overrides) -> PaymentReminder:
    fields = {
        "id": "rem-1",
        "tenant_id": "tenant-a",
        "type": ReminderType.COLLECTION,
        "due_date": source.due_date,
        "amount": source.total_amount if isinstance(source, Invoice) else source.amount,
        "description": "existing",
    }
    if isinstance(source, Invoice):
        fields["invoice_id"] = source.id
    else:
        fields["check_note_id"] = source.id
        fields["type"] = ReminderType.CHECK_DUE
    fields.update(overrides)
    return PaymentReminder(**fields)


def _make_reconciler(
    invoices: list[Invoice] | None = None,
    notes: list[CheckNote] | None = None,
    sync_check_note_drift: bool = False,
):
    store = AsyncMock()
    store.find_by_invoice = AsyncMock(return_value=None)
    store.find_by_check_note = AsyncMock(return_value=None)
    store.create = AsyncMock(side_effect=lambda r: r)
    store.update_source_fields = AsyncMock(return_value=True)

    invoice_source = AsyncMock()
    invoice_source.list_open_invoices = AsyncMock(return_value=invoices or [])
    invoice_source.list_tenant_ids = AsyncMock(return_value=[])

    note_source = AsyncMock()
    note_source.list_outstanding = AsyncMock(return_value=notes or [])
    note_source.list_tenant_ids = AsyncMock(return_value=[])

    reconciler = ReminderReconciler(
        reminder_store=store,
        invoice_source=invoice_source,
        check_note_source=note_source,
        sync_check_note_drift=sync_check_note_drift,
    )
    return reconciler, store, invoice_source, note_source


class TestInvoiceReconciliation:
    """Invoices mirrored into the ledger."""

    async def test_creates_collection_reminder_for_sales_invoice(self):
        invoice = _make_invoice()
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=1, updated=0)
        created: PaymentReminder = store.create.call_args.args[0]
        assert created.type is ReminderType.COLLECTION
        assert created.invoice_id == invoice.id
        assert created.amount == Decimal("1000.00")
        assert created.due_date == date(2026, 11, 1)
        assert created.reminder_days_before == 3
        assert created.client_company_id == "client-1"
        assert created.description == "Collection: Acme Ltd - 12345678"

    async def test_purchase_invoice_becomes_payment(self):
        invoice = _make_invoice(direction=InvoiceDirection.PURCHASE, counterparty_name=None)
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])

        await reconciler.reconcile("tenant-a")

        created: PaymentReminder = store.create.call_args.args[0]
        assert created.type is ReminderType.PAYMENT
        assert created.description == "Payment: Invoice - 12345678"

    async def test_invoice_without_due_date_skipped(self):
        reconciler, store, _, _ = _make_reconciler(invoices=[_make_invoice(due_date=None)])

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult()
        store.find_by_invoice.assert_not_called()

    async def test_unchanged_invoice_is_noop(self):
        invoice = _make_invoice()
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])
        store.find_by_invoice.return_value = _existing_for(invoice)

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=0, updated=0)
        store.create.assert_not_called()
        store.update_source_fields.assert_not_called()

    async def test_drifted_amount_is_synced(self):
        invoice = _make_invoice(amount="1200.00")
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])
        store.find_by_invoice.return_value = _existing_for(invoice, amount="1000.00")

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=0, updated=1)
        store.update_source_fields.assert_awaited_once_with(
            "tenant-a", "rem-1", Decimal("1200.00"), date(2026, 11, 1)
        )

    async def test_drifted_due_date_is_synced_without_touching_flags(self):
        invoice = _make_invoice(due_date=date(2026, 12, 1))
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])
        store.find_by_invoice.return_value = _existing_for(
            invoice, due_date=date(2026, 11, 1), is_paid=True, reminder_sent=True
        )

        result = await reconciler.reconcile("tenant-a")

        assert result.updated == 1
        store.update.assert_not_called()
        store.mark_paid.assert_not_called()

    async def test_duplicate_on_create_falls_through_to_drift_check(self):
        invoice = _make_invoice(amount="1500.00")
        reconciler, store, _, _ = _make_reconciler(invoices=[invoice])
        store.find_by_invoice.side_effect = [
            None,
            _existing_for(invoice, amount="1000.00"),
        ]
        store.create.side_effect = DuplicateSourceLinkError("tenant-a", "invoice", invoice.id)

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=0, updated=1)

    async def test_store_failure_aborts_run(self):
        reconciler, store, _, _ = _make_reconciler(invoices=[_make_invoice(), _make_invoice("x")])
        store.create.side_effect = DatabaseError("create_reminder", "disk full")

        with pytest.raises(DatabaseError):
            await reconciler.reconcile("tenant-a")

        assert store.create.await_count == 1


class TestCheckNoteReconciliation:
    """Checks and promissory notes mirrored into the ledger."""

    async def test_creates_check_due_reminder(self):
        reconciler, store, _, _ = _make_reconciler(notes=[_make_note()])

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=1, updated=0)
        created: PaymentReminder = store.create.call_args.args[0]
        assert created.type is ReminderType.CHECK_DUE
        assert created.check_note_id == "cn-1"
        assert created.invoice_id is None
        assert created.description == "Check due: CK-0001"

    async def test_promissory_note_becomes_note_due(self):
        reconciler, store, _, _ = _make_reconciler(
            notes=[_make_note(kind=CheckNoteKind.PROMISSORY_NOTE)]
        )

        await reconciler.reconcile("tenant-a")

        created: PaymentReminder = store.create.call_args.args[0]
        assert created.type is ReminderType.NOTE_DUE
        assert created.description == "Promissory note due: CK-0001"

    async def test_drift_not_synced_by_default(self):
        note = _make_note(amount="750.00")
        reconciler, store, _, _ = _make_reconciler(notes=[note])
        store.find_by_check_note.return_value = _existing_for(note, amount="500.00")

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=0, updated=0)
        store.update_source_fields.assert_not_called()

    async def test_drift_synced_when_enabled(self):
        note = _make_note(amount="750.00")
        reconciler, store, _, _ = _make_reconciler(notes=[note], sync_check_note_drift=True)
        store.find_by_check_note.return_value = _existing_for(note, amount="500.00")

        result = await reconciler.reconcile("tenant-a")

        assert result == ReconcileResult(created=0, updated=1)
        store.update_source_fields.assert_awaited_once_with(
            "tenant-a", "rem-1", Decimal("750.00"), date(2026, 11, 15)
        )


class TestReconcileAll:
    """Multi-tenant runs."""

    async def test_discovers_tenants_from_both_sources(self):
        reconciler, _, invoice_source, note_source = _make_reconciler()
        invoice_source.list_tenant_ids.return_value = ["tenant-b", "tenant-a"]
        note_source.list_tenant_ids.return_value = ["tenant-c", "tenant-a"]

        bulk = await reconciler.reconcile_all()

        assert list(bulk.results) == ["tenant-a", "tenant-b", "tenant-c"]
        assert bulk.failures == []

    async def test_failing_tenant_does_not_stop_others(self):
        reconciler, _, invoice_source, _ = _make_reconciler()
        invoice_source.list_open_invoices.side_effect = [
            DatabaseError("list_open_invoices", "locked"),
            [],
        ]

        bulk = await reconciler.reconcile_all(["tenant-a", "tenant-b"])

        assert list(bulk.results) == ["tenant-b"]
        assert [f.tenant_id for f in bulk.failures] == ["tenant-a"]
        assert bulk.totals == ReconcileResult()


class TestDescriptions:
    def test_invoice_description_uses_last_eight_chars(self):
        invoice = _make_invoice(invoice_id="abcdefghijklmnop")
        assert describe_invoice(invoice, ReminderType.COLLECTION) == (
            "Collection: Acme Ltd - ijklmnop"
        )

    def test_check_note_description(self):
        assert describe_check_note(_make_note()) == "Check due: CK-0001"

"""
Read-only SQLite queries over the reconciliation sources.

The invoice and check/note tables belong to other modules; these readers
never write to them.
"""

import aiosqlite

from src.config import get_logger
from src.core.entities.check_note import (
    OUTSTANDING_CHECK_NOTE_STATUSES,
    CheckNote,
    CheckNoteDirection,
    CheckNoteKind,
    CheckNoteStatus,
)
from src.core.entities.invoice import (
    OPEN_INVOICE_STATUSES,
    Invoice,
    InvoiceDirection,
    InvoiceStatus,
)
from src.core.entities.money import from_minor
from src.core.interfaces.storage import ICheckNoteSource, IInvoiceSource
from src.infrastructure.storage.sqlite.connection import get_connection
from src.infrastructure.storage.sqlite.serialization import parse_date

logger = get_logger(__name__)


def _placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


class SQLiteInvoiceSource(IInvoiceSource):
    """Open-invoice reader."""

    async def list_open_invoices(self, tenant_id: str) -> list[Invoice]:
        """Invoices in an open status that carry a due date."""
        statuses = [s.value for s in OPEN_INVOICE_STATUSES]
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT id, tenant_id, client_company_id, direction, status,
                       total_amount_minor, currency, due_date, counterparty_name
                FROM invoices
                WHERE tenant_id = ?
                  AND status IN ({_placeholders(len(statuses))})
                  AND due_date IS NOT NULL
                ORDER BY due_date ASC, id ASC
                """,
                (tenant_id, *statuses),
            )
            rows = await cursor.fetchall()

        invoices = [self._row_to_entity(row) for row in rows]
        logger.debug("open_invoices_read", tenant_id=tenant_id, count=len(invoices))
        return invoices

    async def list_tenant_ids(self) -> list[str]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT DISTINCT tenant_id FROM invoices ORDER BY tenant_id"
            )
            return [row[0] for row in await cursor.fetchall()]

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> Invoice:
        return Invoice(
            id=row["id"],
            tenant_id=row["tenant_id"],
            client_company_id=row["client_company_id"],
            direction=InvoiceDirection(row["direction"]),
            status=InvoiceStatus(row["status"]),
            total_amount=from_minor(row["total_amount_minor"]),
            currency=row["currency"],
            due_date=parse_date(row["due_date"]) if row["due_date"] else None,
            counterparty_name=row["counterparty_name"],
        )


class SQLiteCheckNoteSource(ICheckNoteSource):
    """Outstanding check/note reader."""

    async def list_outstanding(self, tenant_id: str) -> list[CheckNote]:
        """Instruments held in portfolio or submitted for collection."""
        statuses = [s.value for s in OUTSTANDING_CHECK_NOTE_STATUSES]
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT id, tenant_id, client_company_id, direction, kind, status,
                       amount_minor, currency, due_date, document_number
                FROM check_notes
                WHERE tenant_id = ?
                  AND status IN ({_placeholders(len(statuses))})
                ORDER BY due_date ASC, id ASC
                """,
                (tenant_id, *statuses),
            )
            rows = await cursor.fetchall()

        notes = [self._row_to_entity(row) for row in rows]
        logger.debug("outstanding_check_notes_read", tenant_id=tenant_id, count=len(notes))
        return notes

    async def list_tenant_ids(self) -> list[str]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT DISTINCT tenant_id FROM check_notes ORDER BY tenant_id"
            )
            return [row[0] for row in await cursor.fetchall()]

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> CheckNote:
        return CheckNote(
            id=row["id"],
            tenant_id=row["tenant_id"],
            client_company_id=row["client_company_id"],
            direction=CheckNoteDirection(row["direction"]),
            kind=CheckNoteKind(row["kind"]),
            status=CheckNoteStatus(row["status"]),
            amount=from_minor(row["amount_minor"]),
            currency=row["currency"],
            due_date=parse_date(row["due_date"]),
            document_number=row["document_number"],
        )

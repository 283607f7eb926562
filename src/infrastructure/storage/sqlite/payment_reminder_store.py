"""
SQLite implementation of the payment reminder ledger.

Handles CRUD, source-link lookups, filtered listing and aggregation, and the
conditional flag updates used by mark-paid and the notification scheduler.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

import aiosqlite

from src.config import get_logger
from src.core.entities.money import from_minor, to_minor
from src.core.entities.payment_reminder import (
    PaymentReminder,
    ReminderAggregate,
    ReminderFilter,
    ReminderType,
    SourceType,
    utcnow,
)
from src.core.exceptions import DatabaseError, DuplicateSourceLinkError
from src.core.interfaces.storage import IPaymentReminderStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import (
    format_timestamp,
    parse_date,
    parse_timestamp,
)

logger = get_logger(__name__)


def _build_where(
    tenant_id: str, filters: ReminderFilter | None
) -> tuple[str, list[Any]]:
    """Translate a ReminderFilter into a WHERE clause and parameters."""
    clauses = ["tenant_id = ?"]
    params: list[Any] = [tenant_id]

    if filters is not None:
        if filters.type is not None:
            clauses.append("type = ?")
            params.append(filters.type.value)
        if filters.is_paid is not None:
            clauses.append("is_paid = ?")
            params.append(1 if filters.is_paid else 0)
        if filters.due_from is not None:
            clauses.append("due_date >= ?")
            params.append(filters.due_from.isoformat())
        if filters.due_to is not None:
            clauses.append("due_date <= ?")
            params.append(filters.due_to.isoformat())
        if filters.due_before is not None:
            clauses.append("due_date < ?")
            params.append(filters.due_before.isoformat())

    return " AND ".join(clauses), params


class SQLitePaymentReminderStore(IPaymentReminderStore):
    """SQLite implementation of the reminder ledger."""

    async def create(self, reminder: PaymentReminder) -> PaymentReminder:
        """Create a new reminder."""
        now = utcnow()
        reminder.created_at = now
        reminder.updated_at = now
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO payment_reminders (
                        id, tenant_id, client_company_id, invoice_id, check_note_id,
                        type, due_date, amount_minor, currency, description,
                        reminder_days_before, is_paid, paid_at,
                        reminder_sent, reminder_sent_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        reminder.id,
                        reminder.tenant_id,
                        reminder.client_company_id,
                        reminder.invoice_id,
                        reminder.check_note_id,
                        reminder.type.value,
                        reminder.due_date.isoformat(),
                        to_minor(reminder.amount),
                        reminder.currency,
                        reminder.description,
                        reminder.reminder_days_before,
                        1 if reminder.is_paid else 0,
                        format_timestamp(reminder.paid_at),
                        1 if reminder.reminder_sent else 0,
                        format_timestamp(reminder.reminder_sent_at),
                        format_timestamp(reminder.created_at),
                        format_timestamp(reminder.updated_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if reminder.source_type is not None:
                raise DuplicateSourceLinkError(
                    tenant_id=reminder.tenant_id,
                    source_type=reminder.source_type.value,
                    source_id=reminder.source_id or "",
                ) from e
            raise DatabaseError("create_reminder", str(e)) from e

        logger.info(
            "reminder_created",
            reminder_id=reminder.id,
            tenant_id=reminder.tenant_id,
            type=reminder.type.value,
        )
        return reminder

    async def get(self, tenant_id: str, reminder_id: str) -> PaymentReminder | None:
        """Get reminder by ID within a tenant."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM payment_reminders WHERE id = ? AND tenant_id = ?",
                (reminder_id, tenant_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_entity(row)

    async def find_by_invoice(
        self, tenant_id: str, invoice_id: str
    ) -> PaymentReminder | None:
        """Find the reminder mirroring an invoice."""
        return await self._find_by_source(SourceType.INVOICE, tenant_id, invoice_id)

    async def find_by_check_note(
        self, tenant_id: str, check_note_id: str
    ) -> PaymentReminder | None:
        """Find the reminder mirroring a check/note."""
        return await self._find_by_source(SourceType.CHECK_NOTE, tenant_id, check_note_id)

    async def _find_by_source(
        self, source_type: SourceType, tenant_id: str, source_id: str
    ) -> PaymentReminder | None:
        column = "invoice_id" if source_type is SourceType.INVOICE else "check_note_id"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM payment_reminders WHERE tenant_id = ? AND {column} = ?",
                (tenant_id, source_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_entity(row)

    async def update(self, reminder: PaymentReminder) -> PaymentReminder:
        """Update the editable fields of an existing reminder."""
        reminder.updated_at = utcnow()
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE payment_reminders SET
                    client_company_id = ?, type = ?, due_date = ?,
                    amount_minor = ?, currency = ?, description = ?,
                    reminder_days_before = ?, updated_at = ?
                WHERE id = ? AND tenant_id = ?
                """,
                (
                    reminder.client_company_id,
                    reminder.type.value,
                    reminder.due_date.isoformat(),
                    to_minor(reminder.amount),
                    reminder.currency,
                    reminder.description,
                    reminder.reminder_days_before,
                    format_timestamp(reminder.updated_at),
                    reminder.id,
                    reminder.tenant_id,
                ),
            )
        logger.info("reminder_updated", reminder_id=reminder.id, tenant_id=reminder.tenant_id)
        return reminder

    async def update_source_fields(
        self,
        tenant_id: str,
        reminder_id: str,
        amount: Decimal,
        due_date: date,
    ) -> bool:
        """Overwrite only amount and due date."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE payment_reminders SET
                    amount_minor = ?, due_date = ?, updated_at = ?
                WHERE id = ? AND tenant_id = ?
                """,
                (
                    to_minor(amount),
                    due_date.isoformat(),
                    format_timestamp(utcnow()),
                    reminder_id,
                    tenant_id,
                ),
            )
            return cursor.rowcount > 0

    async def delete(self, tenant_id: str, reminder_id: str) -> bool:
        """Delete a reminder by ID."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM payment_reminders WHERE id = ? AND tenant_id = ?",
                (reminder_id, tenant_id),
            )
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("reminder_deleted", reminder_id=reminder_id, tenant_id=tenant_id)
            return deleted

    async def mark_paid(
        self, tenant_id: str, reminder_id: str, paid_at: datetime
    ) -> bool:
        """Set is_paid unless it is already set."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE payment_reminders SET
                    is_paid = 1, paid_at = ?, updated_at = ?
                WHERE id = ? AND tenant_id = ? AND is_paid = 0
                """,
                (
                    format_timestamp(paid_at),
                    format_timestamp(paid_at),
                    reminder_id,
                    tenant_id,
                ),
            )
            return cursor.rowcount > 0

    async def list_reminders(
        self,
        tenant_id: str,
        filters: ReminderFilter | None = None,
        limit: int | None = 20,
        offset: int = 0,
    ) -> list[PaymentReminder]:
        """List reminders ordered by due date; a None limit returns every match."""
        where, params = _build_where(tenant_id, filters)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM payment_reminders
                WHERE {where}
                ORDER BY due_date ASC, created_at ASC, id ASC
                LIMIT ? OFFSET ?
                """,
                (*params, -1 if limit is None else limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(row) for row in rows]

    async def count(self, tenant_id: str, filters: ReminderFilter | None = None) -> int:
        """Count reminders matching the filter."""
        where, params = _build_where(tenant_id, filters)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM payment_reminders WHERE {where}",
                params,
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    async def aggregate(
        self, tenant_id: str, filters: ReminderFilter | None = None
    ) -> ReminderAggregate:
        """Count and sum amounts in SQL without loading rows."""
        where, params = _build_where(tenant_id, filters)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT COUNT(*) AS n, COALESCE(SUM(amount_minor), 0) AS total
                FROM payment_reminders
                WHERE {where}
                """,
                params,
            )
            row = await cursor.fetchone()
            if row is None:
                return ReminderAggregate()
            return ReminderAggregate(count=int(row["n"]), amount=from_minor(int(row["total"])))

    async def list_pending_notifications(self) -> list[PaymentReminder]:
        """All unsent, unpaid reminders across tenants."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM payment_reminders
                WHERE reminder_sent = 0 AND is_paid = 0
                ORDER BY due_date ASC, id ASC
                """
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(row) for row in rows]

    async def claim_for_notification(
        self, reminder_id: str, now: datetime, lease_until: datetime
    ) -> bool:
        """Take a lease on an unsent reminder."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE payment_reminders SET claimed_until = ?
                WHERE id = ?
                  AND reminder_sent = 0
                  AND is_paid = 0
                  AND (claimed_until IS NULL OR claimed_until <= ?)
                """,
                (format_timestamp(lease_until), reminder_id, format_timestamp(now)),
            )
            return cursor.rowcount > 0

    async def release_claim(self, reminder_id: str) -> None:
        """Drop a lease."""
        async with get_transaction() as conn:
            await conn.execute(
                "UPDATE payment_reminders SET claimed_until = NULL WHERE id = ?",
                (reminder_id,),
            )

    async def mark_sent(self, reminder_id: str, sent_at: datetime) -> bool:
        """Set reminder_sent unless it is already set."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE payment_reminders SET
                    reminder_sent = 1, reminder_sent_at = ?,
                    claimed_until = NULL, updated_at = ?
                WHERE id = ? AND reminder_sent = 0
                """,
                (format_timestamp(sent_at), format_timestamp(sent_at), reminder_id),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> PaymentReminder:
        """Convert a database row to a PaymentReminder entity."""
        return PaymentReminder(
            id=row["id"],
            tenant_id=row["tenant_id"],
            client_company_id=row["client_company_id"],
            invoice_id=row["invoice_id"],
            check_note_id=row["check_note_id"],
            type=ReminderType(row["type"]),
            due_date=parse_date(row["due_date"]),
            amount=from_minor(row["amount_minor"]),
            currency=row["currency"],
            description=row["description"] or "",
            reminder_days_before=row["reminder_days_before"],
            is_paid=bool(row["is_paid"]),
            paid_at=parse_timestamp(row["paid_at"]),
            reminder_sent=bool(row["reminder_sent"]),
            reminder_sent_at=parse_timestamp(row["reminder_sent_at"]),
            created_at=parse_timestamp(row["created_at"]) or utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or utcnow(),
        )

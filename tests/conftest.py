"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from datetime import date
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import aiosqlite
import pytest

from src.application.services import reset_services
from src.config import Settings, get_settings, reset_settings
from src.core.entities.money import to_minor
from src.infrastructure.notifications import reset_notification_sink
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations import initialize_database

InsertInvoice = Callable[..., Awaitable[str]]
InsertCheckNote = Callable[..., Awaitable[str]]


@pytest.fixture
def app_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Settings, None, None]:
    """Settings pointing at a temporary data directory."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("NOTIFY_BACKEND", "database")
    monkeypatch.setenv("NOTIFY_LOCALE", "tr_TR")
    reset_settings()
    reset_notification_sink()
    reset_services()
    yield get_settings()
    reset_settings()
    reset_notification_sink()
    reset_services()


@pytest.fixture
async def migrated_db(app_settings: Settings) -> AsyncGenerator[Path, None]:
    """Fresh SQLite database with all migrations applied."""
    await close_pool()
    results = await initialize_database(create_backup_before=False)
    assert results and all(r.success for r in results)
    yield app_settings.storage.db_path
    await close_pool()


@pytest.fixture
def insert_invoice(migrated_db: Path) -> InsertInvoice:
    """Write an invoice row the way the invoicing module would."""

    async def _insert(
        tenant_id: str = "tenant-a",
        *,
        invoice_id: str | None = None,
        direction: str = "SALES",
        status: str = "ISSUED",
        total_amount: Decimal | str = "1000.00",
        currency: str = "TRY",
        due_date: date | None = date(2026, 11, 1),
        counterparty_name: str | None = "Acme Ltd",
        client_company_id: str | None = "client-1",
    ) -> str:
        invoice_id = invoice_id or uuid4().hex
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                """
                INSERT INTO invoices (
                    id, tenant_id, client_company_id, direction, status,
                    total_amount_minor, currency, due_date, counterparty_name
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice_id,
                    tenant_id,
                    client_company_id,
                    direction,
                    status,
                    to_minor(total_amount),
                    currency,
                    due_date.isoformat() if due_date else None,
                    counterparty_name,
                ),
            )
            await conn.commit()
        return invoice_id

    return _insert


@pytest.fixture
def insert_check_note(migrated_db: Path) -> InsertCheckNote:
    """Write a check/note row the way the portfolio module would."""

    async def _insert(
        tenant_id: str = "tenant-a",
        *,
        check_note_id: str | None = None,
        kind: str = "CHECK",
        direction: str = "RECEIVABLE",
        status: str = "IN_PORTFOLIO",
        amount: Decimal | str = "500.00",
        currency: str = "TRY",
        due_date: date = date(2026, 11, 15),
        document_number: str = "CK-0001",
    ) -> str:
        check_note_id = check_note_id or uuid4().hex
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                """
                INSERT INTO check_notes (
                    id, tenant_id, direction, kind, status,
                    amount_minor, currency, due_date, document_number
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    check_note_id,
                    tenant_id,
                    direction,
                    kind,
                    status,
                    to_minor(amount),
                    currency,
                    due_date.isoformat(),
                    document_number,
                ),
            )
            await conn.commit()
        return check_note_id

    return _insert


@pytest.fixture
def update_source_row(migrated_db: Path) -> Callable[..., Awaitable[None]]:
    """Mutate a source row in place (simulates edits by the owning module)."""

    async def _update(table: str, row_id: str, **columns: object) -> None:
        assert table in ("invoices", "check_notes")
        assignments = ", ".join(f"{name} = ?" for name in columns)
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*columns.values(), row_id),
            )
            await conn.commit()

    return _update

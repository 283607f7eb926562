"""
Integration test for the reminder lifecycle.

Runs sync, process, stats and mark-paid through the API against a real
migrated SQLite database.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import app
from src.config import reset_settings
from src.infrastructure.storage.sqlite import get_notification_store

TENANT = {"X-Tenant-ID": "tenant-a"}


@pytest.fixture
async def client(migrated_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _reminder_rows(db_path: Path, tenant_id: str = "tenant-a") -> list[tuple]:
    """Raw ledger rows, so comparisons cover every column."""
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute(
            "SELECT * FROM payment_reminders WHERE tenant_id = ? ORDER BY id", (tenant_id,)
        )
        return [tuple(row) for row in await cursor.fetchall()]


class TestReminderFlow:
    """End-to-end reminder lifecycle."""

    async def test_sync_process_and_pay(
        self, client: AsyncClient, insert_invoice, insert_check_note, update_source_row
    ):
        today = datetime.now(UTC).date()
        invoice_id = await insert_invoice(
            "tenant-a", total_amount="1000.00", due_date=today + timedelta(days=2)
        )
        await insert_invoice("tenant-a", status="PAID", due_date=today + timedelta(days=1))
        await insert_invoice("tenant-b", due_date=today + timedelta(days=1))
        await insert_check_note("tenant-a", due_date=today + timedelta(days=20))

        # First sync creates one reminder per open source record
        response = await client.post("/api/payment-reminders/sync", headers=TENANT)
        assert response.status_code == 200
        assert response.json() == {"tenant_id": "tenant-a", "created": 2, "updated": 0}

        # Re-running is a no-op
        response = await client.post("/api/payment-reminders/sync", headers=TENANT)
        assert response.json() == {"tenant_id": "tenant-a", "created": 0, "updated": 0}

        # Source drift is picked up
        await update_source_row("invoices", invoice_id, total_amount_minor=120000)
        response = await client.post("/api/payment-reminders/sync", headers=TENANT)
        assert response.json() == {"tenant_id": "tenant-a", "created": 0, "updated": 1}

        # Only the invoice reminder has reached its fire date
        response = await client.post("/api/payment-reminders/process")
        assert response.status_code == 200
        assert response.json() == {"sent": 1, "skipped": 1, "errors": []}

        response = await client.post("/api/payment-reminders/process")
        assert response.json()["sent"] == 0

        store = await get_notification_store()
        notifications = await store.list_for_tenant("tenant-a")
        assert len(notifications) == 1
        assert notifications[0].type.value == "PAYMENT_REMINDER"
        assert notifications[0].title.startswith("Payment reminder: Collection: Acme Ltd")
        assert await store.list_for_tenant("tenant-b") == []

        response = await client.get("/api/payment-reminders/stats", headers=TENANT)
        assert response.json() == {
            "upcoming_count": 1,
            "upcoming_amount": 1200.0,
            "overdue_count": 0,
            "overdue_amount": 0.0,
        }

        response = await client.get(
            "/api/payment-reminders", params={"type": "COLLECTION"}, headers=TENANT
        )
        reminders = response.json()["reminders"]
        assert len(reminders) == 1
        reminder = reminders[0]
        assert reminder["invoice_id"] == invoice_id
        assert reminder["reminder_sent"] is True

        response = await client.patch(
            f"/api/payment-reminders/{reminder['id']}/paid", headers=TENANT
        )
        assert response.status_code == 200
        assert response.json()["is_paid"] is True

        response = await client.patch(
            f"/api/payment-reminders/{reminder['id']}/paid", headers=TENANT
        )
        assert response.status_code == 400

        # Another tenant cannot see the reminder
        response = await client.get(
            f"/api/payment-reminders/{reminder['id']}", headers={"X-Tenant-ID": "tenant-b"}
        )
        assert response.status_code == 404

    async def test_manual_reminder_crud(self, client: AsyncClient):
        today = datetime.now(UTC).date()

        response = await client.post(
            "/api/payment-reminders",
            json={
                "type": "PAYMENT",
                "due_date": (today - timedelta(days=3)).isoformat(),
                "amount": "75.40",
                "description": "Office cleaning",
            },
            headers=TENANT,
        )
        assert response.status_code == 201
        reminder_id = response.json()["id"]

        response = await client.get("/api/payment-reminders/overdue", headers=TENANT)
        assert [r["id"] for r in response.json()["reminders"]] == [reminder_id]
        assert response.json()["reminders"][0]["is_overdue"] is True

        response = await client.put(
            f"/api/payment-reminders/{reminder_id}",
            json={"due_date": (today + timedelta(days=10)).isoformat()},
            headers=TENANT,
        )
        assert response.status_code == 200

        response = await client.get("/api/payment-reminders/overdue", headers=TENANT)
        assert response.json()["total"] == 0

        response = await client.delete(f"/api/payment-reminders/{reminder_id}", headers=TENANT)
        assert response.status_code == 204

        response = await client.get(f"/api/payment-reminders/{reminder_id}", headers=TENANT)
        assert response.status_code == 404


class TestReconcileStability:
    """Re-running sync against unchanged or settled sources."""

    async def test_repeated_sync_leaves_rows_identical(
        self, client: AsyncClient, migrated_db, insert_invoice, insert_check_note
    ):
        today = datetime.now(UTC).date()
        await insert_invoice("tenant-a", due_date=today + timedelta(days=5))
        await insert_invoice("tenant-a", direction="PURCHASE", due_date=today + timedelta(days=9))
        await insert_check_note("tenant-a", due_date=today + timedelta(days=30))

        response = await client.post("/api/payment-reminders/sync", headers=TENANT)
        assert response.json()["created"] == 3
        before = await _reminder_rows(migrated_db)

        response = await client.post("/api/payment-reminders/sync", headers=TENANT)
        assert response.json() == {"tenant_id": "tenant-a", "created": 0, "updated": 0}
        assert await _reminder_rows(migrated_db) == before

    async def test_paid_invoice_keeps_its_reminder_as_is(
        self, client: AsyncClient, migrated_db, insert_invoice, update_source_row
    ):
        today = datetime.now(UTC).date()
        invoice_id = await insert_invoice(
            "tenant-a", total_amount="1000.00", due_date=today + timedelta(days=5)
        )
        await client.post("/api/payment-reminders/sync", headers=TENANT)
        before = await _reminder_rows(migrated_db)
        assert len(before) == 1

        await update_source_row(
            "invoices",
            invoice_id,
            status="PAID",
            total_amount_minor=250000,
            due_date=(today + timedelta(days=40)).isoformat(),
        )
        response = await client.post("/api/payment-reminders/sync", headers=TENANT)

        assert response.json() == {"tenant_id": "tenant-a", "created": 0, "updated": 0}
        assert await _reminder_rows(migrated_db) == before

        response = await client.get("/api/payment-reminders", headers=TENANT)
        reminder = response.json()["reminders"][0]
        assert reminder["amount"] == 1000.0
        assert reminder["due_date"] == (today + timedelta(days=5)).isoformat()

    async def test_collected_check_keeps_its_reminder_with_drift_sync_on(
        self,
        client: AsyncClient,
        migrated_db,
        insert_check_note,
        update_source_row,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("REMINDERS_SYNC_CHECK_NOTE_DRIFT", "true")
        reset_settings()
        today = datetime.now(UTC).date()
        check_note_id = await insert_check_note("tenant-a", due_date=today + timedelta(days=12))
        await client.post("/api/payment-reminders/sync", headers=TENANT)
        before = await _reminder_rows(migrated_db)

        await update_source_row(
            "check_notes", check_note_id, status="COLLECTED", amount_minor=99900
        )
        response = await client.post("/api/payment-reminders/sync", headers=TENANT)

        assert response.json()["updated"] == 0
        assert await _reminder_rows(migrated_db) == before

    async def test_second_payment_keeps_first_paid_at(self, client: AsyncClient):
        response = await client.post(
            "/api/payment-reminders",
            json={
                "type": "PAYMENT",
                "due_date": datetime.now(UTC).date().isoformat(),
                "amount": "310.00",
                "description": "Electricity bill",
            },
            headers=TENANT,
        )
        reminder_id = response.json()["id"]

        response = await client.patch(f"/api/payment-reminders/{reminder_id}/paid", headers=TENANT)
        paid_at = response.json()["paid_at"]
        assert paid_at is not None

        response = await client.patch(f"/api/payment-reminders/{reminder_id}/paid", headers=TENANT)
        assert response.status_code == 400
        assert response.json()["error_code"] == "REMINDER_ALREADY_PAID"

        response = await client.get(f"/api/payment-reminders/{reminder_id}", headers=TENANT)
        assert response.json()["paid_at"] == paid_at
        assert response.json()["is_paid"] is True

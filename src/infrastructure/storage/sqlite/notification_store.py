"""
SQLite notification inbox.

Writes tenant-scoped notifications that the UI's notification bell reads.
A repeated write with the same idempotency key returns the stored row
instead of inserting a second one.
"""

import aiosqlite

from src.config import get_logger
from src.core.entities.notification import Notification, NotificationType
from src.core.entities.payment_reminder import utcnow
from src.core.interfaces.notification import INotificationSink
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.serialization import (
    dump_json,
    format_timestamp,
    load_json,
    parse_timestamp,
)

logger = get_logger(__name__)


class SQLiteNotificationStore(INotificationSink):
    """Notification sink backed by the notifications table."""

    async def send(self, notification: Notification) -> Notification:
        """Insert a notification, de-duplicating on idempotency key."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT OR IGNORE INTO notifications (
                    id, tenant_id, user_id, type, title, message,
                    meta_json, idempotency_key, is_read, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    notification.id,
                    notification.tenant_id,
                    notification.user_id,
                    notification.type.value,
                    notification.title,
                    notification.message,
                    dump_json(notification.meta),
                    notification.idempotency_key,
                    1 if notification.is_read else 0,
                    format_timestamp(notification.created_at),
                ),
            )
            inserted = cursor.rowcount > 0

            if not inserted and notification.idempotency_key is not None:
                cursor = await conn.execute(
                    """
                    SELECT * FROM notifications
                    WHERE tenant_id = ? AND type = ? AND idempotency_key = ?
                    """,
                    (
                        notification.tenant_id,
                        notification.type.value,
                        notification.idempotency_key,
                    ),
                )
                row = await cursor.fetchone()
                if row is not None:
                    logger.info(
                        "notification_deduplicated",
                        tenant_id=notification.tenant_id,
                        idempotency_key=notification.idempotency_key,
                    )
                    return self._row_to_entity(row)

        logger.info(
            "notification_created",
            notification_id=notification.id,
            tenant_id=notification.tenant_id,
            type=notification.type.value,
        )
        return notification

    async def list_for_tenant(
        self, tenant_id: str, limit: int = 50, offset: int = 0
    ) -> list[Notification]:
        """List a tenant's notifications, newest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM notifications
                WHERE tenant_id = ?
                ORDER BY created_at DESC
                LIMIT ? OFFSET ?
                """,
                (tenant_id, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(row) for row in rows]

    @staticmethod
    def _row_to_entity(row: aiosqlite.Row) -> Notification:
        return Notification(
            id=row["id"],
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            type=NotificationType(row["type"]),
            title=row["title"],
            message=row["message"],
            meta=load_json(row["meta_json"]),
            idempotency_key=row["idempotency_key"],
            is_read=bool(row["is_read"]),
            created_at=parse_timestamp(row["created_at"]) or utcnow(),
        )

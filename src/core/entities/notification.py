"""Notification entity written to the notification sink."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from src.core.entities.payment_reminder import utcnow


class NotificationType(str, Enum):
    """Notification categories emitted by this service."""

    PAYMENT_REMINDER = "PAYMENT_REMINDER"


class Notification(BaseModel):
    """
    Tenant-scoped notification.

    ``user_id`` of None addresses every user of the tenant. ``idempotency_key``
    lets a sink drop repeated deliveries of the same logical notification.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    tenant_id: str
    user_id: str | None = None
    type: NotificationType = NotificationType.PAYMENT_REMINDER
    title: str
    message: str
    meta: dict[str, Any] = Field(default_factory=dict)
    idempotency_key: str | None = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)

"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.notification_scheduler import (
    NotificationScheduler,
    ProcessResult,
    ReminderProcessingError,
)
from src.core.services.payment_reminder_service import (
    DashboardStats,
    ListRemindersQuery,
    PaymentReminderService,
    ReminderCreate,
    ReminderPage,
    ReminderUpdate,
)
from src.core.services.reminder_messages import ReminderMessageFormatter
from src.core.services.reminder_reconciler import (
    BulkReconcileResult,
    ReconcileResult,
    ReminderReconciler,
    TenantReconcileFailure,
)

__all__ = [
    # Reconciliation
    "ReminderReconciler",
    "ReconcileResult",
    "BulkReconcileResult",
    "TenantReconcileFailure",
    # Scheduler
    "NotificationScheduler",
    "ProcessResult",
    "ReminderProcessingError",
    "ReminderMessageFormatter",
    # Queries and lifecycle
    "PaymentReminderService",
    "ListRemindersQuery",
    "ReminderPage",
    "DashboardStats",
    "ReminderCreate",
    "ReminderUpdate",
]

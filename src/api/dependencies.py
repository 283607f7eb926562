"""
Dependency injection container for FastAPI.

Provides service instances and the caller's tenant to route handlers.
"""

from fastapi import Header

from src.application.services import get_payment_reminder_service
from src.application.use_cases import (
    ProcessPaymentRemindersUseCase,
    SyncPaymentRemindersUseCase,
)
from src.core.exceptions import TenantRequiredError
from src.core.services import PaymentReminderService


async def get_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID"),
) -> str:
    """Tenant of the caller, taken from the X-Tenant-ID header."""
    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise TenantRequiredError()
    return tenant_id


# Service dependencies
async def get_reminder_service() -> PaymentReminderService:
    """Get payment reminder query/lifecycle service."""
    return await get_payment_reminder_service()


# Use case dependencies
def get_sync_use_case() -> SyncPaymentRemindersUseCase:
    """Get reminder reconciliation use case."""
    return SyncPaymentRemindersUseCase()


def get_process_use_case() -> ProcessPaymentRemindersUseCase:
    """Get notification scheduler use case."""
    return ProcessPaymentRemindersUseCase()

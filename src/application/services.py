"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. API dependencies import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.services import PaymentReminderService

if TYPE_CHECKING:
    from src.core.interfaces import IPaymentReminderStore


# Singleton service instances
_payment_reminder_service: PaymentReminderService | None = None


async def get_payment_reminder_service(
    reminder_store: "IPaymentReminderStore | None" = None,
) -> PaymentReminderService:
    """
    Get or create PaymentReminderService instance.

    Async because the store is resolved from the async SQLite layer.

    Args:
        reminder_store: Optional reminder store override

    Returns:
        Configured PaymentReminderService
    """
    global _payment_reminder_service

    if _payment_reminder_service is not None and reminder_store is None:
        return _payment_reminder_service

    # Lazy import infrastructure
    from src.infrastructure.storage.sqlite import get_payment_reminder_store

    store = reminder_store or await get_payment_reminder_store()
    settings = get_settings().reminders

    service = PaymentReminderService(
        reminder_store=store,
        upcoming_window_days=settings.upcoming_window_days,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )

    if reminder_store is None:
        _payment_reminder_service = service

    return service


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _payment_reminder_service
    _payment_reminder_service = None


__all__ = [
    "get_payment_reminder_service",
    "reset_services",
]

"""API route modules."""

from src.api.routes.health import router as health_router
from src.api.routes.payment_reminders import router as payment_reminders_router

__all__ = [
    "health_router",
    "payment_reminders_router",
]

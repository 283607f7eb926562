"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection
"""

from src.application.dto.requests import (
    CreateReminderRequest,
    UpdateReminderRequest,
)
from src.application.dto.responses import (
    DashboardStatsResponse,
    ErrorResponse,
    HealthResponse,
    ProcessResponse,
    ReminderListResponse,
    ReminderResponse,
    SyncResponse,
)
from src.application.services import (
    get_payment_reminder_service,
    reset_services,
)
from src.application.use_cases import (
    ProcessPaymentRemindersUseCase,
    SyncPaymentRemindersUseCase,
)

__all__ = [
    # Request DTOs
    "CreateReminderRequest",
    "UpdateReminderRequest",
    # Response DTOs
    "ReminderResponse",
    "ReminderListResponse",
    "DashboardStatsResponse",
    "SyncResponse",
    "ProcessResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "SyncPaymentRemindersUseCase",
    "ProcessPaymentRemindersUseCase",
    # Service factories
    "get_payment_reminder_service",
    "reset_services",
]

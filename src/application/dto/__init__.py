"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    CreateReminderRequest,
    UpdateReminderRequest,
)
from src.application.dto.responses import (
    ComponentHealthResponse,
    DashboardStatsResponse,
    ErrorResponse,
    HealthResponse,
    ProcessingErrorResponse,
    ProcessResponse,
    ReminderCollectionResponse,
    ReminderListResponse,
    ReminderResponse,
    SyncResponse,
)

__all__ = [
    # Requests
    "CreateReminderRequest",
    "UpdateReminderRequest",
    # Responses
    "ReminderResponse",
    "ReminderListResponse",
    "ReminderCollectionResponse",
    "DashboardStatsResponse",
    "SyncResponse",
    "ProcessResponse",
    "ProcessingErrorResponse",
    "HealthResponse",
    "ComponentHealthResponse",
    "ErrorResponse",
]

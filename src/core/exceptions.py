"""
Domain exceptions for the payment reminder engine.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class ReminderEngineError(Exception):
    """Base exception for all reminder engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(ReminderEngineError):
    """Base exception for storage operations."""

    pass


class ReminderNotFoundError(StorageError):
    """Reminder not found in the caller's tenant."""

    def __init__(self, reminder_id: str, tenant_id: str | None = None):
        super().__init__(
            f"Reminder not found: {reminder_id}",
            code="REMINDER_NOT_FOUND",
            details={"reminder_id": reminder_id, "tenant_id": tenant_id},
        )


class DuplicateSourceLinkError(StorageError):
    """A reminder for the same source record already exists in the tenant."""

    def __init__(self, tenant_id: str, source_type: str, source_id: str):
        super().__init__(
            f"Reminder already exists for {source_type} {source_id}",
            code="DUPLICATE_SOURCE_LINK",
            details={
                "tenant_id": tenant_id,
                "source_type": source_type,
                "source_id": source_id,
            },
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Notification Exceptions
class NotificationError(ReminderEngineError):
    """Base exception for notification operations."""

    pass


class NotificationDeliveryError(NotificationError):
    """The notification sink rejected or failed to accept a notification."""

    def __init__(self, sink: str, reason: str, status_code: int | None = None):
        super().__init__(
            f"Notification delivery via {sink} failed: {reason}",
            code="NOTIFICATION_DELIVERY_FAILED",
            details={"sink": sink, "reason": reason, "status_code": status_code},
        )


# Validation Exceptions
class ValidationError(ReminderEngineError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ReminderAlreadyPaidError(ValidationError):
    """Reminder has already been marked as paid."""

    def __init__(self, reminder_id: str):
        super().__init__(
            field="is_paid",
            message=f"Reminder {reminder_id} is already marked as paid",
        )
        self.code = "REMINDER_ALREADY_PAID"
        self.details["reminder_id"] = reminder_id


class TenantRequiredError(ValidationError):
    """Request carried no tenant identifier."""

    def __init__(self, header: str = "X-Tenant-ID"):
        super().__init__(field=header, message="header is required")
        self.code = "TENANT_REQUIRED"


class ConfigurationError(ReminderEngineError):
    """Configuration error."""

    pass

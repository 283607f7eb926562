"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class ReminderResponse(BaseModel):
    """Payment reminder response DTO."""

    id: str = Field(..., description="Reminder ID")
    client_company_id: str | None = Field(default=None, description="Client company ID")
    invoice_id: str | None = Field(default=None, description="Linked invoice ID")
    check_note_id: str | None = Field(default=None, description="Linked check/note ID")
    type: str = Field(..., description="Reminder category")
    due_date: date = Field(..., description="Due date")
    amount: float = Field(..., description="Amount due")
    currency: str = Field(..., description="Currency code")
    description: str = Field(..., description="Reminder description")
    reminder_days_before: int = Field(..., description="Notification offset in days")
    is_automated: bool = Field(..., description="True when linked to a source record")
    is_paid: bool = False
    paid_at: datetime | None = None
    is_overdue: bool = False
    reminder_sent: bool = False
    reminder_sent_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReminderListResponse(BaseModel):
    """Paginated reminder list."""

    reminders: list[ReminderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ReminderCollectionResponse(BaseModel):
    """Unpaginated reminder view (upcoming, overdue)."""

    reminders: list[ReminderResponse]
    total: int


class DashboardStatsResponse(BaseModel):
    """Upcoming and overdue totals for the dashboard widget."""

    upcoming_count: int
    upcoming_amount: float
    overdue_count: int
    overdue_amount: float


class SyncResponse(BaseModel):
    """Result of reconciling one tenant."""

    tenant_id: str
    created: int
    updated: int


class ProcessingErrorResponse(BaseModel):
    reminder_id: str
    message: str


class ProcessResponse(BaseModel):
    """Result of one notification scheduler pass."""

    sent: int
    skipped: int = 0
    errors: list[ProcessingErrorResponse] = Field(default_factory=list)


class ComponentHealthResponse(BaseModel):
    """Component health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None
    schema_version: str | None = None
    pending_migrations: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. REMINDER_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)

"""
Payment reminder endpoints.

All routes are tenant-scoped through the X-Tenant-ID header except
/process, which runs the scheduler across every tenant.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    get_process_use_case,
    get_reminder_service,
    get_sync_use_case,
    get_tenant_id,
)
from src.application.dto.requests import CreateReminderRequest, UpdateReminderRequest
from src.application.dto.responses import (
    DashboardStatsResponse,
    ErrorResponse,
    ProcessingErrorResponse,
    ProcessResponse,
    ReminderCollectionResponse,
    ReminderListResponse,
    ReminderResponse,
    SyncResponse,
)
from src.application.use_cases import (
    ProcessPaymentRemindersUseCase,
    SyncPaymentRemindersUseCase,
)
from src.core.entities.payment_reminder import PaymentReminder, ReminderType
from src.core.services import (
    ListRemindersQuery,
    PaymentReminderService,
    ReminderCreate,
    ReminderUpdate,
)

router = APIRouter(prefix="/api/payment-reminders", tags=["payment-reminders"])


def _entity_to_response(reminder: PaymentReminder, today: date) -> ReminderResponse:
    """Convert entity to response DTO; overdue is judged against ``today``."""
    return ReminderResponse(
        id=reminder.id,
        client_company_id=reminder.client_company_id,
        invoice_id=reminder.invoice_id,
        check_note_id=reminder.check_note_id,
        type=reminder.type.value,
        due_date=reminder.due_date,
        amount=float(reminder.amount),
        currency=reminder.currency,
        description=reminder.description,
        reminder_days_before=reminder.reminder_days_before,
        is_automated=reminder.is_automated,
        is_paid=reminder.is_paid,
        paid_at=reminder.paid_at,
        is_overdue=reminder.is_overdue_on(today),
        reminder_sent=reminder.reminder_sent,
        reminder_sent_at=reminder.reminder_sent_at,
        created_at=reminder.created_at,
        updated_at=reminder.updated_at,
    )


def _collection(reminders: list[PaymentReminder], today: date) -> ReminderCollectionResponse:
    return ReminderCollectionResponse(
        reminders=[_entity_to_response(r, today) for r in reminders],
        total=len(reminders),
    )


@router.get(
    "",
    response_model=ReminderListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_payment_reminders(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    type: ReminderType | None = None,
    is_paid: bool | None = None,
    upcoming: bool = False,
    overdue: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderListResponse:
    """List reminders, paginated and ordered by due date."""
    result = await service.list_reminders(
        tenant_id,
        ListRemindersQuery(
            page=page,
            page_size=page_size,
            type=type,
            is_paid=is_paid,
            upcoming=upcoming,
            overdue=overdue,
        ),
    )
    return ReminderListResponse(
        reminders=[_entity_to_response(r, service.today()) for r in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> DashboardStatsResponse:
    """Upcoming and overdue counts and totals."""
    stats = await service.get_dashboard_stats(tenant_id)
    return DashboardStatsResponse(
        upcoming_count=stats.upcoming_count,
        upcoming_amount=float(stats.upcoming_amount),
        overdue_count=stats.overdue_count,
        overdue_amount=float(stats.overdue_amount),
    )


@router.get("/upcoming", response_model=ReminderCollectionResponse)
async def list_upcoming_reminders(
    days: int = Query(default=7, ge=0, le=365),
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderCollectionResponse:
    """Unpaid reminders due within the next ``days`` days."""
    return _collection(await service.get_upcoming(tenant_id, days_ahead=days), service.today())


@router.get("/overdue", response_model=ReminderCollectionResponse)
async def list_overdue_reminders(
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderCollectionResponse:
    """Unpaid reminders past their due date."""
    return _collection(await service.get_overdue(tenant_id), service.today())


@router.post("/sync", response_model=SyncResponse)
async def sync_payment_reminders(
    tenant_id: str = Depends(get_tenant_id),
    use_case: SyncPaymentRemindersUseCase = Depends(get_sync_use_case),
) -> SyncResponse:
    """Reconcile the tenant's reminders against invoices and checks/notes."""
    result = await use_case.execute(tenant_id)
    return SyncResponse(tenant_id=tenant_id, created=result.created, updated=result.updated)


@router.post("/process", response_model=ProcessResponse)
async def process_payment_reminders(
    use_case: ProcessPaymentRemindersUseCase = Depends(get_process_use_case),
) -> ProcessResponse:
    """Send notifications for every reminder whose fire date has arrived."""
    result = await use_case.execute()
    return ProcessResponse(
        sent=result.sent,
        skipped=result.skipped,
        errors=[
            ProcessingErrorResponse(reminder_id=e.reminder_id, message=e.message)
            for e in result.errors
        ],
    )


@router.get(
    "/{reminder_id}",
    response_model=ReminderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payment_reminder(
    reminder_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderResponse:
    """Get a reminder by ID."""
    reminder = await service.get_by_id(tenant_id, reminder_id)
    return _entity_to_response(reminder, service.today())


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_payment_reminder(
    request: CreateReminderRequest,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderResponse:
    """Create a manual reminder."""
    created = await service.create(tenant_id, ReminderCreate(**request.model_dump()))
    return _entity_to_response(created, service.today())


@router.put(
    "/{reminder_id}",
    response_model=ReminderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment_reminder(
    reminder_id: str,
    request: UpdateReminderRequest,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderResponse:
    """Update the fields present in the body."""
    payload = ReminderUpdate(**request.model_dump(exclude_unset=True))
    updated = await service.update(tenant_id, reminder_id, payload)
    return _entity_to_response(updated, service.today())


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_payment_reminder(
    reminder_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> Response:
    """Delete a manual reminder."""
    await service.delete(tenant_id, reminder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{reminder_id}/paid",
    response_model=ReminderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def mark_payment_reminder_paid(
    reminder_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: PaymentReminderService = Depends(get_reminder_service),
) -> ReminderResponse:
    """Mark a reminder as paid."""
    paid = await service.mark_as_paid(tenant_id, reminder_id)
    return _entity_to_response(paid, service.today())

"""
Error handling for the reminder API.

Every error leaves the service as an ``ErrorResponse`` body with a
machine-readable ``error_code``, a message, a recovery hint and the request
path. Domain errors carry their own code; framework errors get one derived
from the HTTP status.
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    ConfigurationError,
    NotificationError,
    ReminderEngineError,
    ReminderNotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Checked in order; ReminderNotFoundError must precede StorageError
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ReminderNotFoundError: status.HTTP_404_NOT_FOUND,
    NotificationError: status.HTTP_502_BAD_GATEWAY,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

HINT_MAP: dict[str, str] = {
    "TENANT_REQUIRED": "Send the tenant identifier in the X-Tenant-ID header.",
    "REMINDER_NOT_FOUND": (
        "Check the reminder ID and the X-Tenant-ID header; "
        "GET /api/payment-reminders lists the tenant's reminders."
    ),
    "REMINDER_ALREADY_PAID": "The reminder is already settled. Nothing to do.",
    "VALIDATION_ERROR": (
        "Amounts must be positive with at most two decimals, currencies are "
        "three-letter codes and reminder_days_before is between 0 and 30."
    ),
    "DUPLICATE_SOURCE_LINK": "A reminder for this invoice or check/note already exists.",
    "NOTIFICATION_DELIVERY_FAILED": "The notification sink did not accept the message. Run /process again later.",
    "WEBHOOK_URL_MISSING": "Set NOTIFY_WEBHOOK_URL or switch NOTIFY_BACKEND to database.",
    "DATABASE_ERROR": "The reminder database failed. Check STORAGE_DB_PATH and the server logs.",
}

# Codes for framework errors that carry no domain code
_HTTP_STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "UNPROCESSABLE_ENTITY",
}

_STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "No such route. Reminder endpoints live under /api/payment-reminders.",
    405: "This route does not accept that HTTP method.",
    500: "An internal error occurred. Check the server logs.",
    502: "An upstream service failed. Retry later.",
}


def _hint(error_code: str, status_code: int) -> str | None:
    return HINT_MAP.get(error_code) or _STATUS_HINTS.get(status_code)


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _respond(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_hint(error_code, status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _field_detail(exc: ReminderEngineError) -> str | None:
    field = exc.details.get("field")
    reason = exc.details.get("message")
    if field and reason:
        return f"{field}: {reason}"
    return None


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Map an exception to its status code and ``ErrorResponse`` body."""
    status_code = _status_for(exc)
    if isinstance(exc, ReminderEngineError):
        error_code, message, detail = exc.code, exc.message, _field_detail(exc)
    else:
        error_code, message, detail = exc.__class__.__name__, str(exc), None

    log_fields = {
        "request_id": getattr(request.state, "request_id", None),
        "tenant_id": request.headers.get("X-Tenant-ID"),
        "path": request.url.path,
        "error_code": error_code,
        "error": str(exc),
    }
    if status_code >= 500:
        logger.error("request_failed", traceback=traceback.format_exc(), **log_fields)
    else:
        logger.info("request_rejected", status_code=status_code, **log_fields)

    return _respond(request, status_code, error_code, message, detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions no handler caught into ``ErrorResponse`` bodies."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        parts.append(f"{location or 'body'}: {error['msg']}")
    return "; ".join(parts)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain, request-validation and HTTP error handlers."""

    @app.exception_handler(ReminderEngineError)
    async def domain_exception_handler(
        request: Request,
        exc: ReminderEngineError,
    ) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Schema errors keep FastAPI's 422; domain validation is a 400
        return _respond(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            detail=_describe_validation_errors(exc),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        error_code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        return _respond(
            request,
            exc.status_code,
            error_code,
            str(exc.detail) if exc.detail else "An error occurred",
        )

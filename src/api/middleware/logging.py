"""
Request logging middleware.

Every request gets an id (taken from ``X-Request-ID`` or generated) that is
echoed back in the response. The id and the caller's tenant are bound to
the structlog context for the lifetime of the request, so store and service
events logged while handling it carry both.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
TENANT_HEADER = "X-Tenant-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one ``request_completed`` event per request with its timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            tenant_id=request.headers.get(TENANT_HEADER),
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    duration_ms=_elapsed_ms(started),
                )
                raise

            duration_ms = _elapsed_ms(started)
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=duration_ms,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response

"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from src.application.dto.responses import ComponentHealthResponse, HealthResponse
from src.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started_at


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process answers."""
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Readiness of the reminder database.

    Pings the pool and reports the schema version. Pending migrations mark
    the service ``degraded``; an unreachable database marks it ``unhealthy``.
    """
    from src.infrastructure.storage.sqlite import get_connection_pool
    from src.infrastructure.storage.sqlite.migrations import get_migration_status

    try:
        pool = await get_connection_pool()
        started = time.perf_counter()
        available = await pool.ping()
        latency_ms = (time.perf_counter() - started) * 1000
        migrations = await get_migration_status(pool.db_path)
        database = ComponentHealthResponse(
            name="sqlite",
            available=available,
            latency_ms=latency_ms,
            schema_version=migrations["current_version"],
            pending_migrations=migrations["pending_migrations"],
        )
    except Exception as e:
        database = ComponentHealthResponse(name="sqlite", available=False, error=str(e))

    if not database.available:
        overall = "unhealthy"
    elif database.pending_migrations:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
        database=database,
    )

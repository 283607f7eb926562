"""
FastAPI application for the payment reminder engine.

Startup brings the reminder database to the latest schema and opens the
connection pool; shutdown closes it. Reconciliation and the notification
scheduler are triggered over HTTP (``/sync``, ``/process``) or by
``manage.py`` from cron.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from src.api.middleware.error_handler import setup_exception_handlers
from src.api.routes import health_router, payment_reminders_router
from src.config import configure_logging, get_logger, get_settings
from src.core.exceptions import DatabaseError

logger = get_logger(__name__)


async def _prepare_database() -> None:
    from src.infrastructure.storage.sqlite import get_connection_pool
    from src.infrastructure.storage.sqlite.migrations import run_migrations

    results = await run_migrations()
    failed = next((r for r in results if not r.success), None)
    if failed is not None:
        raise DatabaseError(f"migration v{failed.version}", failed.error or "failed")

    pool = await get_connection_pool()
    logger.info(
        "reminder_database_ready",
        db_path=str(pool.db_path),
        migrations_applied=[r.version for r in results],
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Migrate and open the pool on startup, close the pool on shutdown."""
    settings = get_settings()
    logger.info(
        "application_starting",
        environment=settings.environment,
        notification_backend=settings.notifications.backend,
        check_note_drift_sync=settings.reminders.sync_check_note_drift,
    )

    try:
        await _prepare_database()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    yield

    from src.infrastructure.storage.sqlite import close_connection_pool

    try:
        await close_connection_pool()
    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the API with middleware, error handlers and routers."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Payment and collection reminders for invoices and checks/notes",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Starlette runs the last added middleware first
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["Content-Type", "X-Tenant-ID", "X-Request-ID"],
        )

    setup_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(payment_reminders_router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Container liveness probe."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )

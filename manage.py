#!/usr/bin/env python3
"""
Payment reminder engine management CLI.

Usage:
    python manage.py migrate             Apply pending database migrations
    python manage.py migrate --status    Show applied and pending migrations
    python manage.py sync --tenant ID    Reconcile one tenant's reminders
    python manage.py sync --all          Reconcile every tenant
    python manage.py process             Send due reminder notifications
    python manage.py serve               Start the API server

Batch commands print a JSON result and exit non-zero on failure, so they
can be driven by cron or any external scheduler.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any

from src.config import configure_logging, get_logger, get_settings

logger = get_logger("manage")


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def _with_pool(coro: Any) -> Any:
    """Run a coroutine and close the connection pool afterwards."""
    from src.infrastructure.storage.sqlite import close_connection_pool

    try:
        return await coro
    finally:
        await close_connection_pool()


def cmd_migrate(args: argparse.Namespace) -> int:
    """Apply migrations or report their status."""
    from src.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        run_migrations,
        verify_schema_integrity,
    )

    if args.status:
        _print_json(asyncio.run(get_migration_status()))
        return 0

    if args.verify:
        checks = asyncio.run(verify_schema_integrity())
        _print_json(checks)
        return 0 if all(c["status"] == "PASS" for c in checks) else 1

    results = asyncio.run(run_migrations(create_backup_before=not args.no_backup))
    _print_json([asdict(r) for r in results])
    return 0 if all(r.success for r in results) else 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Reconcile reminders for one tenant or all tenants."""
    from src.application.use_cases import SyncPaymentRemindersUseCase

    use_case = SyncPaymentRemindersUseCase()

    if args.all:
        bulk = asyncio.run(_with_pool(use_case.execute_all()))
        _print_json({
            "tenants": {tid: asdict(r) for tid, r in bulk.results.items()},
            "totals": asdict(bulk.totals),
            "failures": [asdict(f) for f in bulk.failures],
        })
        return 1 if bulk.failures else 0

    result = asyncio.run(_with_pool(use_case.execute(args.tenant)))
    _print_json({"tenant_id": args.tenant, **asdict(result)})
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    """Run one notification scheduler pass."""
    from src.application.use_cases import ProcessPaymentRemindersUseCase

    result = asyncio.run(_with_pool(ProcessPaymentRemindersUseCase().execute()))
    _print_json(asdict(result))
    return 1 if args.strict and result.errors else 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=args.reload,
        workers=args.workers,
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Payment reminder engine management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply database migrations")
    mode = p_migrate.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status only")
    mode.add_argument("--verify", action="store_true", help="Verify schema integrity only")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # sync
    p_sync = sub.add_parser("sync", help="Reconcile reminders against invoices and checks/notes")
    target = p_sync.add_mutually_exclusive_group(required=True)
    target.add_argument("--tenant", help="Tenant ID to reconcile")
    target.add_argument("--all", action="store_true", help="Reconcile every tenant")
    p_sync.set_defaults(func=cmd_sync)

    # process
    p_process = sub.add_parser("process", help="Send notifications for due reminders")
    p_process.add_argument(
        "--strict", action="store_true", help="Exit non-zero when any reminder failed"
    )
    p_process.set_defaults(func=cmd_process)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.add_argument("--workers", type=int, default=1, help="Number of uvicorn workers")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(stream=sys.stderr)

    try:
        code = args.func(args)
    except Exception as e:
        logger.error("command_failed", command=args.command, error=str(e))
        _print_json({"error": type(e).__name__, "message": str(e)})
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()

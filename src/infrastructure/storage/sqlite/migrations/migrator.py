"""
Versioned schema migrations for the reminder database.

Migration files are named ``vNNN_<name>.sql`` and applied in version order.
Each applied version is recorded in ``schema_migrations`` with a checksum of
its file; an applied file whose checksum no longer matches is reported as a
failed migration rather than silently re-run. The database file is copied
before migrating and restored if the run raises.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME_RE = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = (
    "schema_migrations",
    "invoices",
    "check_notes",
    "payment_reminders",
    "notifications",
)

# One reminder per source record and tenant
SOURCE_LINK_INDEXES = (
    "ux_payment_reminders_invoice",
    "ux_payment_reminders_check_note",
)


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        content = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _check(name: str, passed: bool, **detail: Any) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **detail}


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        # Fresh database, tracking table not created yet
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations() -> list[MigrationInfo]:
    """Bundled migration files in version order."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def _table_names(conn: aiosqlite.Connection) -> set[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in await cursor.fetchall()}


async def _index_names(conn: aiosqlite.Connection) -> set[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")
    return {row[0] for row in await cursor.fetchall()}


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        if violations:
            raise aiosqlite.IntegrityError(
                f"{len(violations)} foreign key violations after migration"
            )

        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, _elapsed_ms(start)),
        )
        await conn.commit()

    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=_elapsed_ms(start),
            error=str(e),
        )

    result = MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=_elapsed_ms(start),
    )
    logger.info(
        "migration_applied",
        version=result.version,
        name=result.name,
        execution_time_ms=result.execution_time_ms,
    )
    return result


def create_backup(db_path: Path) -> Path:
    """Copy the database file next to itself with a UTC timestamp suffix."""
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.{stamp}.bak")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Stops at the first failed migration. The backup is removed when every
    applied migration succeeded and kept otherwise.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing database file first

    Returns:
        Results of the migrations attempted in this run
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    migrations = discover_migrations()
    if not migrations:
        logger.warning("no_migrations_found", directory=str(MIGRATIONS_DIR))
        return []

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            applied = await get_applied_migrations(conn)
            for migration in migrations:
                recorded = applied.get(migration.version)
                if recorded is None:
                    result = await apply_migration(conn, migration)
                elif recorded != migration.checksum:
                    logger.error("migration_checksum_changed", version=migration.version)
                    result = MigrationResult(
                        version=migration.version,
                        name=migration.name,
                        success=False,
                        execution_time_ms=0,
                        error="applied migration file was modified; add a new version instead",
                    )
                else:
                    continue

                results.append(result)
                if not result.success:
                    break

    except Exception as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    logger.info(
        "database_initialized",
        db_path=str(db_path),
        applied=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success),
    )
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending versions for ``manage.py migrate --status``."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
            "total_migrations": len(discovered),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check the database file, the required tables and the source-link indexes.

    Returns:
        One entry per check with ``status`` PASS or FAIL
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        row = await cursor.fetchone()
        integrity = row[0] if row else "no result"

        tables = await _table_names(conn)
        indexes = await _index_names(conn)

    missing_tables = [t for t in REQUIRED_TABLES if t not in tables]
    missing_indexes = [i for i in SOURCE_LINK_INDEXES if i not in indexes]

    return [
        _check("integrity", integrity == "ok", result=integrity),
        _check("required_tables", not missing_tables, missing=missing_tables),
        _check("source_link_uniqueness", not missing_indexes, missing=missing_indexes),
    ]

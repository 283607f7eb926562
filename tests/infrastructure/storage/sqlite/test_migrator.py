"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    discover_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial"
        assert len(info.checksum) == 16

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestDiscoverMigrations:
    def test_bundled_migrations_found_in_order(self):
        migrations = discover_migrations()

        assert migrations
        assert migrations[0].version == "001"
        assert [m.version for m in migrations] == sorted(m.version for m in migrations)


class TestInitializeDatabase:
    """Tests for initialize_database against a temporary file."""

    async def test_creates_required_tables(self, temp_db_path: Path, app_settings):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert await get_current_version(conn) == "001"
        assert set(REQUIRED_TABLES) <= tables

    async def test_second_run_applies_nothing(self, temp_db_path: Path, app_settings):
        await initialize_database(temp_db_path, create_backup_before=False)

        results = await initialize_database(temp_db_path)

        assert results == []
        # Backup of an up-to-date database is removed again
        assert list(temp_db_path.parent.glob("*.bak")) == []

    async def test_status_and_integrity(self, temp_db_path: Path, app_settings):
        status = await get_migration_status(temp_db_path)
        assert status["exists"] is False

        await initialize_database(temp_db_path, create_backup_before=False)

        status = await get_migration_status(temp_db_path)
        checks = await verify_schema_integrity(temp_db_path)
        assert status["pending_migrations"] == []
        assert "001" in status["applied_migrations"]
        assert all(c["status"] == "PASS" for c in checks)

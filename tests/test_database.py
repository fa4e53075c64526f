"""
Tests for database plumbing and the readiness probe.

This module tests:
- Database (engine holder) lifecycle
- check_database() probe

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from catalog.core.database import Database, is_memory_sqlite, open_database
from catalog.core.probes import check_database
from tests.conftest import TEST_DATABASE_URL


CATALOG_TABLES = {"categories", "subcategories", "products"}


class TestDatabase:
    """Tests for the Database holder."""

    @pytest.mark.asyncio
    async def test_create_and_drop_all_tables(self):
        """
        Test schema management.

        Arrange: Fresh in-memory database
        Act: create_all(), then drop_all()
        Assert: The three catalog tables exist in between, none after
        """
        # Arrange
        database = Database(TEST_DATABASE_URL)

        async def table_names():
            async with database.engine.connect() as conn:
                return await conn.run_sync(lambda sync: set(inspect(sync).get_table_names()))

        # Act / Assert
        await database.create_all()
        assert CATALOG_TABLES <= await table_names()

        await database.drop_all()
        assert await table_names() == set()

        await database.dispose()

    @pytest.mark.asyncio
    async def test_dispose_is_idempotent(self):
        database = Database(TEST_DATABASE_URL)

        await database.dispose()
        await database.dispose()

        assert database.is_disposed

    def test_open_database_without_url_returns_none(self):
        assert open_database(None) is None
        assert open_database("") is None

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("sqlite+aiosqlite:///:memory:", True),
            ("sqlite+aiosqlite://", True),
            ("sqlite+aiosqlite:///file:catalog?mode=memory&uri=true", True),
            ("sqlite+aiosqlite:///./catalog.db", False),
            ("postgresql+asyncpg://app:secret@db:5432/catalog", False),
        ],
    )
    def test_is_memory_sqlite(self, url, expected):
        assert is_memory_sqlite(url) is expected

    @pytest.mark.asyncio
    async def test_only_in_memory_sqlite_shares_one_connection(self, tmp_path):
        """
        Test pool selection.

        Arrange: One in-memory and one file-backed SQLite database
        Act: Inspect each engine's pool
        Assert: Only the in-memory engine uses StaticPool
        """
        # Arrange
        memory = Database(TEST_DATABASE_URL)
        on_disk = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")

        # Assert
        assert isinstance(memory.engine.pool, StaticPool)
        assert not isinstance(on_disk.engine.pool, StaticPool)

        await memory.dispose()
        await on_disk.dispose()


class TestDatabaseProbe:
    """Tests for database readiness probe."""

    @pytest.mark.asyncio
    async def test_check_database_success(self):
        database = Database(TEST_DATABASE_URL)

        assert await check_database(database) is True

        await database.dispose()

    @pytest.mark.asyncio
    async def test_check_database_unconfigured_or_disposed(self):
        database = Database(TEST_DATABASE_URL)
        await database.dispose()

        assert await check_database(None) is False
        assert await check_database(database) is False

    @pytest.mark.asyncio
    async def test_check_database_timeout(self):
        """
        Test check_database returns False when the DB hangs.

        Arrange: Connection check that never finishes
        Act: Call check_database() with a short timeout
        Assert: Returns False
        """
        # Arrange
        database = Database(TEST_DATABASE_URL)

        async def hang():
            await asyncio.sleep(10)
            return True

        with patch.object(database, "check_connection", AsyncMock(side_effect=hang)):
            # Act
            result = await check_database(database, timeout_seconds=0.05)

        # Assert
        assert result is False
        await database.dispose()

"""
Database engine and session factory management.

Provides the ``Database`` holder: one SQLAlchemy async engine plus its
session factory for a given connection URL. The API server creates one in
its lifespan and hands it to every per-request ServiceFactory; a test
factory creates and owns its own.

No engine is created at import time.
"""

from typing import Optional

from sqlalchemy import event, make_url, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog.core.logging_config import get_logger
from catalog.models import metadata


logger = get_logger(__name__)


def is_memory_sqlite(url: str) -> bool:
    """True for SQLite URLs that name no file (``:memory:`` or an empty path)."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return False
    return parsed.database in (None, "", ":memory:") or parsed.query.get("mode") == "memory"


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create and configure an async SQLAlchemy engine.

    For SQLite:
    - In-memory databases use StaticPool so the one database survives
      across sessions; file databases keep the default pool, one
      connection per unit of work
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement for every connection

    Args:
        url: Async SQLAlchemy URL (sqlite+aiosqlite or postgresql+asyncpg)
        echo: Log every SQL statement

    Returns:
        Configured AsyncEngine instance
    """
    is_sqlite = url.startswith("sqlite")

    # SQLite-specific connection arguments (noop for other drivers)
    connect_args: dict = {"check_same_thread": False} if is_sqlite else {}

    engine_kwargs = {
        "echo": echo,
        "connect_args": connect_args,
    }

    # A shared connection is only correct when there is a single in-memory
    # database; sessions on a file database must not share one
    if is_memory_sqlite(url):
        engine_kwargs["poolclass"] = StaticPool
    elif not is_sqlite:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class Database:
    """
    Engine and session factory for one connection URL.

    Attributes:
        url: Connection URL the engine was built for
        engine: The async engine (connection pool)
        session_maker: Factory producing one AsyncSession per unit of work

    Example:
        database = Database("postgresql+asyncpg://app:secret@db:5432/catalog")
        async with database.session_maker() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_engine_for(url, echo=echo)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,
        )
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    async def create_all(self) -> None:
        """
        Create every catalog table.

        Schema evolution in production is handled outside this package;
        this is for development databases and tests.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.drop_all)

    async def check_connection(self) -> bool:
        """
        Check if the database is reachable.

        Returns:
            True if a SELECT 1 round-trip succeeds, False otherwise
        """
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception:
            logger.warning("Database connectivity check failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        await self.engine.dispose()

    def __repr__(self) -> str:
        dialect = self.engine.dialect.name
        return f"Database(dialect={dialect!r}, disposed={self._disposed})"


def open_database(url: Optional[str], echo: bool = False) -> Optional[Database]:
    """Build a Database for ``url``, or return None when no URL is configured."""
    if not url:
        return None
    return Database(url, echo=echo)

"""
Storage context: one live session for one unit of work.

A StorageContext wraps exactly one AsyncSession. Every round-trip to the
store goes through it, so it is the single place where driver errors are
translated into StorageFailureError and where disposal is enforced.

Disposal cancels in-flight round-trips: each statement runs as its own
asyncio task, and callers awaiting a cancelled round-trip receive
ContextUnavailableError.
"""

import asyncio
import time
import uuid
from typing import Any, List, Optional, Set

from sqlalchemy.engine import Result, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from catalog.core.errors import ContextUnavailableError, StorageFailureError
from catalog.core.logging_config import get_logger


logger = get_logger(__name__)


class StorageContext:
    """
    Per-unit-of-work wrapper around an AsyncSession.

    Attributes:
        id: Unit-of-work identifier, included in log records

    Example:
        async with database.session_maker() as session:
            context = StorageContext(session)
            rows = await context.fetch_all(select(table), operation="list")
            await context.dispose()
    """

    def __init__(self, session: Optional[AsyncSession], unit_of_work: Optional[str] = None):
        self._session = session
        self.id = unit_of_work or uuid.uuid4().hex
        self._disposed = False
        self._pending: Set[asyncio.Task] = set()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def is_available(self) -> bool:
        return self._session is not None and not self._disposed

    def ensure_available(self) -> None:
        """
        Fail fast when the context can no longer serve queries.

        Raises:
            ContextUnavailableError: If the context was disposed or has no session
        """
        if self._disposed:
            raise ContextUnavailableError(f"Storage context {self.id} has been disposed")
        if self._session is None:
            raise ContextUnavailableError(f"Storage context {self.id} has no live session")

    @property
    def session(self) -> AsyncSession:
        self.ensure_available()
        return self._session

    async def fetch_all(self, statement: Executable, operation: str = "fetch") -> List[RowMapping]:
        """Run a SELECT and return every row as a column-name mapping."""
        result = await self._round_trip(statement, operation)
        return list(result.mappings().all())

    async def fetch_one(self, statement: Executable, operation: str = "fetch") -> Optional[RowMapping]:
        """First row of a SELECT or of a write with RETURNING, or None."""
        result = await self._round_trip(statement, operation)
        return result.mappings().first()

    async def fetch_scalar(self, statement: Executable, operation: str = "fetch") -> Any:
        result = await self._round_trip(statement, operation)
        return result.scalar()

    async def execute(self, statement: Executable, operation: str = "execute") -> Result:
        """Run a write statement inside the unit-of-work transaction."""
        return await self._round_trip(statement, operation)

    async def commit(self) -> None:
        session = self.session
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            raise StorageFailureError("Commit failed", operation="commit") from exc

    async def rollback(self) -> None:
        session = self.session
        try:
            await session.rollback()
        except SQLAlchemyError as exc:
            raise StorageFailureError("Rollback failed", operation="rollback") from exc

    async def _round_trip(self, statement: Executable, operation: str) -> Result:
        self.ensure_available()

        task = asyncio.ensure_future(self._session.execute(statement))
        self._pending.add(task)
        started = time.perf_counter()
        try:
            return await task
        except asyncio.CancelledError:
            if self._disposed and task.cancelled():
                raise ContextUnavailableError(
                    f"Storage context {self.id} was disposed during {operation}"
                ) from None
            raise
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(
                "Storage round-trip failed",
                extra={
                    "unit_of_work": self.id,
                    "operation": operation,
                    "exception_type": type(exc).__name__,
                },
            )
            raise StorageFailureError(operation=operation) from exc
        finally:
            self._pending.discard(task)
            logger.debug(
                "Storage round-trip finished",
                extra={
                    "unit_of_work": self.id,
                    "operation": operation,
                    "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    async def dispose(self) -> None:
        """
        Close the session and make the context unusable.

        In-flight round-trips are cancelled first. Idempotent.
        """
        if self._disposed:
            return
        self._disposed = True

        pending = [task for task in self._pending if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(
                "Cancelled in-flight round-trips on dispose",
                extra={"unit_of_work": self.id, "cancelled": len(pending)},
            )

        session, self._session = self._session, None
        if session is not None:
            try:
                await session.close()
            except SQLAlchemyError:
                logger.warning(
                    "Error while closing storage session",
                    extra={"unit_of_work": self.id},
                    exc_info=True,
                )

    def __repr__(self) -> str:
        return f"StorageContext(id={self.id!r}, disposed={self._disposed})"

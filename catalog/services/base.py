"""
Service base class: the catch boundary of the data-access stack.

Repositories and query builders let errors propagate. Services run every
operation through ``BaseService.execute``, which logs the original error
with its traceback and converts it into a failure ServiceResponse whose
message carries no stack detail. Nothing is retried.
"""

import time
from typing import Awaitable, Callable, Optional, TypeVar

from catalog.core.context import StorageContext
from catalog.core.errors import (
    DataAccessError,
    InvalidArgumentError,
    StorageFailureError,
)
from catalog.core.logging_config import get_logger
from catalog.schemas.envelope import ServiceResponse


logger = get_logger(__name__)

T = TypeVar("T")


def public_message(operation: str, exc: Exception) -> str:
    """Human-readable failure summary for API clients."""
    if isinstance(exc, InvalidArgumentError):
        return f"Invalid request: {exc}"
    if isinstance(exc, DataAccessError):
        return f"Could not {operation}: {exc}"
    return f"Could not {operation}: unexpected error"


class BaseService:
    """
    Base for business services.

    Attributes:
        context: Storage context of the unit of work (not owned)
        resource_name: Resource name used in log records and messages
    """

    resource_name = "resource"

    def __init__(self, context: StorageContext):
        self.context = context

    async def execute(
        self,
        operation: str,
        call: Callable[[], Awaitable[Optional[T]]],
        not_found: Optional[str] = None,
        success_message: str = "OK",
    ) -> ServiceResponse[T]:
        """
        Run one service operation and wrap its outcome.

        Args:
            operation: Short description used in logs and failure messages
            call: Zero-argument coroutine function doing the work
            not_found: When given, a None result becomes a not-found response
                with this message instead of a success with no payload
            success_message: Message attached to a successful response

        Returns:
            ServiceResponse; this method never raises
        """
        started = time.perf_counter()
        try:
            payload = await call()
        except Exception as exc:
            logger.error(
                "Service operation failed",
                extra={
                    "unit_of_work": self.context.id,
                    "resource": self.resource_name,
                    "operation": operation,
                    "exception_type": type(exc).__name__,
                    "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                },
                exc_info=True,
            )
            if isinstance(exc, StorageFailureError):
                await self._discard_pending_writes(operation)
            return ServiceResponse.failure(public_message(operation, exc))

        if payload is None and not_found is not None:
            logger.info(
                "Service lookup found nothing",
                extra={
                    "unit_of_work": self.context.id,
                    "resource": self.resource_name,
                    "operation": operation,
                },
            )
            return ServiceResponse.not_found(not_found)

        return ServiceResponse.success(payload, message=success_message)

    async def _discard_pending_writes(self, operation: str) -> None:
        # A failed statement can leave the transaction unusable; roll back so
        # the unit of work can continue.
        if not self.context.is_available:
            return
        try:
            await self.context.rollback()
        except StorageFailureError:
            logger.error(
                "Rollback after failed operation also failed",
                extra={"unit_of_work": self.context.id, "operation": operation},
                exc_info=True,
            )

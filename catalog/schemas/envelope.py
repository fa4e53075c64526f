"""
Response envelope returned by every service operation.

Services never raise to their callers: success and failure are both
represented as a ServiceResponse.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")

SUCCESS_STATUS = 200
NOT_FOUND_STATUS = 404
FAILURE_STATUS = 500


class ServiceResponse(BaseModel, Generic[T]):
    """
    Uniform success/failure wrapper.

    Attributes:
        succeeded: Whether the operation completed
        status_code: SUCCESS_STATUS, NOT_FOUND_STATUS or FAILURE_STATUS
        message: Human-readable summary, free of stack details
        payload: Result on success, absent otherwise

    Example:
        >>> ServiceResponse.success(42).model_dump()
        {'succeeded': True, 'status_code': 200, 'message': 'OK', 'payload': 42}
    """

    succeeded: bool
    status_code: int
    message: str = ""
    payload: Optional[T] = Field(default=None)

    @classmethod
    def success(cls, payload: T, message: str = "OK") -> "ServiceResponse[T]":
        return cls(succeeded=True, status_code=SUCCESS_STATUS, message=message, payload=payload)

    @classmethod
    def failure(cls, message: str) -> "ServiceResponse[T]":
        return cls(succeeded=False, status_code=FAILURE_STATUS, message=message)

    @classmethod
    def not_found(cls, message: str) -> "ServiceResponse[T]":
        """Explicit empty result: the lookup ran fine but matched nothing."""
        return cls(succeeded=False, status_code=NOT_FOUND_STATUS, message=message)

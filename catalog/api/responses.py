"""Conversion of service envelopes into HTTP responses."""

from fastapi.responses import JSONResponse

from catalog.core.errors import StorageFailureError
from catalog.core.factory import ServiceFactory
from catalog.core.logging_config import get_logger
from catalog.schemas.envelope import ServiceResponse
from catalog.services.base import public_message


logger = get_logger(__name__)


def envelope_response(envelope: ServiceResponse, success_status: int = 200) -> JSONResponse:
    """
    Serialize an envelope, using its status code as the HTTP status.

    Args:
        envelope: Service result
        success_status: HTTP status for a successful envelope (e.g. 201 for creates)
    """
    status_code = success_status if envelope.succeeded else envelope.status_code
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


async def committed_response(
    services: ServiceFactory,
    envelope: ServiceResponse,
    success_status: int = 200,
) -> JSONResponse:
    """
    Commit the request's writes, then serialize the envelope.

    Only a successful envelope is committed; anything else is left for
    dispose() to roll back. A failed commit replaces the envelope with a
    failure so the client still receives the envelope shape.
    """
    if envelope.succeeded:
        try:
            await services.commit()
        except StorageFailureError as exc:
            logger.error(
                "Commit failed",
                extra={
                    "unit_of_work": services.unit_of_work,
                    "operation": "commit",
                    "exception_type": type(exc).__name__,
                },
                exc_info=True,
            )
            envelope = ServiceResponse.failure(public_message("commit changes", exc))
    return envelope_response(envelope, success_status)

"""
FastAPI dependency functions.

Provides the per-request ServiceFactory and the common query parameters.
Each request gets its own factory, storage context and services; the only
things shared between requests are the frozen settings and the engine
held on ``app.state``.
"""

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status

from catalog.core.config import Settings, settings as default_settings
from catalog.core.errors import ConfigurationMissingError
from catalog.core.factory import ServiceFactory


async def get_service_factory(request: Request) -> AsyncGenerator[ServiceFactory, None]:
    """
    Dependency providing the unit of work for one request.

    Write routes commit through ``committed_response`` before the response
    is built. Here the unit of work is rolled back when the handler raises
    and always disposed, which discards anything left uncommitted.

    Raises:
        HTTPException 503: If no database URL is configured
    """
    app_settings: Settings = getattr(request.app.state, "settings", default_settings)
    database = getattr(request.app.state, "database", None)
    factory = ServiceFactory.for_request(
        app_settings,
        database,
        request_id=getattr(request.state, "request_id", None),
    )

    try:
        await factory.initialize()
    except ConfigurationMissingError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        )

    try:
        yield factory
    except Exception:
        await factory.rollback()
        raise
    finally:
        await factory.dispose()


class PageParams:
    """Validated page number and size query parameters."""

    def __init__(
        self,
        request: Request,
        page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
        page_size: Annotated[
            Optional[int],
            Query(ge=1, description="Items per page"),
        ] = None,
    ):
        app_settings: Settings = getattr(request.app.state, "settings", default_settings)
        if page_size is not None and page_size > app_settings.max_page_size:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"page_size cannot exceed {app_settings.max_page_size}",
            )
        self.page = page
        self.page_size = page_size or app_settings.default_page_size


def get_actor(
    x_actor: Annotated[Optional[str], Header(max_length=100)] = None,
) -> Optional[str]:
    """Name recorded in the audit columns of writes (X-Actor header)."""
    return x_actor


# Type aliases for dependency injection
Services = Annotated[ServiceFactory, Depends(get_service_factory)]
Page = Annotated[PageParams, Depends()]
Actor = Annotated[Optional[str], Depends(get_actor)]

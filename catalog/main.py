"""
Catalog API - FastAPI Application Entry Point

This module builds the FastAPI application with its middleware, routes
and lifecycle handlers. ``create_app`` takes explicit settings (and
optionally a ready Database) so tests can build isolated apps; ``app`` is
the instance served in production.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog import __version__
from catalog.api.v1 import categories, health, products, subcategories
from catalog.core.config import Settings, settings as default_settings
from catalog.core.database import Database, open_database
from catalog.core.logging_config import get_logger, setup_logging
from catalog.middleware.logging import LoggingMiddleware
from catalog.middleware.request_id import RequestIDMiddleware


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        database: Engine holder to share across requests; when omitted the
            lifespan opens one from settings.database_url and disposes it
            on shutdown

    Returns:
        Configured FastAPI instance
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        setup_logging(level=settings.log_level, json_format=settings.log_json)
        owned = None
        if app.state.database is None:
            owned = open_database(settings.database_url, echo=settings.sql_echo)
            app.state.database = owned
        if app.state.database is None:
            logger.warning("DATABASE_URL is not configured; data endpoints will return 503")

        yield

        # Shutdown
        if owned is not None:
            await owned.dispose()
            app.state.database = None

    app = FastAPI(
        title=settings.project_name,
        version=__version__,
        description="Catalog of categories, subcategories and products",
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # Middleware is executed in reverse order of registration
    # (last registered = first executed)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["health"])
    app.include_router(categories.router, prefix=settings.api_v1_prefix)
    app.include_router(subcategories.router, prefix=settings.api_v1_prefix)
    app.include_router(products.router, prefix=settings.api_v1_prefix)

    @app.get("/")
    async def root():
        """Basic API information."""
        return {
            "message": settings.project_name,
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()

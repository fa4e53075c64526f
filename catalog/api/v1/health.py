"""
Health check endpoints for monitoring and readiness probes.

- Liveness probe: /health (basic "is the server running" check)
- Readiness probe: /health/ready (checks the database)
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status

from catalog.core.probes import check_database
from catalog.schemas.health import HealthCheckDetail, HealthResponse, ReadinessResponse


router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Basic health check to verify the service is running",
)
async def health_check() -> HealthResponse:
    """
    Basic liveness probe.

    This endpoint should always return 200 if the application is running.
    """
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Checks that the database is reachable",
)
async def readiness_check(request: Request, response: Response) -> ReadinessResponse:
    """
    Readiness probe.

    Returns 503 when the database is not configured or not reachable.
    """
    database = getattr(request.app.state, "database", None)

    started = time.perf_counter()
    healthy = await check_database(database)
    detail = HealthCheckDetail(
        healthy=healthy,
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        error=None if healthy else (
            "database not configured" if database is None else "database unreachable"
        ),
    )

    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if healthy else "not_ready",
        checks={"database": detail},
        timestamp=datetime.now(timezone.utc),
    )

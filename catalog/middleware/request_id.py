"""
Request ID middleware for correlation tracking.

This middleware ensures every request has a unique correlation ID:
- Reads X-Request-ID header from client (if provided)
- Generates UUID if header is missing
- Stores in request.state for access by other middleware/routes
- Includes in response headers for client-side correlation

The request ID doubles as the unit-of-work identifier of the request's
ServiceFactory, so storage and service log lines share it.
"""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add request ID correlation to all requests.

    Flow:
    1. Check for X-Request-ID header in incoming request
    2. If present, use it; otherwise generate new UUID
    3. Store in request.state.request_id
    4. Add to response headers as X-Request-ID
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER)

        if not request_id:
            request_id = str(uuid.uuid4())

        request.state.request_id = request_id

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id

        return response

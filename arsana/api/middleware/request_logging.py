"""Request logging middleware

Logs method, path, status and duration for every request, and tags the
response with an X-Request-ID (reused from the request when present).
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from arsana.observability.logging import get_logger
from arsana.observability.telemetry import counter

logger = get_logger("arsana.api.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d (%.1fms) request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        if response.status_code >= 500:
            counter("api.responses.5xx")

        response.headers["X-Request-ID"] = request_id
        return response

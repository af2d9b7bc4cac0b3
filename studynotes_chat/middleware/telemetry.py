"""
Telemetry middleware for request tracking and metrics.
"""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.telemetry import record_request

logger = structlog.get_logger(__name__)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request and records its latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            record_request(method, request.url.path, 500, duration)
            logger.error(
                "Request failed",
                method=method,
                path=request.url.path,
                error=str(e),
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.time() - start_time
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        record_request(method, endpoint, response.status_code, duration)

        logger.info(
            "Request completed",
            method=method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
            remote_addr=request.client.host if request.client else "",
        )
        return response

"""HTTP middleware: request ids and request logging."""

import time
from typing import Callable, Set

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from components.core.logging_config import (
    logger,
    set_request_id,
    generate_request_id,
)

SKIP_LOGGING_PATHS: Set[str] = {
    "/health_check/",
    "/favicon.ico",
    "/docs",
    "/openapi.json",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, logs method, path, status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        if path not in SKIP_LOGGING_PATHS:
            logger.log_request(request.method, path, response.status_code, duration_ms)
        return response

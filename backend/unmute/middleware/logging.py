"""
unMute Backend: Access Log Middleware
======================================

One line per request on the "unmute.access" logger:

    POST /posts/12/like 200 4.3ms [1f0c2a9e] from 10.0.0.7

The level follows the status code: 5xx ERROR, 4xx WARNING, otherwise INFO.
Request bodies, query strings and the Authorization header are never
logged; journal entries and passwords travel in bodies, tokens in headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from unmute.middleware.request_id import request_id_var

logger = logging.getLogger("unmute.access")

# Polled by monitors and browsers; logging them drowns real traffic
QUIET_PATHS = frozenset({"/health", "/favicon.ico"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client = request.client.host if request.client else "unknown"
        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            rid,
            client,
            extra={
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response

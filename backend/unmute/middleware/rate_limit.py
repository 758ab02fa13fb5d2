"""
unMute Backend: Rate Limiting Middleware
=========================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the timestamps of each IP's requests inside the window in
       memory; once an IP has RATE_LIMIT_REQUESTS of them, further requests
       get 429 with Retry-After until the oldest one ages out.

Limits:
    State is per process. Running several uvicorn workers multiplies the
    effective limit by the worker count.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from unmute.config import settings
from unmute.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Cleanup of idle IPs runs once every this many recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window limiter.

    `max_requests`, `window` and `enabled` default to RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW and RATE_LIMIT_ENABLED.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.enabled or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window,
            )
            return self._reject(request, RateLimitExceededError(retry_after=retry_after))

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _reject(self, request: Request, exc: RateLimitExceededError) -> JSONResponse:
        # Runs before RequestIDMiddleware, so only a client-sent id is known
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "status": "error",
                "error": exc.message,
                "details": exc.context,
                "request_id": request.headers.get("X-Request-ID", ""),
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))

"""
app/core/middleware.py

Purpose: Request gates that run before routing

- Global fixed-window rate limit
- Bearer token authentication (every path except the liveness ones)
- Request timing header and slow-request warnings

These run as HTTP middleware so they reject a request before FastAPI
parses or validates its body.
"""

import math
import secrets
import time
from typing import Callable, Optional, Tuple

from fastapi import FastAPI, Request

from app.core.config import Settings
from app.core.errors import error_response
from app.core.exceptions import AuthError, RelayError
from app.core.logging import get_logger
from utils.constants import ERROR_RATE_LIMITED, PUBLIC_PATHS, SLOW_REQUEST_SECONDS

logger = get_logger(__name__)


class RateLimiter:
    """
    Fixed-window counter shared by all clients.

    A window opens on the first request after the previous one expired;
    at most `max_requests` are admitted until it closes.
    """

    def __init__(self, max_requests: int, window_ms: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window = window_ms / 1000.0
        self._clock = clock
        self._window_start = None
        self._count = 0

    def hit(self) -> Tuple[bool, float]:
        """
        Records one request.

        Returns:
            (allowed, seconds until the current window resets)
        """
        now = self._clock()

        if self._window_start is None or now - self._window_start >= self.window:
            self._window_start = now
            self._count = 0

        reset_in = self.window - (now - self._window_start)

        if self._count >= self.max_requests:
            return False, reset_in

        self._count += 1
        return True, reset_in


def is_authorized(header: Optional[str], entry_token: str) -> bool:
    """Exact match of the Authorization header against "Bearer <token>"."""
    if not header:
        return False
    return secrets.compare_digest(header.encode(), f"Bearer {entry_token}".encode())


def add_middlewares(app: FastAPI, config: Settings, limiter: Optional[RateLimiter] = None):
    """
    Registers the request gates with the FastAPI app.

    Starlette runs the last registered middleware first, so the order of
    execution is: timing, rate limit, authentication.
    """
    limiter = limiter or RateLimiter(config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_MS)

    @app.middleware("http")
    async def authenticate(request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if not is_authorized(request.headers.get("authorization"), config.ENTRY_TOKEN):
            logger.warning(
                "Rejected unauthenticated request",
                extra={"method": request.method, "path": request.url.path}
            )
            return error_response(AuthError())

        return await call_next(request)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        allowed, reset_in = limiter.hit()
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"method": request.method, "path": request.url.path}
            )
            response = error_response(
                RelayError("Rate limit exceeded", code=ERROR_RATE_LIMITED, status_code=429)
            )
            response.headers["Retry-After"] = str(max(1, math.ceil(reset_in)))
            return response

        return await call_next(request)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"process_time": process_time}
            )

        return response

"""In-memory rate limiting middleware."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Callable, Deque

from fastapi import Request
from starlette.responses import JSONResponse

from ..config import settings

EXEMPT_PATHS = frozenset({"/healthz"})


class RateLimitMiddleware:
    """Sliding window limiter keyed by client IP.

    Counters live in process memory, so each worker enforces its own window.
    """

    def __init__(
        self,
        app: Callable,
        limit: int | None = None,
        window_seconds: int | None = None,
    ) -> None:
        self.app = app
        self.limit = limit if limit is not None else settings.rate_limit_requests
        self.window = window_seconds if window_seconds is not None else settings.rate_limit_window_seconds
        self._requests: dict[str, Deque[float]] = defaultdict(deque)

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("path") in EXEMPT_PATHS:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()

        request_times = self._requests[client_ip]
        while request_times and request_times[0] <= now - self.window:
            request_times.popleft()

        if len(request_times) >= self.limit:
            retry_after = max(1, int(request_times[0] + self.window - now) + 1)
            response = JSONResponse(
                {"error": "rate_limited", "detail": "Rate limit exceeded"},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )
            await response(scope, receive, send)
            return

        request_times.append(now)
        await self.app(scope, receive, send)

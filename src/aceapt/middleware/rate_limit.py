"""Fixed-window request limits per client IP, counted in Redis.

Sign-up and sign-in get their own, smaller budget so password guessing is
throttled independently of normal quiz traffic.
"""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from aceapt.redis_client import get_redis

_UNLIMITED_PATHS = frozenset({"/health", "/ready", "/version"})
_AUTH_PREFIX = "/api/auth/"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """429 once a client exceeds its budget for the current window."""

    def __init__(
        self,
        app: Any,  # noqa: ANN401
        requests_per_window: int = 100,
        window_seconds: int = 60,
        auth_requests_per_window: int = 20,
    ) -> None:
        super().__init__(app)
        self.window_seconds = window_seconds
        self.limits = {"api": requests_per_window, "auth": auth_requests_per_window}

    def _bucket(self, path: str) -> str:
        return "auth" if path.startswith(_AUTH_PREFIX) else "api"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in _UNLIMITED_PATHS:
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            # No Redis configured for this process
            return await call_next(request)

        bucket = self._bucket(path)
        limit = self.limits[bucket]
        client = request.client.host if request.client else "unknown"
        key = f"ratelimit:{bucket}:{client}:{int(time.time()) // self.window_seconds}"

        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.window_seconds + 1)
        count, _ = await pipe.execute()

        headers = {"X-RateLimit-Limit": str(limit), "X-RateLimit-Remaining": str(max(0, limit - int(count)))}
        if int(count) > limit:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Try again later."},
                headers={**headers, "Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

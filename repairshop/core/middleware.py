"""Request middleware and Redis-backed rate limiting."""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from repairshop.config import settings
from repairshop.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
SLOW_REQUEST_SECONDS = 1.0

# Paths never rate limited
UNLIMITED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def get_client_ip(request: Request) -> str:
    """Client address, preferring the first proxy hop when present."""
    for header in ("X-Forwarded-For", "X-Real-IP"):
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def hit_window(redis_client: redis.Redis, key: str) -> int:
    """Record a hit in a one-minute sliding window.

    Returns:
        int: Hits in the window before this one
    """
    now = time.time()
    async with redis_client.pipeline(transaction=True) as pipe:
        pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
        pipe.zcard(key)
        pipe.zadd(key, {str(time.time_ns()): now})
        pipe.expire(key, WINDOW_SECONDS)
        _, previous_hits, _, _ = await pipe.execute()
    return previous_hits


class SlidingWindowCounter:
    """Per-client hit counter shared by the global and per-route limits.

    Redis failures are logged and treated as "no hits" so an unavailable
    Redis never blocks traffic.
    """

    def __init__(self, limit: int, namespace: str, redis_url: str | None = None):
        self.limit = limit
        self.namespace = namespace
        self.redis_url = redis_url or settings.redis_url
        self._client: redis.Redis | None = None

    def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    async def hit(self, request: Request) -> int | None:
        """Count this request; None when the counter is unavailable."""
        key = f"{self.namespace}:{get_client_ip(request)}"
        try:
            return await hit_window(self._redis(), key)
        except redis.RedisError as e:
            logger.warning(f"Rate limiter '{self.namespace}' unavailable: {e}")
            return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP rate limit."""

    def __init__(self, app, requests_per_minute: int = 100, redis_url: str | None = None):
        super().__init__(app)
        self.counter = SlidingWindowCounter(requests_per_minute, "rate_limit", redis_url)

    def _limit_headers(self, remaining: int) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.counter.limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(time.time()) + WINDOW_SECONDS),
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        previous_hits = await self.counter.hit(request)
        if previous_hits is None:
            return await call_next(request)

        if previous_hits >= self.counter.limit:
            error = RateLimitExceeded()
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_payload(),
                headers={"Retry-After": str(WINDOW_SECONDS), **self._limit_headers(0)},
            )

        response = await call_next(request)
        response.headers.update(self._limit_headers(max(0, self.counter.limit - previous_hits - 1)))
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its timing."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        summary = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)"
        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"SLOW REQUEST: {summary}")
        else:
            logger.debug(summary)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds browser hardening headers to every response."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RateLimiter:
    """Per-endpoint rate limit, used as a FastAPI dependency."""

    def __init__(self, requests_per_minute: int = 10, key_prefix: str = "api"):
        self.counter = SlidingWindowCounter(requests_per_minute, f"rate:{key_prefix}")

    async def __call__(self, request: Request) -> None:
        """Raise RateLimitExceeded once the client used up its window."""
        previous_hits = await self.counter.hit(request)
        if previous_hits is not None and previous_hits >= self.counter.limit:
            raise RateLimitExceeded()


# Public booking status lookup
status_lookup_limiter = RateLimiter(
    requests_per_minute=settings.status_lookup_per_minute,
    key_prefix="status_lookup",
)

"""Request context middleware: request ids, timing, access logs and rate limiting.

All handled in one pass. The token bucket arithmetic lives in the pure
function ``check_rate_limit`` so it can be tested without a server.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import actor_var, request_id_var
from ..exceptions import ErrorCode

logger = logging.getLogger(__name__)

# Bucket state: {client_key: (available_tokens, last_refill_timestamp)}
Buckets = dict[str, tuple[float, float]]


def check_rate_limit(
    bucket: Buckets,
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Take one token for *key* from a token bucket refilled at ``max_per_minute``.

    Args:
        bucket: Mutable dict holding per-key state. Modified in place.
        key: Client identifier (IP address).
        max_per_minute: Sustained rate cap. ``<= 0`` disables limiting.
        now: Current timestamp (injectable for testing). Defaults to ``time.monotonic()``.

    Returns:
        ``(allowed, retry_after)``; *retry_after* is 0.0 when allowed, otherwise
        the seconds until the next token becomes available.
    """
    if max_per_minute <= 0:
        return True, 0.0

    if now is None:
        now = time.monotonic()

    refill_rate = max_per_minute / 60.0  # tokens per second

    if key in bucket:
        tokens, last_refill = bucket[key]
        tokens = min(max_per_minute, tokens + (now - last_refill) * refill_rate)
    else:
        tokens = float(max_per_minute)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / refill_rate


class RateLimiter:
    """Thread-safe per-client buckets with periodic eviction of idle clients."""

    def __init__(self, evict_every: int = 100, evict_age: float = 120.0):
        self.buckets: Buckets = {}
        self._lock = threading.Lock()
        self._calls = 0
        self._evict_every = evict_every
        self._evict_age = evict_age

    def hit(self, key: str, max_per_minute: int, now: Optional[float] = None) -> tuple[bool, float]:
        if now is None:
            now = time.monotonic()
        with self._lock:
            self._calls += 1
            if self._calls % self._evict_every == 0:
                cutoff = now - self._evict_age
                for stale in [k for k, (_, ts) in self.buckets.items() if ts < cutoff]:
                    del self.buckets[stale]
            return check_rate_limit(self.buckets, key, max_per_minute, now)

    def reset(self) -> None:
        with self._lock:
            self.buckets.clear()
            self._calls = 0


rate_limiter = RateLimiter()

# Health probes and docs are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def _client_key(request: Request) -> str:
    """First ``X-Forwarded-For`` hop when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, logging, and rate limiting."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)
        actor_var.set("")

        if request.url.path not in _EXEMPT_PATHS:
            key = _client_key(request)
            allowed, retry_after = rate_limiter.hit(key, settings.rate_limit_per_minute)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": ErrorCode.RATE_LIMITED.value,
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={
                        "Retry-After": str(int(retry_after) + 1),
                        "X-Request-ID": rid,
                    },
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response

"""
Request throttling for the storefront and admin API

Two layers share one in-process limiter:
- RateLimitMiddleware caps every client per minute (shoppers by IP,
  signed-in staff by their verified token)
- rate_limit_check() guards expensive or abusable routes such as the
  contact form and AI description generation
"""
import time
import logging
from collections import deque
from typing import Deque, Dict, NamedTuple, Optional, Tuple

from fastapi import Request, HTTPException, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .auth import decode_access_token

logger = logging.getLogger(__name__)


class RateLimitRule(NamedTuple):
    max_requests: int
    window_seconds: int = 60


class RateLimiter:
    """
    Sliding window counter keyed by client identifier.

    Each identifier keeps the timestamps of its accepted requests; a
    request is accepted while fewer than max_requests fall inside the
    window. Counters are per process, so every worker throttles alone.
    """

    def __init__(self, sweep_every: int = 60):
        self._hits: Dict[str, Deque[float]] = {}
        self._sweep_every = sweep_every
        self._last_sweep = time.time()

    def _sweep(self, horizon: int):
        now = time.time()
        if now - self._last_sweep < self._sweep_every:
            return

        stale_before = now - horizon
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= stale_before]:
            del self._hits[key]
        self._last_sweep = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Record a request for identifier if the window still has room.

        Returns:
            (allowed, remaining, retry_after) where retry_after is the number
            of seconds until the oldest counted request leaves the window
        """
        self._sweep(window_seconds * 2)

        now = time.time()
        hits = self._hits.setdefault(identifier, deque())
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()

        if len(hits) >= max_requests:
            wait = int(hits[0] + window_seconds - now) + 1 if hits else 1
            return False, 0, wait

        hits.append(now)
        return True, max_requests - len(hits), 0

    def reset(self, identifier: Optional[str] = None):
        """Forget recorded requests for one identifier, or for everyone"""
        if identifier is None:
            self._hits.clear()
        else:
            self._hits.pop(identifier, None)


rate_limiter = RateLimiter()


# Requests per minute for the global middleware
RATE_LIMITS = {
    "authenticated": 600,
    "unauthenticated": 120,
}

CONTACT_FORM_LIMIT = RateLimitRule(5, 60)
AI_GENERATION_LIMIT = RateLimitRule(20, 60)

UNTHROTTLED_PATHS = frozenset({"/", "/health", "/docs", "/openapi.json", "/redoc"})


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer"""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else "unknown"


def client_key(request: Request) -> Tuple[str, bool]:
    """
    Return (identifier, signed_in) for the caller.

    Only a bearer token that verifies earns a per-user bucket; anything else
    is counted against the client IP so rotating junk tokens gains nothing.
    """
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        try:
            claims = decode_access_token(authorization[len("Bearer "):])
        except (HTTPException, ValueError):
            claims = None
        if claims and claims.get("sub"):
            return f"user:{claims['sub']}", True
    return f"ip:{get_client_ip(request)}", False


def _limit_headers(limit: int, remaining: int, retry_after: int = 0) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
    }
    if retry_after:
        headers["X-RateLimit-Reset"] = str(retry_after)
        headers["Retry-After"] = str(retry_after)
    return headers


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global per-client throttle.

    Every throttled response carries X-RateLimit-Limit and
    X-RateLimit-Remaining; a 429 adds X-RateLimit-Reset and Retry-After.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in UNTHROTTLED_PATHS:
            return await call_next(request)

        key, signed_in = client_key(request)
        limit = RATE_LIMITS["authenticated"] if signed_in else RATE_LIMITS["unauthenticated"]
        allowed, remaining, retry_after = rate_limiter.is_allowed(key, limit)

        if not allowed:
            logger.warning(f"Throttled {key} on {request.method} {request.url.path}")
            # Returned rather than raised so the CORS middleware still wraps it
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please slow down."},
                headers=_limit_headers(limit, 0, retry_after),
            )

        response = await call_next(request)
        response.headers.update(_limit_headers(limit, remaining))
        return response


def rate_limit_check(max_requests: int = 100, window_seconds: int = 60):
    """
    Build a dependency that throttles a single route.

        @router.post("/")
        async def submit(_: None = Depends(rate_limit_check(*CONTACT_FORM_LIMIT))):
            ...
    """
    async def guard(request: Request) -> None:
        allowed, _, retry_after = rate_limiter.is_allowed(
            f"route:{request.url.path}:ip:{get_client_ip(request)}", max_requests, window_seconds
        )
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many requests to this endpoint. Try again in {retry_after} seconds.",
                headers=_limit_headers(max_requests, 0, retry_after),
            )

    return guard

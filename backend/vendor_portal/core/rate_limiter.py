"""
Per-process request throttling for login attempts and upload floods.

Each client (token subject, else IP) keeps a deque of request times
inside the current window. Over the limit the middleware answers 429 with
Retry-After itself; exception handlers do not run at this layer.
"""
import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from vendor_portal.core.config import settings
from vendor_portal.core.security import decode_access_token

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})
SWEEP_INTERVAL = 300


class RateLimiter:
    def __init__(self, requests: int = 100, window: int = 60, clock: Callable[[], float] = time.monotonic):
        self.requests = requests
        self.window = window
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def is_allowed(self, client_id: str) -> Tuple[bool, int]:
        """Record a hit if under the limit. Returns (allowed, remaining)."""
        now = self.clock()
        if now - self._last_sweep > SWEEP_INTERVAL:
            self._sweep(now)

        hits = self._hits.setdefault(client_id, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if len(hits) >= self.requests:
            return False, 0
        hits.append(now)
        return True, self.requests - len(hits)

    def reset(self) -> None:
        self._hits.clear()

    def _sweep(self, now: float) -> None:
        idle = [cid for cid, hits in self._hits.items() if not hits or hits[-1] <= now - self.window]
        for cid in idle:
            del self._hits[cid]
        self._last_sweep = now
        logger.debug(f"Rate limiter sweep dropped {len(idle)} idle clients, {len(self._hits)} active")


rate_limiter = RateLimiter(settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)


def client_key(request: Request) -> str:
    """Valid bearer tokens are keyed by user id; everything else by IP."""
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        subject = decode_access_token(auth_header[7:])
        if subject:
            return f"user:{subject}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter = None):
        super().__init__(app)
        self.limiter = limiter or rate_limiter

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = client_key(request)
        allowed, remaining = self.limiter.is_allowed(key)
        limit_headers = {
            "X-RateLimit-Limit": str(self.limiter.requests),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not allowed:
            logger.warning(f"Throttled {key}: {request.method} {request.url.path}")
            detail = f"Rate limit exceeded. Try again in {self.limiter.window} seconds."
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": detail, "message": detail},
                headers={"Retry-After": str(self.limiter.window), **limit_headers},
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response

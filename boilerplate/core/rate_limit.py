"""Per-client request throttling for the auth and admin routers."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock

from fastapi import Request, Response

from boilerplate.core.config import settings
from boilerplate.core.exceptions import RateLimitExceeded


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class SlidingWindowLimiter:
    """Counts hits per key over the trailing window; one instance per app.

    Keys whose newest hit has left the window are dropped on a sweep that runs
    at most once per window, so idle clients do not accumulate.
    """

    def __init__(self, clock=time.monotonic) -> None:  # noqa: ANN001
        self._hits: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._clock = clock
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float, window_seconds: int) -> None:
        cutoff = now - window_seconds
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str, *, limit: int, window_seconds: int) -> RateDecision:
        if limit <= 0:
            return RateDecision(allowed=True, remaining=0)
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(now, window_seconds)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                wait = hits[0] + window_seconds - now
                return RateDecision(allowed=False, remaining=0, retry_after=max(int(wait), 1))
            hits.append(now)
            return RateDecision(allowed=True, remaining=limit - len(hits))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


SCOPE_LIMITS = {
    "auth": lambda: settings.RATE_LIMIT_AUTH_MAX_REQUESTS,
    "default": lambda: settings.RATE_LIMIT_MAX_REQUESTS,
}


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else "unknown"


def rate_limit(scope: str = "default"):
    limit_for = SCOPE_LIMITS.get(scope, SCOPE_LIMITS["default"])

    def _dependency(request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        limit = limit_for()
        window = settings.RATE_LIMIT_WINDOW_SECONDS
        limiter: SlidingWindowLimiter = request.app.state.rate_limiter
        decision = limiter.hit(f"{scope}:{client_ip(request)}", limit=limit, window_seconds=window)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Window"] = str(window)
        if not decision.allowed:
            raise RateLimitExceeded(retry_after=decision.retry_after, limit=limit, window_seconds=window)

    return _dependency

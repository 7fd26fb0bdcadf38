from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from cachetools import TTLCache
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..observability.logging import get_logger
from ..problem_details import problem_response
from ..settings import settings

REVIEW_SUBMIT_PATH = "/api/public/reviews"


@dataclass
class _Bucket:
    window_start: float
    count: int


class ReviewSubmitRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window, per-IP limit on public review submissions.

    In-memory per process, enough to slow down form spam. Buckets expire one
    window after they open and at most ``max_clients`` are tracked.
    """

    window_seconds = 60.0

    def __init__(self, app, *, max_clients: int = 10_000, timer=time.monotonic):
        super().__init__(app)
        self._timer = timer
        self._buckets: TTLCache[str, _Bucket] = TTLCache(
            maxsize=max_clients, ttl=self.window_seconds, timer=timer
        )
        self._lock = threading.Lock()
        self._log = get_logger("review_rate_limit")

    def _client_key(self, request: Request) -> str:
        # First X-Forwarded-For hop is the client behind the proxy.
        xff = (request.headers.get("x-forwarded-for") or "").strip()
        ip = xff.split(",")[0].strip() if xff else ""
        if not ip and request.client:
            ip = request.client.host or ""
        return ip or "unknown"

    def _hit(self, key: str, now: float, rpm: int) -> int | None:
        """Count one request; seconds to wait when over the limit, else None."""
        with self._lock:
            b = self._buckets.get(key)
            if b is None:
                # An expired bucket is gone, so this opens a new window.
                b = _Bucket(window_start=now, count=0)
                self._buckets[key] = b
            b.count += 1
            if b.count <= rpm:
                return None
            return int(max(1.0, self.window_seconds - (now - b.window_start)))

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method.upper() != "POST" or request.url.path != REVIEW_SUBMIT_PATH:
            return await call_next(request)

        rpm = max(1, min(600, int(settings.review_submit_rate_limit_rpm or 5)))
        key = self._client_key(request)
        retry_after = self._hit(key, self._timer(), rpm)
        if retry_after is not None:
            self._log.info("review_submit_rate_limited", client_ip=key, retry_after=retry_after)
            return problem_response(
                request=request,
                status_code=429,
                detail="Too many review submissions. Please try again later.",
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

"""In-process sliding-window rate limiting, exposed as FastAPI dependencies."""

from collections import defaultdict, deque
from typing import Deque, Dict, Optional
import logging
import math
import threading
import time

from fastapi import Request

from socialfeed.core.errors import AppError, ErrorKind

logger = logging.getLogger("socialfeed")


class RateLimitStore:
    """Request timestamps per key. One instance per application."""

    def __init__(self):
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def hit(self, key: str, limit: int, window_seconds: int, now: Optional[float] = None) -> Optional[int]:
        """
        Record a request for key. Returns None when allowed, otherwise the
        number of seconds until the oldest request leaves the window.
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            history = self._hits[key]
            while history and now - history[0] >= window_seconds:
                history.popleft()
            if len(history) >= limit:
                return max(1, math.ceil(window_seconds - (now - history[0])))
            history.append(now)
            return None

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RateLimiter:
    """
    Dependency enforcing `<prefix>_RATE_LIMIT` requests per
    `<prefix>_RATE_WINDOW_SECONDS` per client address.
    """

    def __init__(self, scope: str, setting_prefix: str, message: str):
        self.scope = scope
        self.setting_prefix = setting_prefix
        self.message = message

    def __call__(self, request: Request) -> None:
        settings = request.app.state.settings
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = getattr(settings, f"{self.setting_prefix}_RATE_LIMIT")
        window = getattr(settings, f"{self.setting_prefix}_RATE_WINDOW_SECONDS")
        client = request.client.host if request.client else "unknown"

        retry_after = request.app.state.rate_limits.hit(f"{self.scope}:{client}", limit, window)
        if retry_after is not None:
            logger.warning(f"Rate limit '{self.scope}' exceeded by {client} on {request.url.path}")
            raise AppError(
                ErrorKind.RATE_LIMITED,
                self.message,
                headers={"Retry-After": str(retry_after)},
            )


general_rate_limit = RateLimiter(
    "general", "GENERAL", "Too many requests from this IP, please try again later."
)
auth_rate_limit = RateLimiter(
    "auth", "AUTH", "Too many authentication attempts, please try again later."
)
post_creation_rate_limit = RateLimiter(
    "posts", "POST", "Too many posts created, please try again later."
)

"""In-memory sliding-window rate limiting per client address."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta


class RateLimiter:
    """Allow at most ``limit`` requests per client within ``window`` seconds."""

    def __init__(
        self,
        limit: int,
        window: float | timedelta,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window.total_seconds() if isinstance(window, timedelta) else float(window)
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def allow(self, client_ip: str) -> bool:
        """Record a request from ``client_ip`` and report whether it is allowed."""
        with self._lock:
            now = self._clock()
            history = self._requests.get(client_ip)
            if history is None:
                self._requests[client_ip] = [now]
                return True

            recent = [stamp for stamp in history if now - stamp < self.window]
            if len(recent) >= self.limit:
                self._requests[client_ip] = recent
                return False

            recent.append(now)
            self._requests[client_ip] = recent
            return True


def rate_limit_response() -> tuple[int, dict[str, object]]:
    """Status code and JSON body sent when a client is over its limit."""
    return 429, {"error": "Too many requests, please try again later", "code": 429}
"""Fixed-window rate limiter for the public contact-event endpoint.

Best-effort abuse guard, not a billing control: state lives in memory for
the lifetime of the limiter instance and is lost on restart. One instance
is created per application (see ``app.main``) and shared by all requests,
so the counter map is guarded by a lock.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 30
DEFAULT_WINDOW_SECONDS = 60


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int


@dataclass
class _WindowEntry:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Per-key counter that resets ``window_seconds`` after the first hit."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, _WindowEntry] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> RateLimitDecision:
        """Count one request against *key* and say whether it is admitted."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_at:
                self._entries[key] = _WindowEntry(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True, remaining=self.max_requests - 1)

            if entry.count >= self.max_requests:
                logger.debug("Rate limit hit for %s...", key[:12])
                return RateLimitDecision(allowed=False, remaining=0)

            entry.count += 1
            return RateLimitDecision(allowed=True, remaining=self.max_requests - entry.count)

    def reset(self, key: str) -> None:
        """Forget the window for a single key."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop all state (app shutdown, tests)."""
        with self._lock:
            self._entries.clear()

    def prune(self) -> int:
        """Remove expired windows. Returns how many were dropped."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now > e.reset_at]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

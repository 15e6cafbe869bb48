"""Sliding-window rate limiter keyed by arbitrary strings."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)


class RateLimitDecision(NamedTuple):
    """Outcome of a :meth:`SlidingWindowRateLimiter.check` call."""

    limited: bool
    retry_after: int = 0


class SlidingWindowRateLimiter:
    """Admits at most *max_requests* events per trailing *window_seconds*.

    Each key keeps the unix-second timestamps of its admitted events.
    Timestamps that have left the window are pruned only when that key is
    checked again; idle keys are never removed.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._windows: dict[str, list[int]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def check(self, key: str, max_requests: int, window_seconds: int) -> RateLimitDecision:
        """Record an event for *key* unless doing so would exceed the limit.

        *window_seconds* must be positive; callers are expected to enforce it.
        """
        now = int(self._clock())
        window_start = now - window_seconds

        with self._lock:
            timestamps = [ts for ts in self._windows.get(key, ()) if ts > window_start]

            if len(timestamps) >= max_requests:
                self._windows[key] = timestamps
                if timestamps:
                    retry_after = window_seconds - (now - timestamps[0])
                else:
                    retry_after = window_seconds
                retry_after = max(1, retry_after)
                logger.info("Rate limit hit for %s, retry after %ds", key, retry_after)
                return RateLimitDecision(limited=True, retry_after=retry_after)

            timestamps.append(now)
            self._windows[key] = timestamps
            return RateLimitDecision(limited=False)

    @property
    def tracked_keys(self) -> int:
        """Number of keys currently holding a window (useful for monitoring)."""
        with self._lock:
            return len(self._windows)

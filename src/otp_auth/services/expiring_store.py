"""In-memory key/value store with per-entry expiry and a background sweeper."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

# Seconds between background sweeps
DEFAULT_SWEEP_INTERVAL = 60.0


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    has_expiry: bool
    expire_at: float = 0.0

    def expired(self, now: float) -> bool:
        return self.has_expiry and now > self.expire_at


class ExpiringStore(Generic[V]):
    """Thread-safe mapping of ``key → value`` where entries may expire.

    An expired entry is logically absent as soon as its deadline passes.
    It is physically removed either lazily by :meth:`get` or eagerly by
    :meth:`sweep`, which the background sweeper calls every
    *sweep_interval* seconds once :meth:`start` has been called.
    """

    def __init__(
        self,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._data: dict[str, _Entry[V]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._stop_event = threading.Event()
        self._sweeper: threading.Thread | None = None

    # ── Key/value operations ─────────────────────────────

    def set(self, key: str, value: V, ttl: float | timedelta = 0) -> None:
        """Store *value* under *key*, overwriting any existing entry.

        A *ttl* of zero or less means the entry never expires.
        """
        seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        if seconds > 0:
            entry = _Entry(value, True, self._clock() + seconds)
        else:
            entry = _Entry(value, False)
        with self._lock:
            self._data[key] = entry

    def get(self, key: str) -> tuple[V | None, bool]:
        """Return ``(value, True)`` for a live entry, ``(None, False)`` otherwise."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None, False
            if entry.expired(self._clock()):
                self._data.pop(key, None)
                return None, False
            return entry.value, True

    def delete(self, key: str) -> None:
        """Remove *key*; a missing key is a no-op."""
        with self._lock:
            self._data.pop(key, None)

    def sweep(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._data.items() if e.expired(now)]
            for key in expired:
                del self._data[key]
        if expired:
            logger.debug("Swept %d expired entries", len(expired))
        return len(expired)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._data.get(key)
            return entry is not None and not entry.expired(self._clock())

    def __len__(self) -> int:
        """Physical entry count, including expired entries not yet reclaimed."""
        with self._lock:
            return len(self._data)

    # ── Background sweeper ───────────────────────────────

    @property
    def running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def start(self) -> None:
        """Launch the background sweeper thread (idempotent)."""
        if self.running:
            return
        self._stop_event.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="expiring-store-sweeper", daemon=True
        )
        self._sweeper.start()
        logger.info("Expiring store sweeper started (interval %.1fs)", self._sweep_interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the sweeper to exit and wait for it (idempotent)."""
        sweeper = self._sweeper
        if sweeper is None:
            return
        self._stop_event.set()
        sweeper.join(timeout)
        self._sweeper = None
        logger.info("Expiring store sweeper stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self._sweep_interval):
            self.sweep()

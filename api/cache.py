"""Time-boxed reuse of computed responses for identical requests."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

CACHE_TTL_SECONDS = 3600
CACHE_MAX_ENTRIES = 1024


class ResponseCache:
    """Results keyed by an order-independent request key, expiring after ``ttl`` seconds.

    Only successful computations are stored; a ttl of 0 disables caching.
    At most ``max_entries`` results are held; the oldest go first.
    """

    def __init__(
        self,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = CACHE_MAX_ENTRIES,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # Insertion order is age order.
        self._entries: dict[str, tuple[float, Any]] = {}

    def get_or_compute(self, key: str, compute: Callable[[], Any], ttl: float | None = None) -> Any:
        ttl = self.ttl if ttl is None else ttl
        if ttl <= 0:
            return compute()
        now = self._clock()
        with self._lock:
            hit = self._entries.get(key)
            if hit is not None and now - hit[0] < ttl:
                return hit[1]
        value = compute()
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock(), value)
            self._evict(self._clock(), ttl)
        return value

    def _evict(self, now: float, ttl: float) -> None:
        stale = [k for k, (at, _) in self._entries.items() if now - at >= ttl]
        for k in stale:
            del self._entries[k]
        while len(self._entries) > self.max_entries:
            del self._entries[next(iter(self._entries))]

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

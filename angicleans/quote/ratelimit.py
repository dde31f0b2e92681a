from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

WINDOW_SECONDS = 15 * 60
MAX_REQUESTS = 3


@dataclass
class RateLimitEntry:
    count: int
    first_request: float


class RateLimiter:
    """
    Fixed-window request counter keyed by client address.

    `admit` and `sweep` hold the same lock, so the read-check-write on an
    entry is atomic even when handlers run on worker threads.
    """

    def __init__(
        self,
        window_seconds: float = WINDOW_SECONDS,
        max_requests: int = MAX_REQUESTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def admit(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now - entry.first_request > self.window_seconds:
                self._entries[key] = RateLimitEntry(count=1, first_request=now)
                return True
            if entry.count >= self.max_requests:
                return False
            entry.count += 1
            return True

    def sweep(self) -> int:
        """Drop entries whose window has elapsed. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if now - entry.first_request > self.window_seconds
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class RateLimiter:
    """Sliding-window limit of `limit` requests per `window_seconds` per client."""

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.time):
        self.limit = limit
        self.window = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def check(self, client: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(client, deque())
            while hits and now - hits[0] >= self.window:
                hits.popleft()

            allowed = len(hits) < self.limit
            if allowed:
                hits.append(now)

            reset = int(max(0.0, hits[0] + self.window - now)) if hits else self.window
            return RateLimitDecision(
                allowed=allowed,
                limit=self.limit,
                remaining=max(0, self.limit - len(hits)),
                reset_seconds=reset,
            )

    def allow(self, client: str) -> bool:
        return self.check(client).allowed

    def prune(self) -> None:
        """Drop clients with no requests left in the window."""
        now = self._clock()
        with self._lock:
            idle = [c for c, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]
            for c in idle:
                del self._hits[c]

"""
Rate Limiter

Fixed-window request counting keyed by an arbitrary string (client IP,
route name, email digest).
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_seconds: int


class RateLimiter(ABC):
    @abstractmethod
    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        """Count one request against key and decide whether it may proceed."""
        pass


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local fixed window.

    Counts live in this process only: they reset on restart and are not
    shared between workers.
    """

    def __init__(self, time_func=time.monotonic):
        self._time = time_func
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        async with self._lock:
            now = self._time()
            started, count = self._windows.get(key, (now, 0))
            if now - started >= window_seconds:
                started, count = now, 0

            count += 1
            self._windows[key] = (started, count)
            self._prune(now, window_seconds)

            reset = max(1, math.ceil(started + window_seconds - now))
            return RateLimitDecision(
                allowed=count <= limit,
                remaining=max(0, limit - count),
                reset_seconds=reset,
            )

    def _prune(self, now: float, window_seconds: int) -> None:
        if len(self._windows) < 10_000:
            return
        expired = [k for k, (started, _) in self._windows.items() if now - started >= window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self, key: str) -> None:
        self._windows.pop(key, None)

# ============================================================
# FILE: alerts/rate_limiter.py
# ============================================================

import threading
import time
from typing import Callable


class RateLimiter:
    """Allows at most one event per cooldown window."""

    def __init__(self, cooldown_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._last_allowed = None
    
    def try_acquire(self) -> bool:
        with self._lock:
            now = self.clock()
            if self._last_allowed is not None and now - self._last_allowed < self.cooldown_seconds:
                return False
            self._last_allowed = now
            return True
    
    def seconds_remaining(self) -> float:
        with self._lock:
            if self._last_allowed is None:
                return 0.0
            return max(0.0, self.cooldown_seconds - (self.clock() - self._last_allowed))

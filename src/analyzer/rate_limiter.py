"""Sliding-window admission control for model invocations."""

import threading
import time
from collections import deque
from typing import Callable, Optional


class RateLimiter:
    """Bounds model calls to ``max_requests`` per ``window`` seconds.

    try_admit() trims timestamps that have left the window, then either
    records the call or denies it. Trim, check and record happen under one
    lock so concurrent callers can never admit more than capacity.
    Denial is immediate; retrying is the caller's decision.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the limiter.

        Args:
            max_requests: Calls admitted per window.
            window: Window width in seconds.
            clock: Monotonic time source (injectable for tests).
        """
        self._max_requests = max_requests
        self._window = window
        self._clock = clock
        self._calls: deque[float] = deque()
        self._lock = threading.Lock()

    def _trim(self, now: float) -> None:
        cutoff = now - self._window
        while self._calls and self._calls[0] <= cutoff:
            self._calls.popleft()

    def try_admit(self, now: Optional[float] = None) -> bool:
        """Admit and record a call at ``now`` if the window has room.

        Args:
            now: Call time; defaults to the limiter's clock.

        Returns:
            True if the call was admitted and recorded, False if denied.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            self._trim(now)
            if len(self._calls) >= self._max_requests:
                return False
            self._calls.append(now)
            return True

    def retry_after(self, now: Optional[float] = None) -> float:
        """Seconds until the oldest recorded call leaves the window."""
        with self._lock:
            if now is None:
                now = self._clock()
            self._trim(now)
            if len(self._calls) < self._max_requests:
                return 0.0
            return max(0.0, self._calls[0] + self._window - now)

    def is_limited(self, now: Optional[float] = None) -> bool:
        """Whether a call made now would be denied. Records nothing."""
        with self._lock:
            if now is None:
                now = self._clock()
            self._trim(now)
            return len(self._calls) >= self._max_requests

    def recent_count(self, now: Optional[float] = None) -> int:
        """Number of calls recorded within the current window."""
        with self._lock:
            if now is None:
                now = self._clock()
            self._trim(now)
            return len(self._calls)

    def reset(self) -> None:
        with self._lock:
            self._calls.clear()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window(self) -> float:
        return self._window

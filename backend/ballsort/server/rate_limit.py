"""Fixed window rate limiter for WebSocket message throttling."""

import time


class FixedWindowRateLimiter:
    """Rate limiter counting messages in fixed time windows.

    The counter resets once ``window`` seconds have passed since the current
    window opened. allow() returns False for every message past
    ``max_messages`` within a window (caller should drop it).
    """

    def __init__(self, window: float, max_messages: int) -> None:
        self._window = window
        self._max_messages = max_messages
        self._count = 0
        self._window_start = time.monotonic()

    def allow(self) -> bool:
        """Count one message. Returns True if allowed, False if rate-limited."""
        now = time.monotonic()
        if now - self._window_start > self._window:
            self._count = 0
            self._window_start = now

        self._count += 1
        return self._count <= self._max_messages

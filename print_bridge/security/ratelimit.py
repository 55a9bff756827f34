"""Rate limiting using in-memory sliding window counters.

Enforces per-client request limits keyed by client identity (the
connection's source host). Timestamps of recent requests are stored in a
deque per client; entries 60 seconds old or older are pruned on every check,
so the map never grows past active clients x recent requests.

Returns standard rate limit metadata for response headers:
- X-RateLimit-Limit
- X-RateLimit-Remaining
- X-RateLimit-Reset
"""

import asyncio
import time
from collections import defaultdict, deque
from dataclasses import dataclass

WINDOW_SECONDS = 60.0  # 1-minute sliding window


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: float


class SlidingWindowLimiter:
    """Per-client sliding window shared by every request of one app.

    A single lock serializes the purge-and-append; it is never held across
    any other await.
    """

    def __init__(self, window_seconds: float = WINDOW_SECONDS):
        self._window_seconds = window_seconds
        self._windows: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def check(self, client_id: str, limit: int) -> RateLimitResult:
        """Record a request for ``client_id`` unless it would exceed ``limit``.

        Rejected attempts are not recorded.
        """
        async with self._lock:
            now = time.time()
            window = self._windows[client_id]

            # Prune expired timestamps from the left
            while window and now - window[0] >= self._window_seconds:
                window.popleft()

            if len(window) >= limit:
                # Calculate when the oldest request in the window expires
                reset = window[0] + self._window_seconds - now
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_seconds=round(reset, 1),
                )

            window.append(now)
            remaining = max(0, limit - len(window))
            reset = window[0] + self._window_seconds - now

            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=remaining,
                reset_seconds=round(reset, 1),
            )

    def window_count(self, client_id: str) -> int:
        window = self._windows.get(client_id)
        return len(window) if window else 0

    def tracked_clients(self) -> int:
        return len(self._windows)

    def reset(self, client_id: str | None = None) -> None:
        """Clear rate limit state for one client, or for all of them."""
        if client_id is None:
            self._windows.clear()
        else:
            self._windows.pop(client_id, None)

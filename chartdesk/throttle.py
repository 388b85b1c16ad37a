# chartdesk/throttle.py
"""
Render cache invalidation throttle.

Indicator values are always updated immediately; what is throttled is the
signal telling the renderer to drop its cached geometry. Trade-driven
revisions can arrive many times per second, so they invalidate at most once
per `min_interval_ms`. Rebuilds invalidate unconditionally.
"""

import time
from typing import Callable, Optional

DEFAULT_THROTTLE_MS = 200


class CacheThrottle:
    """
    Wall-clock gated cache invalidation.

    Args:
        min_interval_ms: Minimum time between two throttled invalidations
        on_invalidate: Callback run on every invalidation (renderer cache clear)
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        min_interval_ms: int = DEFAULT_THROTTLE_MS,
        on_invalidate: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms must be >= 0")
        self.min_interval_ms = min_interval_ms
        self.on_invalidate = on_invalidate
        self._clock = clock
        self._last_invalidation = clock()
        self.generation = 0

    def invalidate(self) -> None:
        """Invalidate now, regardless of when the last invalidation happened."""
        self._last_invalidation = self._clock()
        self.generation += 1
        if self.on_invalidate is not None:
            self.on_invalidate()

    def maybe_invalidate(self) -> bool:
        """Invalidate only if the minimum interval has elapsed. Returns True if it did."""
        elapsed_ms = (self._clock() - self._last_invalidation) * 1000.0
        if elapsed_ms < self.min_interval_ms:
            return False
        self.invalidate()
        return True

    def __repr__(self) -> str:
        return (
            f"CacheThrottle(min_interval_ms={self.min_interval_ms}, "
            f"generation={self.generation})"
        )

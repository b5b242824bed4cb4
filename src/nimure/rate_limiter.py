"""Client-side rate limiting for Azure CLI calls.

Azure throttles chatty clients, so every gated Azure CLI invocation first
passes through a RateLimiter: a fixed one-minute request window combined
with a minimum interval between consecutive requests.

Design Philosophy:
- Ruthless simplicity: one class, three decisions (throttle, wait, record)
- Non-blocking: waits are asyncio sleeps, never time.sleep
- Observable: clear logging of rate limiting waits
- Testable: clock is injected, no real time needed in tests

Usage:
    from nimure.rate_limiter import RateLimiter

    limiter = RateLimiter(config.rate_limiting)
    await limiter.acquire()      # waits if needed, then records the request
    result = await executor.execute([...])
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from nimure.config_manager import RateLimitSettings

logger = logging.getLogger(__name__)

# Length of the request counting window
WINDOW_MS = 60000


@dataclass
class RateLimitState:
    """Mutable request bookkeeping.

    Attributes:
        last_request_time_ms: Epoch milliseconds of the last recorded request
        request_count: Requests recorded in the current window
        window_start_ms: Epoch milliseconds at which the current window began
    """

    last_request_time_ms: float = 0.0
    request_count: int = 0
    window_start_ms: float = 0.0


class RateLimiter:
    """Decide whether an Azure CLI call must be delayed, and by how much.

    A single instance is shared by every client of one session so that the
    limit applies process-wide.

    Example:
        >>> limiter = RateLimiter(RateLimitSettings(min_interval_ms=1000))
        >>> limiter.should_throttle()
        False
        >>> limiter.record_request()
        >>> limiter.should_throttle()
        True
    """

    def __init__(
        self,
        settings: RateLimitSettings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize rate limiter.

        Args:
            settings: Rate limiting settings (defaults when None)
            clock: Returns the current time in epoch seconds
        """
        self.settings = settings or RateLimitSettings()
        self.state = RateLimitState()
        self._clock = clock
        self._lock = asyncio.Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def should_throttle(self) -> bool:
        """Check whether the next request must wait.

        Resets the request window when more than a minute has elapsed.

        Returns:
            True if the per-minute budget is spent or the minimum interval
            since the last request has not yet elapsed
        """
        if not self.settings.enabled:
            return False

        now = self._now_ms()

        if now - self.state.window_start_ms > WINDOW_MS:
            self.state.request_count = 0
            self.state.window_start_ms = now

        if self.state.request_count >= self.settings.max_requests_per_minute:
            return True

        return now - self.state.last_request_time_ms < self.settings.min_interval_ms

    def wait_time_ms(self) -> int:
        """Milliseconds to wait before the next request (0 when not throttled)."""
        if not self.should_throttle():
            return 0

        elapsed = self._now_ms() - self.state.last_request_time_ms
        return max(0, math.ceil(self.settings.min_interval_ms - elapsed))

    def record_request(self) -> None:
        """Record a request as dispatched now."""
        self.state.last_request_time_ms = self._now_ms()
        self.state.request_count += 1

    async def acquire(self) -> None:
        """Wait (without blocking the event loop) until a request may be sent.

        The request is recorded before returning, i.e. immediately before the
        caller dispatches it. Concurrent callers are serialised so each one
        sees the request recorded by the previous one.
        """
        async with self._lock:
            wait_ms = self.wait_time_ms()
            if wait_ms > 0:
                logger.info(f"Rate limiting: waiting {math.ceil(wait_ms / 1000)} seconds...")
                await asyncio.sleep(wait_ms / 1000)
            self.record_request()

    def reset(self) -> None:
        """Forget all recorded requests."""
        self.state = RateLimitState()


__all__ = ["WINDOW_MS", "RateLimitState", "RateLimiter"]

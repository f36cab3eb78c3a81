"""Token bucket rate limiter shared by the HTTP clients."""

import asyncio
import time
from dataclasses import dataclass, field

from src.core.logger.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimiter:
    """Token bucket rate limiter for outbound API requests.

    Tokens are added at ``rate`` per second up to ``capacity``; each request
    consumes one token. Waiters sleep outside the lock so other coroutines
    can refill and proceed.
    """

    rate: float = 10.0
    """Tokens added per second."""

    capacity: float = 20.0
    """Maximum burst size."""

    _tokens: float = field(default=0.0, init=False, repr=False)
    _last_update: float = field(default_factory=time.monotonic, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError("rate must be positive")
        self._tokens = self.capacity

    @classmethod
    def from_requests_per_window(
        cls, requests: int, window_seconds: float = 30.0
    ) -> "RateLimiter":
        """Create a limiter allowing ``requests`` per ``window_seconds``.

        Args:
            requests: Number of requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimiter with a burst capacity of ``requests``.
        """
        return cls(rate=requests / window_seconds, capacity=float(requests))

    async def acquire(self, tokens: float = 1.0) -> None:
        """Acquire tokens, waiting if necessary.

        Args:
            tokens: Number of tokens to acquire.
        """
        async with self._lock:
            while True:
                self._refill()

                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return

                wait_time = (tokens - self._tokens) / self.rate
                logger.debug(f"Rate limited, waiting {wait_time:.2f}s")

                self._lock.release()
                try:
                    await asyncio.sleep(wait_time)
                finally:
                    await self._lock.acquire()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_update
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._last_update = now

    @property
    def available(self) -> float:
        """Currently available tokens, without refilling."""
        return self._tokens

    def reset(self) -> None:
        """Reset the limiter to full capacity."""
        self._tokens = self.capacity
        self._last_update = time.monotonic()

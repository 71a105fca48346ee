"""
Rate Limiter - Token Bucket Algorithm
======================================

Keeps the load on the scraped sources courteous:
- Token bucket caps the request rate
- Minimum spacing between requests with random jitter
- Adaptive variant backs off after 429 responses
"""

import asyncio
import random
import time
from typing import Optional

from b3scraper.utils.logger import get_logger

log = get_logger(__name__)


class RateLimiter:
    """
    Token bucket rate limiter with jitter

    Example:
        >>> limiter = RateLimiter(requests_per_minute=20, base_delay=2.0)
        >>> await limiter.acquire()  # Wait if necessary, then proceed
    """

    def __init__(
        self,
        requests_per_minute: int = 20,
        base_delay: float = 2.0,
        jitter_range: float = 1.0,
        burst_size: Optional[int] = None
    ):
        """
        Args:
            requests_per_minute: Maximum requests allowed per minute
            base_delay: Minimum spacing between requests in seconds
            jitter_range: Random jitter (±seconds) added to base delay
            burst_size: Maximum burst size (default: requests_per_minute)
        """
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")

        self.requests_per_minute = requests_per_minute
        self.base_delay = base_delay
        self.jitter_range = jitter_range
        self.burst_size = burst_size or requests_per_minute

        self.tokens = float(self.burst_size)
        self.max_tokens = float(self.burst_size)
        self.refill_rate = requests_per_minute / 60.0  # tokens per second
        self.last_refill = time.monotonic()
        self.last_request: Optional[float] = None

        self._lock = asyncio.Lock()

        log.debug(
            "RateLimiter initialized: {} req/min, {}s base delay, ±{}s jitter",
            requests_per_minute, base_delay, jitter_range
        )

    def _refill_tokens(self):
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.max_tokens, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def _calculate_delay(self) -> float:
        jitter = random.uniform(-self.jitter_range, self.jitter_range)
        return max(0.0, self.base_delay + jitter)

    async def acquire(self):
        """
        Wait for the minimum spacing since the last request, then for a
        token, and consume it.
        """
        async with self._lock:
            self._refill_tokens()

            if self.last_request is not None:
                elapsed = time.monotonic() - self.last_request
                delay = self._calculate_delay()
                if elapsed < delay:
                    wait_time = delay - elapsed
                    log.debug(f"Waiting {wait_time:.2f}s for rate limit")
                    await asyncio.sleep(wait_time)

            while self.tokens < 1.0:
                wait_time = (1.0 - self.tokens) / self.refill_rate
                log.debug(f"No tokens available, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._refill_tokens()

            self.tokens -= 1.0
            self.last_request = time.monotonic()


class AdaptiveRateLimiter(RateLimiter):
    """
    Rate limiter that slows down on 429 responses and recovers slowly
    after consecutive successes.
    """

    def __init__(
        self,
        requests_per_minute: int = 20,
        base_delay: float = 2.0,
        jitter_range: float = 1.0,
        burst_size: Optional[int] = None,
        backoff_factor: float = 2.0,
        recovery_factor: float = 1.1,
        max_delay: float = 60.0
    ):
        super().__init__(requests_per_minute, base_delay, jitter_range, burst_size)
        self.initial_delay = base_delay
        self.backoff_factor = backoff_factor
        self.recovery_factor = recovery_factor
        self.max_delay = max_delay
        self.consecutive_successes = 0
        self.consecutive_failures = 0

    def on_rate_limit_error(self):
        """Increase spacing after the server answered 429"""
        self.consecutive_failures += 1
        self.consecutive_successes = 0

        old_delay = self.base_delay
        self.base_delay = min(self.max_delay, max(self.base_delay, 0.5) * self.backoff_factor)

        log.warning(
            f"Rate limit hit! Increasing delay from {old_delay:.2f}s to "
            f"{self.base_delay:.2f}s (failure #{self.consecutive_failures})"
        )

    def on_success(self):
        """Gradually return to the initial spacing"""
        self.consecutive_successes += 1
        self.consecutive_failures = 0

        if self.consecutive_successes >= 5 and self.base_delay > self.initial_delay:
            old_delay = self.base_delay
            self.base_delay = max(self.initial_delay, self.base_delay / self.recovery_factor)
            log.debug(f"Recovering rate limit: {old_delay:.2f}s -> {self.base_delay:.2f}s")
            self.consecutive_successes = 0

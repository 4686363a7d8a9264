"""Retry policy for rate-limited source-control calls."""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from designproof.config import RetryConfig
from designproof.services.github_service import FetchRateLimited

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExhausted(Exception):
    """Rate limiting outlasted every allowed attempt."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Gave up after {attempts} rate-limited attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class RetryPolicy:
    """Retries an async call while it reports rate limiting.

    The default is bounded exponential backoff with jitter. ``forever``
    builds a policy that waits a fixed pause and never gives up.
    """

    def __init__(
        self,
        max_attempts: Optional[int] = 5,
        base_delay: float = 2.0,
        backoff_factor: float = 2.0,
        max_delay: float = 60.0,
        jitter: bool = True,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay
        self.jitter = jitter

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        if config.max_attempts is None:
            return cls.forever(config.base_delay)
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
            backoff_factor=config.backoff_factor,
            max_delay=config.max_delay,
            jitter=config.jitter,
        )

    @classmethod
    def forever(cls, pause: float = 60.0) -> "RetryPolicy":
        return cls(
            max_attempts=None,
            base_delay=pause,
            backoff_factor=1.0,
            max_delay=pause,
            jitter=False,
        )

    def delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        if retry_after is not None:
            return min(float(retry_after), self.max_delay)
        wait = min(self.base_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)
        if self.jitter:
            wait = random.uniform(wait / 2, wait)
        return wait

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        sleep: Optional[Sleep] = None,
        description: str = "request",
    ) -> T:
        """Await ``fn`` until it stops raising FetchRateLimited.

        Args:
            fn: Zero-argument coroutine factory
            sleep: Awaitable sleep, injectable for tests
            description: Used in log messages

        Returns:
            Whatever ``fn`` returns

        Raises:
            RetryExhausted: If every allowed attempt was rate limited
        """
        sleep = sleep or asyncio.sleep
        attempt = 0
        while True:
            attempt += 1
            try:
                return await fn()
            except FetchRateLimited as e:
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    raise RetryExhausted(attempt, e) from e
                wait = self.delay(attempt, e.retry_after)
                limit = self.max_attempts if self.max_attempts is not None else "inf"
                logger.warning(
                    f"Rate limited on {description}, retrying in {wait:.1f}s "
                    f"(attempt {attempt}/{limit})"
                )
                await sleep(wait)

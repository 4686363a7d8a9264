"""Tests for the rate-limit retry policy."""

import pytest
from unittest.mock import AsyncMock

from designproof.config import RetryConfig
from designproof.services.github_service import FetchNotFound, FetchRateLimited
from designproof.services.retry import RetryExhausted, RetryPolicy


class TestRetryPolicyDelay:
    """Test back-off computation."""

    def test_exponential_backoff(self):
        """Delays grow by the backoff factor up to the cap."""
        policy = RetryPolicy(base_delay=2.0, backoff_factor=2.0, max_delay=10.0, jitter=False)

        assert [policy.delay(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 10.0]

    def test_jitter_stays_below_delay(self):
        """Jittered delays fall within half to full backoff."""
        policy = RetryPolicy(base_delay=4.0, jitter=True)

        for _ in range(20):
            assert 2.0 <= policy.delay(1) <= 4.0

    def test_retry_after_wins(self):
        """A server-provided wait is honored, capped at max_delay."""
        policy = RetryPolicy(max_delay=60.0)

        assert policy.delay(1, retry_after=15) == 15.0
        assert policy.delay(1, retry_after=600) == 60.0

    def test_forever_uses_fixed_pause(self):
        """The unbounded policy pauses the same amount every time."""
        policy = RetryPolicy.forever(pause=60.0)

        assert policy.max_attempts is None
        assert {policy.delay(n) for n in range(1, 10)} == {60.0}

    def test_from_config(self):
        """Config records build the matching policy."""
        bounded = RetryPolicy.from_config(RetryConfig(max_attempts=3, jitter=False))
        unbounded = RetryPolicy.from_config(RetryConfig(max_attempts=None, base_delay=5.0))

        assert bounded.max_attempts == 3
        assert not bounded.jitter
        assert unbounded.max_attempts is None
        assert unbounded.delay(4) == 5.0


class TestRetryPolicyRun:
    """Test retrying calls."""

    @pytest.mark.asyncio
    async def test_returns_after_rate_limits(self):
        """Rate-limited attempts are retried until one succeeds."""
        fn = AsyncMock(side_effect=[FetchRateLimited("slow down"), FetchRateLimited("slow down"), "ok"])
        sleep = AsyncMock()
        policy = RetryPolicy(max_attempts=5, base_delay=1.0, jitter=False)

        result = await policy.run(fn, sleep=sleep)

        assert result == "ok"
        assert fn.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        """Giving up raises RetryExhausted with the last error."""
        error = FetchRateLimited("slow down")
        fn = AsyncMock(side_effect=error)
        sleep = AsyncMock()

        with pytest.raises(RetryExhausted) as exc:
            await RetryPolicy(max_attempts=3, jitter=False).run(fn, sleep=sleep)

        assert exc.value.attempts == 3
        assert exc.value.last_error is error
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        """Errors other than rate limiting are not retried."""
        fn = AsyncMock(side_effect=FetchNotFound("gone"))
        sleep = AsyncMock()

        with pytest.raises(FetchNotFound):
            await RetryPolicy().run(fn, sleep=sleep)

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_forever_keeps_trying(self):
        """The unbounded policy outlasts any number of rate limits."""
        fn = AsyncMock(side_effect=[FetchRateLimited("wait")] * 25 + ["done"])
        sleep = AsyncMock()

        result = await RetryPolicy.forever(pause=60.0).run(fn, sleep=sleep)

        assert result == "done"
        assert sleep.await_count == 25

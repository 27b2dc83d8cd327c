"""
Unit tests for retry utility functions.
"""

import asyncio

import pytest

from dealer_vision.utils.retry import RetryConfig, retry_async_with_backoff, retry_with_backoff


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = RetryConfig()
        assert config.max_retries == 3
        assert config.base_delay == 1.0
        assert config.max_delay == 60.0
        assert config.exponential_base == 2.0

    def test_validation_negative_retries(self):
        """Test that negative retries raises error."""
        with pytest.raises(ValueError, match="max_retries"):
            RetryConfig(max_retries=-1)

    def test_validation_invalid_base_delay(self):
        """Test that zero/negative base_delay raises error."""
        with pytest.raises(ValueError, match="base_delay"):
            RetryConfig(base_delay=0)

    def test_validation_max_delay_less_than_base(self):
        """Test that max_delay < base_delay raises error."""
        with pytest.raises(ValueError, match="max_delay"):
            RetryConfig(base_delay=10.0, max_delay=5.0)

    def test_validation_exponential_base(self):
        """Test that a non-growing exponential base raises error."""
        with pytest.raises(ValueError, match="exponential_base"):
            RetryConfig(exponential_base=1.0)

    def test_delay_for_grows_exponentially(self):
        """Test backoff delays for successive attempts."""
        config = RetryConfig(base_delay=1.6, exponential_base=2.0)
        assert config.delay_for(0) == pytest.approx(1.6)
        assert config.delay_for(1) == pytest.approx(3.2)
        assert config.delay_for(2) == pytest.approx(6.4)

    def test_delay_for_capped(self):
        """Test that delays never exceed max_delay."""
        config = RetryConfig(base_delay=1.0, max_delay=5.0)
        assert config.delay_for(10) == 5.0


class TestRetryWithBackoff:
    """Tests for retry_with_backoff function."""

    def test_succeeds_on_first_try(self):
        """Test function that succeeds immediately."""
        call_count = [0]

        def success_func():
            call_count[0] += 1
            return "vehicles"

        assert retry_with_backoff(success_func) == "vehicles"
        assert call_count[0] == 1

    def test_succeeds_after_retries(self):
        """Test function that succeeds after some failures."""
        call_count = [0]

        def eventual_success():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectionError("Transient error")
            return "ok"

        config = RetryConfig(max_retries=5, base_delay=0.01)
        assert retry_with_backoff(eventual_success, config=config) == "ok"
        assert call_count[0] == 3

    def test_exhausts_retries(self):
        """Test that all retries are exhausted and exception is raised."""
        call_count = [0]

        def always_fails():
            call_count[0] += 1
            raise ValueError("Persistent error")

        config = RetryConfig(max_retries=2, base_delay=0.01)

        with pytest.raises(ValueError, match="Persistent error"):
            retry_with_backoff(always_fails, config=config)

        assert call_count[0] == 3  # Initial + 2 retries

    def test_zero_retries_calls_once(self):
        """Test that max_retries=0 makes exactly one attempt."""
        call_count = [0]

        def fails():
            call_count[0] += 1
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            retry_with_backoff(fails, config=RetryConfig(max_retries=0, base_delay=0.01))
        assert call_count[0] == 1

    def test_retry_on_specific_exception(self):
        """Test retrying only on specific exceptions."""
        call_count = [0]

        def mixed_exceptions():
            call_count[0] += 1
            if call_count[0] == 1:
                raise ConnectionError("Retry this")
            raise ValueError("Don't retry this")

        config = RetryConfig(max_retries=3, base_delay=0.01)

        with pytest.raises(ValueError, match="Don't retry this"):
            retry_with_backoff(mixed_exceptions, config=config, retry_on=(ConnectionError,))

        assert call_count[0] == 2  # First call + one retry

    def test_on_retry_callback(self):
        """Test that on_retry callback is called."""
        retry_info = []

        def failing_func():
            raise ConnectionError("Error")

        config = RetryConfig(max_retries=2, base_delay=0.01)

        with pytest.raises(ConnectionError):
            retry_with_backoff(
                failing_func,
                config=config,
                on_retry=lambda attempt, exc: retry_info.append((attempt, str(exc))),
            )

        assert retry_info == [(1, "Error"), (2, "Error")]


class TestRetryAsyncWithBackoff:
    """Tests for retry_async_with_backoff function."""

    def test_succeeds_after_retries(self):
        """Test coroutine that succeeds after a failure."""
        call_count = [0]

        async def goto():
            call_count[0] += 1
            if call_count[0] == 1:
                raise TimeoutError("navigation timeout")
            return 200

        config = RetryConfig(max_retries=2, base_delay=0.01)
        assert asyncio.run(retry_async_with_backoff(goto, config=config)) == 200
        assert call_count[0] == 2

    def test_exhausts_retries(self):
        """Test that the last exception propagates."""
        call_count = [0]

        async def goto():
            call_count[0] += 1
            raise RuntimeError("HTTP status 503")

        config = RetryConfig(max_retries=1, base_delay=0.01)
        with pytest.raises(RuntimeError, match="503"):
            asyncio.run(retry_async_with_backoff(goto, config=config))
        assert call_count[0] == 2

"""
Retry utility with exponential backoff for dealer-vision.

Used around the two network-bound collaborators: page navigation
(async) and the Gemini vision call (blocking SDK call).
"""

import asyncio
import time
from typing import Awaitable, Callable, TypeVar, Optional
from dataclasses import dataclass
from dealer_vision.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0

    def __post_init__(self):
        """Validate configuration."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base <= 1:
            raise ValueError("exponential_base must be > 1")

    def delay_for(self, attempt: int) -> float:
        """Backoff delay in seconds after the given zero-based attempt."""
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


def retry_with_backoff(
    func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> T:
    """
    Retry a function with exponential backoff.

    Args:
        func: Function to retry (takes no arguments)
        config: Retry configuration (default: 3 retries, 1s base delay)
        retry_on: Tuple of exception types to retry on
        on_retry: Optional callback called on each retry (attempt, exception)

    Returns:
        Result from successful function call

    Raises:
        Last exception if all retries exhausted

    Example:
        >>> response = retry_with_backoff(
        ...     lambda: model.generate_content([prompt, image_part]),
        ...     config=RetryConfig(max_retries=2, base_delay=1.6),
        ... )
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.error(f"All {config.max_retries} retries exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                f"Retry {attempt + 1}/{config.max_retries} "
                f"after {delay:.2f}s: {e}"
            )

            if on_retry:
                on_retry(attempt + 1, e)

            time.sleep(delay)

    raise RuntimeError("Retry logic error")


async def retry_async_with_backoff(
    func: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> T:
    """
    Async version of retry_with_backoff.

    Args:
        func: Zero-argument coroutine function to retry
        config: Retry configuration
        retry_on: Tuple of exception types to retry on
        on_retry: Optional callback called on each retry (attempt, exception)

    Returns:
        Result from the first successful await

    Example:
        >>> await retry_async_with_backoff(
        ...     lambda: page.goto(url, wait_until="networkidle"),
        ...     config=RetryConfig(max_retries=2, base_delay=2.0),
        ... )
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return await func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.error(f"All {config.max_retries} retries exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                f"Retry {attempt + 1}/{config.max_retries} "
                f"after {delay:.2f}s: {e}"
            )

            if on_retry:
                on_retry(attempt + 1, e)

            await asyncio.sleep(delay)

    raise RuntimeError("Retry logic error")

"""
Async wait-with-predicate utility.

Every polling loop in the pipeline (content readiness, scroll stall
detection, image-load waits) goes through wait_for_condition so that
timeouts and retry ceilings are reported the same way.
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from dealer_vision.core.logging import get_logger

logger = get_logger(__name__)


class WaitOutcome(str, Enum):
    """How a wait_for_condition call ended."""
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"
    EXHAUSTED = "exhausted"

    @property
    def ok(self) -> bool:
        return self is WaitOutcome.SATISFIED


async def wait_for_condition(
    predicate: Callable[[], Awaitable[bool]],
    interval_ms: int,
    timeout_ms: Optional[int] = None,
    max_attempts: Optional[int] = None,
    initial_delay_ms: int = 0,
) -> WaitOutcome:
    """
    Poll an async predicate until it returns True or a bound is hit.

    The predicate is checked immediately (after initial_delay_ms), then
    once per interval. At least one bound must be given.

    Args:
        predicate: Zero-argument coroutine function returning bool
        interval_ms: Delay between checks
        timeout_ms: Wall-clock bound; TIMED_OUT when exceeded
        max_attempts: Check-count bound; EXHAUSTED when reached
        initial_delay_ms: Settle delay before the first check

    Returns:
        WaitOutcome.SATISFIED, TIMED_OUT or EXHAUSTED

    Raises:
        ValueError: If neither timeout_ms nor max_attempts is given
        Any exception raised by the predicate
    """
    if timeout_ms is None and max_attempts is None:
        raise ValueError("wait_for_condition needs timeout_ms or max_attempts")
    if interval_ms < 0:
        raise ValueError("interval_ms must be non-negative")

    if initial_delay_ms > 0:
        await asyncio.sleep(initial_delay_ms / 1000)

    deadline = time.monotonic() + timeout_ms / 1000 if timeout_ms is not None else None
    attempts = 0

    while True:
        attempts += 1
        if await predicate():
            return WaitOutcome.SATISFIED

        if max_attempts is not None and attempts >= max_attempts:
            logger.debug(f"Condition not met after {attempts} attempts")
            return WaitOutcome.EXHAUSTED

        if deadline is not None and time.monotonic() + interval_ms / 1000 > deadline:
            logger.debug(f"Condition not met within {timeout_ms}ms")
            return WaitOutcome.TIMED_OUT

        await asyncio.sleep(interval_ms / 1000)

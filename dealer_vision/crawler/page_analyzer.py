"""
Page analysis functions for the capture pipeline.

This module checks whether vehicle listing content has rendered and
reads simple page measurements.
"""

from typing import List

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorType, ErrorStage
from dealer_vision.crawler.scripts import HAS_ANY_SELECTOR_JS, SCROLL_HEIGHT_JS
from dealer_vision.crawler.session import ViewportSession
from dealer_vision.utils.polling import wait_for_condition

logger = get_logger(__name__)


# Evidence that listing content has rendered
CONTENT_READY_SELECTORS: List[str] = [
    '[class*="vehicle"]',
    '[class*="inventory"]',
    '[class*="listing"]',
    '[class*="product"]',
    'img[src*="bus"]',
    'img[src*="vehicle"]',
    '[class*="price"]',
    '[class*="description"]',
]


async def scroll_height(session: ViewportSession) -> int:
    """
    Get the total scrollable height of the page.

    Returns:
        Height in pixels (0 if the page cannot be measured)
    """
    try:
        return int(await session.page.evaluate(SCROLL_HEIGHT_JS))
    except Exception:
        return 0


async def has_vehicle_content(session: ViewportSession, selectors: List[str] = None) -> bool:
    """True if any content-indicative selector matches at least one element."""
    return bool(await session.page.evaluate(HAS_ANY_SELECTOR_JS, selectors or CONTENT_READY_SELECTORS))


async def wait_for_vehicle_content(
    session: ViewportSession,
    timeout_ms: int = 10_000,
    interval_ms: int = 250,
    selectors: List[str] = None,
) -> bool:
    """
    Wait until vehicle listing content appears, up to timeout_ms.

    Advisory only: on timeout the run continues. Never raises.

    Args:
        session: Active viewport session
        timeout_ms: Maximum wait in milliseconds
        interval_ms: Poll interval
        selectors: Override for CONTENT_READY_SELECTORS

    Returns:
        True if content was detected, False on timeout or error
    """
    selectors = selectors or CONTENT_READY_SELECTORS
    try:
        outcome = await wait_for_condition(
            lambda: has_vehicle_content(session, selectors),
            interval_ms=interval_ms,
            timeout_ms=timeout_ms,
        )
    except Exception as e:
        logger.warning(f"Content readiness check failed, continuing anyway: {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.BROWSER,
            stage=ErrorStage.WAIT_FOR_CONTENT,
            domain=session.domain,
            url=session.url,
            severity=ErrorSeverity.WARNING,
        )
        return False

    if outcome.ok:
        logger.info("Vehicle content detected")
        return True

    logger.warning("Timeout waiting for vehicle content, continuing anyway...")
    get_error_logger().log_error(
        component=ErrorComponent.BROWSER,
        stage=ErrorStage.WAIT_FOR_CONTENT,
        error_type=ErrorType.TIMEOUT,
        domain=session.domain,
        url=session.url,
        severity=ErrorSeverity.WARNING,
        message=f"No vehicle content detected after {timeout_ms}ms wait",
        metadata={"timeout_ms": timeout_ms, "selectors": selectors},
    )
    return False

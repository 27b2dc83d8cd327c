"""
Page normalization before measurement.

Overlays are hidden first so they cannot cover listings in screenshots,
then the page is scrolled progressively so lazy-loaded listings exist in
the DOM before the locator runs.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from dealer_vision.crawler.scripts import HIDE_FIXED_ELEMENTS_JS, SCROLL_STEP_JS
from dealer_vision.crawler.session import ViewportSession
from dealer_vision.utils.polling import WaitOutcome, wait_for_condition

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScrollResult:
    """Outcome of progressive scrolling."""

    outcome: Optional[WaitOutcome]
    steps: int
    final_height: int
    error: Optional[str] = None

    @property
    def reason(self) -> str:
        if self.error:
            return "error"
        if self.outcome is WaitOutcome.SATISFIED:
            return "stable"
        return "max_steps"


async def hide_fixed_elements(session: ViewportSession, settle_ms: int = 1000) -> int:
    """
    Hide fixed/sticky overlays, headers and nav bars.

    Precondition: page loaded.
    Postcondition: matching elements have visibility:hidden (layout kept);
    session.overlays_hidden is True.

    Returns:
        Number of elements hidden
    """
    hidden = await session.page.evaluate(HIDE_FIXED_ELEMENTS_JS)
    await session.pause(settle_ms)
    session.overlays_hidden = True
    logger.info(f"Hid {hidden} fixed/sticky elements")
    return int(hidden or 0)


async def auto_scroll(
    session: ViewportSession,
    distance: int = 100,
    interval_ms: int = 200,
    max_steps: int = 50,
    stable_checks: int = 5,
) -> ScrollResult:
    """
    Scroll down in fixed steps until the document stops growing.

    Each tick reads document scrollHeight and scrolls by `distance`. The
    loop ends when the height is unchanged for `stable_checks` consecutive
    ticks, or after `max_steps` ticks. Both are normal terminations.

    Precondition: page loaded.
    Postcondition: lazy content below the fold has been requested;
    session.scroll_complete is True and session.scroll_y holds the final
    offset.
    """
    state = {"last": 0, "unchanged": 0, "steps": 0, "y": 0}

    async def _tick() -> bool:
        res = await session.page.evaluate(SCROLL_STEP_JS, distance)
        height = int(res.get("height", 0))
        state["y"] = res.get("y", state["y"])
        state["steps"] += 1
        if height == state["last"]:
            state["unchanged"] += 1
            return state["unchanged"] >= stable_checks
        state["unchanged"] = 0
        state["last"] = height
        return False

    try:
        outcome = await wait_for_condition(_tick, interval_ms=interval_ms, max_attempts=max_steps)
        result = ScrollResult(outcome=outcome, steps=state["steps"], final_height=state["last"])
    except Exception as e:
        # Scrolling is best-effort; the locator still sees whatever loaded.
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.BROWSER,
            stage=ErrorStage.AUTO_SCROLL,
            domain=session.domain,
            url=session.url,
            severity=ErrorSeverity.WARNING,
            metadata={"steps": state["steps"]},
        )
        logger.warning(f"Auto-scroll stopped early: {e}")
        result = ScrollResult(outcome=None, steps=state["steps"], final_height=state["last"], error=str(e))

    session.scroll_complete = True
    session.scroll_y = state["y"]
    logger.info(
        f"Auto-scroll finished after {result.steps} steps "
        f"(reason={result.reason}, height={result.final_height})"
    )
    return result


async def prepare_page(
    session: ViewportSession,
    distance: int = 100,
    interval_ms: int = 200,
    max_steps: int = 50,
    stable_checks: int = 5,
    settle_ms: int = 1000,
) -> Tuple[int, ScrollResult]:
    """
    Hide overlays, then scroll lazy content in.

    Returns:
        (number of elements hidden, scroll result)
    """
    logger.info("Hiding fixed elements...")
    hidden = await hide_fixed_elements(session, settle_ms=settle_ms)
    logger.info("Scrolling to load all content...")
    scroll = await auto_scroll(
        session,
        distance=distance,
        interval_ms=interval_ms,
        max_steps=max_steps,
        stable_checks=stable_checks,
    )
    return hidden, scroll

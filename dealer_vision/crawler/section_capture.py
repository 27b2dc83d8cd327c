"""
Section slicing and screenshot capture.

Listings are grouped into fixed-size batches; each batch becomes one
padded rectangle that is scrolled into view, given time for its images
to load, and captured as a clipped JPEG.
"""

import base64
from typing import List, Optional, Sequence, Tuple

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorType, ErrorStage
from dealer_vision.crawler.geometry import ListingGeometry, SectionBounds, SectionCapture
from dealer_vision.crawler.scripts import SCROLL_TO_JS, SECTION_IMAGES_LOADED_JS
from dealer_vision.crawler.session import ViewportSession
from dealer_vision.utils.polling import WaitOutcome, wait_for_condition

logger = get_logger(__name__)


def plan_sections(total: int, items_per_section: int) -> List[Tuple[int, int]]:
    """
    Split [0, total) into consecutive half-open ranges of items_per_section.

    Example:
        >>> plan_sections(10, 3)
        [(0, 3), (3, 6), (6, 9), (9, 10)]
    """
    if items_per_section <= 0:
        raise ValueError("items_per_section must be positive")
    return [
        (start, min(start + items_per_section, total))
        for start in range(0, total, items_per_section)
    ]


def section_bounds(
    listings: Sequence[ListingGeometry],
    start_index: int,
    end_index: int,
    padding: float = 0,
) -> Optional[SectionBounds]:
    """
    Padded vertical rectangle spanning listings[start_index:end_index].

    end_index is clamped to len(listings). The rectangle spans the
    min top / max bottom of the slice so it contains every listing even
    when DOM order is not strictly top-to-bottom.

    Returns:
        SectionBounds, or None if start_index is out of range or the
        slice is empty
    """
    if start_index < 0 or start_index >= len(listings):
        return None
    section = listings[start_index:min(end_index, len(listings))]
    if not section:
        return None

    start_y = max(0.0, min(item.top for item in section) - padding)
    end_y = max(item.bottom for item in section) + padding
    return SectionBounds(start_y=start_y, end_y=end_y)


async def wait_for_section_images(
    session: ViewportSession,
    bounds: SectionBounds,
    interval_ms: int = 100,
    timeout_ms: int = 10_000,
    initial_delay_ms: int = 0,
) -> WaitOutcome:
    """
    Poll until every image overlapping the section reports natural dimensions.

    A timeout is advisory (broken images never load); the capture goes ahead.
    """
    arg = {"startY": bounds.start_y, "endY": bounds.end_y}

    async def _loaded() -> bool:
        return bool(await session.page.evaluate(SECTION_IMAGES_LOADED_JS, arg))

    outcome = await wait_for_condition(
        _loaded,
        interval_ms=interval_ms,
        timeout_ms=timeout_ms,
        initial_delay_ms=initial_delay_ms,
    )
    if not outcome.ok:
        logger.warning(f"Images in section {bounds.to_dict()} still loading after {timeout_ms}ms")
        get_error_logger().log_error(
            component=ErrorComponent.CAPTURE,
            stage=ErrorStage.WAIT_FOR_IMAGES,
            error_type=ErrorType.TIMEOUT,
            domain=session.domain,
            url=session.url,
            severity=ErrorSeverity.WARNING,
            message=f"Section images not loaded after {timeout_ms}ms",
            metadata={"bounds": bounds.to_dict()},
        )
    return outcome


async def capture_section(
    session: ViewportSession,
    listings: Sequence[ListingGeometry],
    start_index: int,
    end_index: int,
    padding: float = 20,
    scroll_settle_ms: int = 500,
    image_poll_interval_ms: int = 100,
    image_wait_timeout_ms: int = 10_000,
    animation_settle_ms: int = 500,
    quality: int = 80,
) -> Optional[SectionCapture]:
    """
    Screenshot the listings in [start_index, end_index).

    Precondition: listings were measured on this page in its current layout.
    Postcondition: viewport scrolled to the section's start_y
    (session.scroll_y updated).

    Returns:
        SectionCapture, or None when start_index is past the last listing
        (signals there are no more sections)

    Raises:
        Whatever the screenshot call raises; there is no retry.
    """
    bounds = section_bounds(listings, start_index, end_index, padding)
    if bounds is None:
        return None
    end_index = min(end_index, len(listings))

    page = session.page
    session.scroll_y = await page.evaluate(SCROLL_TO_JS, bounds.start_y)

    await wait_for_section_images(
        session,
        bounds,
        interval_ms=image_poll_interval_ms,
        timeout_ms=image_wait_timeout_ms,
        initial_delay_ms=scroll_settle_ms,
    )
    await session.pause(animation_settle_ms)

    # full_page=True makes the clip page-relative, so sections taller than
    # the viewport are captured whole.
    image = await page.screenshot(
        clip={
            "x": 0,
            "y": bounds.start_y,
            "width": session.viewport_width,
            "height": bounds.height,
        },
        full_page=True,
        type="jpeg",
        quality=quality,
    )

    capture = SectionCapture(
        screenshot=base64.b64encode(image).decode("ascii"),
        item_count=end_index - start_index,
        start_index=start_index,
        end_index=end_index,
        dimensions=bounds,
    )
    logger.info(
        f"Captured items {start_index + 1}-{end_index} "
        f"(y={bounds.start_y:.0f}..{bounds.end_y:.0f}, {len(image):,} bytes)"
    )
    return capture

"""
Browser session ownership for a capture run.

A ViewportSession wraps the single Playwright page a run works on. Every
stage receives it explicitly and records the page-state changes it makes
(overlays hidden, lazy content scrolled in, current scroll offset), so the
state a stage depends on is visible on the object instead of implied.
"""

import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional

from playwright.async_api import Page, Playwright

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorStage
from dealer_vision.utils.retry import RetryConfig, retry_async_with_backoff
from dealer_vision.utils.url_utils import domain_of

logger = get_logger(__name__)

# Images must load for screenshots; only media and fonts are blocked.
BLOCK_RESOURCE_TYPES = {"media", "font"}

UA_POOL = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125 Safari/537.36",
]


@dataclass
class ViewportSession:
    """
    The one page a run owns, plus the state stages have put it in.

    Attributes:
        page: Live Playwright page
        url: Target listings URL
        viewport_width: Capture width in CSS pixels
        viewport_height: Viewport height in CSS pixels
        overlays_hidden: Set by hide_fixed_elements
        scroll_complete: Set by auto_scroll (content exhausted or ceiling hit)
        scroll_y: Last scroll offset a stage moved the viewport to
    """

    page: Page
    url: str
    viewport_width: int
    viewport_height: int
    overlays_hidden: bool = False
    scroll_complete: bool = False
    scroll_y: float = 0

    @property
    def domain(self) -> str:
        return domain_of(self.url)

    async def pause(self, ms: int) -> None:
        """Fixed settle delay on the page's clock."""
        if ms > 0:
            await self.page.wait_for_timeout(ms)


@asynccontextmanager
async def open_session(
    pw: Playwright,
    url: str,
    viewport_width: int = 1920,
    viewport_height: int = 1920,
    headless: bool = True,
) -> AsyncIterator[ViewportSession]:
    """
    Launch Chromium with one context and one page sized for capture.

    Args:
        pw: Started Playwright instance
        url: Target listings URL (not navigated yet)
        viewport_width: Viewport width in CSS pixels
        viewport_height: Viewport height in CSS pixels
        headless: Run without a visible window

    Yields:
        ViewportSession bound to the new page
    """
    browser = await pw.chromium.launch(
        headless=headless,
        args=["--disable-blink-features=AutomationControlled"]
    )
    ctx_kwargs: Dict[str, object] = {
        "user_agent": random.choice(UA_POOL),
        "viewport": {"width": viewport_width, "height": viewport_height},
        "locale": "en-US",
        "java_script_enabled": True,
    }
    context = await browser.new_context(**ctx_kwargs)
    await context.add_init_script("Object.defineProperty(navigator, 'webdriver', {get: () => undefined});")

    async def _route(route):
        if route.request.resource_type in BLOCK_RESOURCE_TYPES:
            return await route.abort()
        return await route.continue_()

    await context.route("**/*", _route)
    try:
        page = await context.new_page()
        yield ViewportSession(
            page=page,
            url=url,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
        )
    finally:
        await context.close()
        await browser.close()


async def navigate(
    session: ViewportSession,
    timeout_ms: int = 60_000,
    max_retries: int = 3,
    retry_config: Optional[RetryConfig] = None,
) -> int:
    """
    Load the session's URL, waiting for the network to go idle.

    Retries with exponential backoff on navigation errors and on
    4xx/5xx responses. The final failure propagates: a run cannot
    continue without the page.

    Returns:
        HTTP status of the final response (0 if none was reported)
    """
    page = session.page
    config = retry_config or RetryConfig(max_retries=max_retries, base_delay=2.0)
    attempts = {"n": 0}

    async def _goto() -> int:
        attempts["n"] += 1
        logger.info(f"[nav] {session.url} (attempt {attempts['n']}/{config.max_retries + 1})")
        resp = await page.goto(session.url, wait_until="networkidle", timeout=timeout_ms)
        code = resp.status if resp else 0
        if code >= 400:
            raise RuntimeError(f"HTTP status {code} for {session.url}")
        return code

    try:
        status = await retry_async_with_backoff(_goto, config=config)
    except Exception as e:
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.BROWSER,
            stage=ErrorStage.NAVIGATE,
            domain=session.domain,
            url=session.url,
            metadata={"attempts": attempts["n"], "timeout_ms": timeout_ms},
        )
        raise

    session.scroll_y = 0
    logger.info(f"[nav] loaded {session.url} (status {status})")
    return status

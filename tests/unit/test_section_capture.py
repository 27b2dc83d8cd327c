"""
Unit tests for section planning, bounds and capture.
"""

import asyncio
import base64

import pytest

from dealer_vision.crawler.geometry import ListingGeometry, SectionBounds, SectionCapture
from dealer_vision.crawler.scripts import SCROLL_TO_JS, SECTION_IMAGES_LOADED_JS
from dealer_vision.crawler.section_capture import (
    capture_section,
    plan_sections,
    section_bounds,
    wait_for_section_images,
)
from dealer_vision.utils.polling import WaitOutcome


class TestPlanSections:
    """Tests for plan_sections function."""

    def test_ten_by_three(self):
        """Test the uneven last batch."""
        assert plan_sections(10, 3) == [(0, 3), (3, 6), (6, 9), (9, 10)]

    def test_exact_multiple(self):
        """Test batches that divide evenly."""
        assert plan_sections(8, 4) == [(0, 4), (4, 8)]

    def test_fewer_than_one_batch(self):
        """Test a single short batch."""
        assert plan_sections(2, 4) == [(0, 2)]

    def test_empty(self):
        """Test that no listings give no sections."""
        assert plan_sections(0, 4) == []

    def test_invalid_size(self):
        """Test that a non-positive batch size is rejected."""
        with pytest.raises(ValueError):
            plan_sections(10, 0)


class TestSectionBounds:
    """Tests for section_bounds function."""

    def test_padded_bounds(self, listing_geometries):
        """Test padding above the first and below the last listing."""
        bounds = section_bounds(listing_geometries, 0, 3, padding=20)
        assert bounds == SectionBounds(start_y=80, end_y=100 + 2 * 450 + 400 + 20)

    def test_start_clamped_at_zero(self):
        """Test that padding never pushes start_y above the page."""
        listings = [ListingGeometry(top=5, height=200, width=300)]
        assert section_bounds(listings, 0, 1, padding=20).start_y == 0

    def test_end_index_clamped(self, listing_geometries):
        """Test that end beyond the list is clamped."""
        bounds = section_bounds(listing_geometries, 9, 12, padding=0)
        assert bounds.end_y == listing_geometries[9].bottom

    def test_start_out_of_range(self, listing_geometries):
        """Test that start >= len(listings) returns None."""
        assert section_bounds(listing_geometries, 10, 13) is None
        assert section_bounds(listing_geometries, 25, 28) is None

    def test_empty_slice(self, listing_geometries):
        """Test that an empty slice returns None."""
        assert section_bounds(listing_geometries, 3, 3) is None
        assert section_bounds([], 0, 4) is None

    def test_contains_every_listing(self, listing_geometries):
        """Test that each planned section contains all its listings."""
        for start, end in plan_sections(len(listing_geometries), 3):
            bounds = section_bounds(listing_geometries, start, end, padding=20)
            assert all(bounds.contains(item) for item in listing_geometries[start:end])

    def test_contains_out_of_order_listings(self):
        """Test containment when DOM order is not top-to-bottom."""
        listings = [
            ListingGeometry(top=600, height=300, width=300),
            ListingGeometry(top=100, height=300, width=300),
            ListingGeometry(top=350, height=500, width=300),
        ]
        bounds = section_bounds(listings, 0, 3, padding=10)
        assert bounds == SectionBounds(start_y=90, end_y=910)
        assert all(bounds.contains(item) for item in listings)


class TestGeometry:
    """Tests for geometry value types."""

    def test_bottom(self):
        """Test derived bottom."""
        assert ListingGeometry(top=10, height=90, width=1).bottom == 100

    def test_invalid_geometry(self):
        """Test geometry invariants."""
        with pytest.raises(ValueError):
            ListingGeometry(top=-1, height=10, width=10)
        with pytest.raises(ValueError):
            ListingGeometry(top=0, height=0, width=10)

    def test_capture_range_invariants(self):
        """Test SectionCapture range and count checks."""
        bounds = SectionBounds(0, 100)
        with pytest.raises(ValueError):
            SectionCapture(screenshot="", item_count=0, start_index=2, end_index=2, dimensions=bounds)
        with pytest.raises(ValueError):
            SectionCapture(screenshot="", item_count=3, start_index=0, end_index=2, dimensions=bounds)

    def test_bounds_to_dict(self):
        """Test serialized bounds."""
        assert SectionBounds(10, 60).to_dict() == {"startY": 10, "endY": 60, "height": 50}


def _capture_page(fake_page, images_loaded=True):
    return fake_page({
        SCROLL_TO_JS: lambda y: int(y),
        SECTION_IMAGES_LOADED_JS: images_loaded,
    })


class TestCaptureSection:
    """Tests for capture_section against a fake page."""

    def test_captures_clip(self, fake_page, make_session, listing_geometries):
        """Test scroll, wait and clipped JPEG screenshot."""
        page = _capture_page(fake_page)
        session = make_session(page)

        capture = asyncio.run(capture_section(
            session, listing_geometries, 3, 6,
            padding=20, scroll_settle_ms=0, animation_settle_ms=0, quality=80,
        ))

        expected = section_bounds(listing_geometries, 3, 6, padding=20)
        assert capture.start_index == 3
        assert capture.end_index == 6
        assert capture.item_count == 3
        assert capture.dimensions == expected
        assert base64.b64decode(capture.screenshot) == page.screenshot_bytes

        assert page.calls_for(SCROLL_TO_JS) == [expected.start_y]
        assert session.scroll_y == int(expected.start_y)

        shot = page.screenshots[0]
        assert shot["clip"] == {"x": 0, "y": expected.start_y, "width": 1920, "height": expected.height}
        assert shot["type"] == "jpeg"
        assert shot["quality"] == 80
        assert shot["full_page"] is True

    def test_last_partial_section(self, fake_page, make_session, listing_geometries):
        """Test that the final section holds only the remaining items."""
        page = _capture_page(fake_page)
        capture = asyncio.run(capture_section(
            make_session(page), listing_geometries, 9, 12, scroll_settle_ms=0, animation_settle_ms=0,
        ))
        assert capture.item_count == 1
        assert capture.end_index == 10

    def test_out_of_range_returns_none(self, fake_page, make_session, listing_geometries):
        """Test that start >= total returns None without touching the page."""
        page = _capture_page(fake_page)
        assert asyncio.run(capture_section(make_session(page), listing_geometries, 10, 13)) is None
        assert page.evaluations == []
        assert page.screenshots == []

    def test_image_timeout_is_advisory(self, fake_page, make_session, listing_geometries, isolated_logs):
        """Test that unloaded images still produce a capture and a warning record."""
        page = _capture_page(fake_page, images_loaded=False)
        capture = asyncio.run(capture_section(
            make_session(page), listing_geometries, 0, 3,
            scroll_settle_ms=0, image_poll_interval_ms=5, image_wait_timeout_ms=20, animation_settle_ms=0,
        ))
        assert capture is not None
        records = isolated_logs["errors"].read_errors()
        assert [r["stage"] for r in records] == ["wait_for_images"]
        assert records[0]["severity"] == "warning"

    def test_animation_settle(self, fake_page, make_session, listing_geometries):
        """Test that the animation delay runs on the page clock."""
        page = _capture_page(fake_page)
        asyncio.run(capture_section(
            make_session(page), listing_geometries, 0, 3, scroll_settle_ms=0, animation_settle_ms=500,
        ))
        assert page.waits == [500]

    def test_screenshot_failure_propagates(self, make_session, listing_geometries, fake_page):
        """Test that screenshot errors are not swallowed."""
        page = _capture_page(fake_page)

        async def broken(**kwargs):
            raise RuntimeError("screenshot failed")

        page.screenshot = broken
        with pytest.raises(RuntimeError, match="screenshot failed"):
            asyncio.run(capture_section(
                make_session(page), listing_geometries, 0, 3, scroll_settle_ms=0, animation_settle_ms=0,
            ))


class TestWaitForSectionImages:
    """Tests for wait_for_section_images function."""

    def test_bounds_passed_to_page(self, fake_page, make_session):
        """Test that the section rectangle is sent to the page script."""
        page = fake_page({SECTION_IMAGES_LOADED_JS: True})
        outcome = asyncio.run(wait_for_section_images(make_session(page), SectionBounds(80, 1420)))
        assert outcome is WaitOutcome.SATISFIED
        assert page.calls_for(SECTION_IMAGES_LOADED_JS) == [{"startY": 80, "endY": 1420}]

    def test_script_skips_unrendered_images(self):
        """Test that the page script filters out images with no layout box."""
        assert "r.width > 0 && r.height > 0" in SECTION_IMAGES_LOADED_JS


PIXEL_GIF = "data:image/gif;base64,R0lGODlhAQABAAAAACH5BAEKAAEALAAAAAABAAEAAAICTAEAOw=="
DEAD_SRC = "http://127.0.0.1:9/missing.jpg"


def _images_loaded_in_chromium(body: str) -> bool:
    """Evaluate SECTION_IMAGES_LOADED_JS on a static page in headless Chromium."""
    from playwright.async_api import Error as PlaywrightError, async_playwright

    async def _run():
        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.launch(headless=True)
            except PlaywrightError as e:
                return e
            try:
                page = await browser.new_page()
                await page.set_content(f"<html><body>{body}</body></html>")
                return await page.evaluate(SECTION_IMAGES_LOADED_JS, {"startY": 0, "endY": 2000})
            finally:
                await browser.close()

    result = asyncio.run(_run())
    if isinstance(result, PlaywrightError):
        pytest.skip(f"Chromium not available: {result}")
    return result


@pytest.mark.integration
class TestSectionImagesLoadedScript:
    """Tests for SECTION_IMAGES_LOADED_JS in a real browser."""

    def test_hidden_and_zero_size_images_ignored(self):
        """Test that display:none slides and collapsed placeholders do not block."""
        body = (
            f'<img src="{PIXEL_GIF}" width="120" height="80">'
            f'<img src="{DEAD_SRC}" style="display:none">'
            '<img data-src="lazy.jpg" style="width:0;height:0">'
        )
        assert _images_loaded_in_chromium(body) is True

    def test_visible_broken_image_blocks(self):
        """Test that a rendered image without pixels is still waited on."""
        body = (
            f'<img src="{PIXEL_GIF}" width="120" height="80">'
            f'<img src="{DEAD_SRC}" width="120" height="80">'
        )
        assert _images_loaded_in_chromium(body) is False

"""
Unit tests for overlay hiding and progressive scrolling.
"""

import asyncio

from dealer_vision.crawler.page_preparer import auto_scroll, hide_fixed_elements, prepare_page
from dealer_vision.crawler.scripts import HIDE_FIXED_ELEMENTS_JS, SCROLL_STEP_JS
from dealer_vision.utils.polling import WaitOutcome


def _scrolling_page(fake_page, heights, hidden=4):
    """Fake page whose scrollHeight follows heights (last value repeats)."""
    state = {"tick": 0}

    def _step(distance):
        height = heights[min(state["tick"], len(heights) - 1)]
        state["tick"] += 1
        return {"height": height, "y": state["tick"] * distance}

    return fake_page({HIDE_FIXED_ELEMENTS_JS: hidden, SCROLL_STEP_JS: _step})


class TestHideFixedElements:
    """Tests for hide_fixed_elements function."""

    def test_hides_and_settles(self, fake_page, make_session):
        """Test hidden count, settle delay and session flag."""
        page = _scrolling_page(fake_page, [0], hidden=7)
        session = make_session(page)
        assert asyncio.run(hide_fixed_elements(session)) == 7
        assert page.waits == [1000]
        assert session.overlays_hidden is True

    def test_null_count(self, fake_page, make_session):
        """Test that a null count from the page is treated as zero."""
        page = fake_page({HIDE_FIXED_ELEMENTS_JS: None})
        assert asyncio.run(hide_fixed_elements(make_session(page), settle_ms=0)) == 0
        assert page.waits == []


class TestAutoScroll:
    """Tests for auto_scroll function."""

    def test_stops_when_height_stable(self, fake_page, make_session):
        """Test that five unchanged checks end the scroll."""
        page = _scrolling_page(fake_page, [1000, 2000, 3000])
        session = make_session(page)
        result = asyncio.run(auto_scroll(session, interval_ms=0, max_steps=50, stable_checks=5))
        assert result.outcome is WaitOutcome.SATISFIED
        assert result.reason == "stable"
        assert result.steps == 8
        assert result.final_height == 3000
        assert session.scroll_complete is True
        assert session.scroll_y == 800

    def test_stops_at_ceiling(self, fake_page, make_session):
        """Test that an ever-growing page stops at max_steps without raising."""
        page = _scrolling_page(fake_page, list(range(1000, 100000, 500)))
        result = asyncio.run(auto_scroll(make_session(page), interval_ms=0, max_steps=10))
        assert result.outcome is WaitOutcome.EXHAUSTED
        assert result.reason == "max_steps"
        assert result.steps == 10

    def test_distance_passed(self, fake_page, make_session):
        """Test that the scroll distance is sent to the page."""
        page = _scrolling_page(fake_page, [500])
        asyncio.run(auto_scroll(make_session(page), distance=250, interval_ms=0, stable_checks=2))
        assert set(page.calls_for(SCROLL_STEP_JS)) == {250}

    def test_page_error_is_not_fatal(self, fake_page, make_session, isolated_logs):
        """Test that a script error ends scrolling with a warning record."""
        def _boom(distance):
            raise RuntimeError("Execution context was destroyed")

        page = fake_page({SCROLL_STEP_JS: _boom})
        session = make_session(page)
        result = asyncio.run(auto_scroll(session, interval_ms=0))
        assert result.reason == "error"
        assert "Execution context" in result.error
        assert session.scroll_complete is True
        records = isolated_logs["errors"].read_errors()
        assert records[0]["stage"] == "auto_scroll"
        assert records[0]["severity"] == "warning"


class TestPreparePage:
    """Tests for prepare_page function."""

    def test_hide_then_scroll(self, fake_page, make_session):
        """Test that overlays are hidden before the first scroll."""
        page = _scrolling_page(fake_page, [1200], hidden=2)
        session = make_session(page)
        hidden, scroll = asyncio.run(prepare_page(session, interval_ms=0, stable_checks=1, settle_ms=0))
        assert hidden == 2
        assert scroll.reason == "stable"
        assert page.evaluations[0][0] == HIDE_FIXED_ELEMENTS_JS
        assert page.evaluations[1][0] == SCROLL_STEP_JS
        assert session.overlays_hidden and session.scroll_complete

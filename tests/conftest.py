"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from dealer_vision.crawler.geometry import ListingGeometry


# ============================================================================
# Paths and Directories
# ============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path: Path, monkeypatch) -> Dict[str, Any]:
    """Point the error and process log singletons at a temp directory."""
    import dealer_vision.core.error_logger as error_logger_module
    import dealer_vision.core.process_logger as process_logger_module

    errors = error_logger_module.ErrorLogger(log_dir=tmp_path / "logs" / "errors")
    process = process_logger_module.ProcessLogger(log_dir=tmp_path / "logs" / "process")
    monkeypatch.setattr(error_logger_module, "_error_logger", errors)
    monkeypatch.setattr(process_logger_module, "_process_logger", process)
    return {"errors": errors, "process": process}


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_vehicle() -> Dict[str, Any]:
    """Return a sample vehicle record as the model returns it."""
    return {
        "title": "2019 Ford E-450 Starcraft Allstar",
        "year": "2019",
        "price": "Call for Price",
        "description": "Clean, one-owner shuttle bus with rear lift.",
        "specifications": {
            "make": "Ford",
            "model": "E-450",
            "chassis": "Ford E-450",
            "condition": "Pre-Owned",
            "stock_number": "HB1234",
            "mileage": "85,412",
            "passenger_capacity": "14",
            "engine": "6.8L V10",
            "transmission": "Automatic",
            "fuel_type": "Gas",
            "exterior_color": "White",
            "location": "Hudson, MA",
            "dimensions": {"length": "24'", "width": None, "height": None},
            "features": ["Wheelchair lift", "Rear A/C"],
        },
    }


@pytest.fixture
def vehicles_response() -> Callable[..., str]:
    """Build a model response string holding the given vehicles."""
    def _build(*vehicles: Dict[str, Any], fenced: bool = False) -> str:
        body = json.dumps({"vehicles": list(vehicles)})
        return f"```json\n{body}\n```" if fenced else body

    return _build


@pytest.fixture
def listing_geometries() -> List[ListingGeometry]:
    """Ten stacked listings, 400px tall with 50px gaps."""
    return [ListingGeometry(top=100 + i * 450, height=400, width=380) for i in range(10)]


def make_card(top: float, title: str = "2019 Ford E-450 Shuttle Bus", **overrides) -> Dict[str, Any]:
    """Raw element description as DOM_SNAPSHOT_JS returns it."""
    text = f"{title} Stock #A{int(top)} Mileage 85,000 Price: Call for Price"
    card = {
        "top": top,
        "height": 400,
        "width": 380,
        "text": text,
        "text_length": len(text),
        "has_image": True,
    }
    card.update(overrides)
    return card


@pytest.fixture
def card_factory() -> Callable[..., Dict[str, Any]]:
    """Factory for raw element descriptions."""
    return make_card


@pytest.fixture
def raw_dom_snapshot() -> Dict[str, Any]:
    """
    Snapshot where the first selector matches nothing, the second matches
    ten valid cards, and a later selector matches only page chrome.
    """
    cards = [make_card(100 + i * 450) for i in range(10)]
    return {
        "by_selector": {
            ".vehicle-item": [],
            ".inventory-item": cards,
            '[class*="vehicle"]': [make_card(0, height=5000, width=1900)],
        },
        "image_containers": cards[:3],
    }


# ============================================================================
# Mock Fixtures
# ============================================================================

class FakePage:
    """
    Stand-in for a Playwright Page.

    evaluate() dispatches on the exact script string; responses map a
    script to a value or to a callable taking the evaluate argument.
    """

    def __init__(self, responses: Dict[str, Any] = None, screenshot_bytes: bytes = b"\xff\xd8fake-jpeg\xff\xd9"):
        self.responses = dict(responses or {})
        self.screenshot_bytes = screenshot_bytes
        self.evaluations: List[tuple] = []
        self.screenshots: List[Dict[str, Any]] = []
        self.waits: List[int] = []

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluations.append((script, arg))
        if script not in self.responses:
            raise AssertionError(f"unexpected script evaluated: {script.strip()[:60]!r}")
        value = self.responses[script]
        return value(arg) if callable(value) else value

    async def screenshot(self, **kwargs) -> bytes:
        self.screenshots.append(kwargs)
        return self.screenshot_bytes

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    def calls_for(self, script: str) -> List[Any]:
        """Arguments of every evaluate() call made with this script."""
        return [arg for s, arg in self.evaluations if s == script]


@pytest.fixture
def fake_page() -> Callable[..., FakePage]:
    """Factory for FakePage instances."""
    return FakePage


@pytest.fixture
def make_session():
    """Wrap a FakePage in a ViewportSession."""
    from dealer_vision.crawler.session import ViewportSession

    def _make(page: FakePage, url: str = "https://www.hudsonbussales.com/PreOwnedBusesForSale"):
        return ViewportSession(page=page, url=url, viewport_width=1920, viewport_height=1080)

    return _make


@pytest.fixture
def mock_gemini_response():
    """Mock Gemini API response."""
    class MockResponse:
        def __init__(self, text: str):
            self.text = text

    def _create_response(data: Dict[str, Any]) -> MockResponse:
        return MockResponse(text=json.dumps(data))

    return _create_response


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as an end-to-end test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "expensive: mark test as expensive (costs money)"
    )

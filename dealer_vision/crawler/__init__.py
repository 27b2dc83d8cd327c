"""
Crawler module for dealer listing pages.

This module drives one browser page through preparation, listing
location and sectioned screenshot capture.

Module Structure:
- geometry: Listing and section geometry value types
- scripts: In-page JavaScript snippets
- session: Browser/page ownership and navigation (requires playwright)
- page_preparer: Overlay hiding and progressive scroll (requires playwright)
- page_analyzer: Content readiness checks (requires playwright)
- listing_locator: DOM snapshot and listing strategies
- section_capture: Section planning and screenshots (requires playwright)
- file_manager: File I/O for capture outputs
- capture_vehicles: Pipeline orchestration (entry point, requires playwright)
"""

# Export geometry and pure helpers directly (no playwright dependency)
from dealer_vision.crawler.geometry import (
    ListingGeometry,
    SectionBounds,
    SectionCapture,
)

# Export file management functions directly (no playwright dependency)
from dealer_vision.crawler.file_manager import (
    ensure_output_dirs,
    section_image_path,
    write_section_image,
    write_merged_result,
    write_manifest,
)


# Lazy loading for playwright-dependent functions
def __getattr__(name):
    """Lazy loading for playwright-dependent functions."""
    if name in ("ViewportSession", "open_session", "navigate"):
        from dealer_vision.crawler import session
        return getattr(session, name)

    if name in ("hide_fixed_elements", "auto_scroll", "prepare_page", "ScrollResult"):
        from dealer_vision.crawler import page_preparer
        return getattr(page_preparer, name)

    if name in ("wait_for_vehicle_content", "has_vehicle_content", "scroll_height"):
        from dealer_vision.crawler import page_analyzer
        return getattr(page_analyzer, name)

    if name in (
        "NoListingsFoundError",
        "DomSnapshot",
        "ElementSnapshot",
        "ListingStrategy",
        "is_listing_candidate",
        "select_listings",
        "locate_listings",
    ):
        from dealer_vision.crawler import listing_locator
        return getattr(listing_locator, name)

    if name in ("plan_sections", "section_bounds", "capture_section"):
        from dealer_vision.crawler import section_capture
        return getattr(section_capture, name)

    if name in ("extract_vehicles", "run_capture", "main"):
        from dealer_vision.crawler import capture_vehicles
        return getattr(capture_vehicles, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Geometry (no playwright dependency)
    "ListingGeometry",
    "SectionBounds",
    "SectionCapture",
    # File management (no playwright dependency)
    "ensure_output_dirs",
    "section_image_path",
    "write_section_image",
    "write_merged_result",
    "write_manifest",
    # Session (require playwright - lazy loaded)
    "ViewportSession",
    "open_session",
    "navigate",
    # Page preparation and readiness (require playwright - lazy loaded)
    "hide_fixed_elements",
    "auto_scroll",
    "prepare_page",
    "ScrollResult",
    "wait_for_vehicle_content",
    "has_vehicle_content",
    "scroll_height",
    # Listing location (require playwright - lazy loaded)
    "NoListingsFoundError",
    "DomSnapshot",
    "ElementSnapshot",
    "ListingStrategy",
    "is_listing_candidate",
    "select_listings",
    "locate_listings",
    # Section capture (require playwright - lazy loaded)
    "plan_sections",
    "section_bounds",
    "capture_section",
    # Orchestration (require playwright - lazy loaded)
    "extract_vehicles",
    "run_capture",
    "main",
]

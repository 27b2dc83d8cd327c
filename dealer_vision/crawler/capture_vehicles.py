# dealer_vision/crawler/capture_vehicles.py
# Single-page vehicle capture: prepare the page, locate listings by geometry,
# screenshot them in batches, ask Gemini for each batch, merge the answers.
# Outputs under out/<domain>/:
#   - screenshots/screenshot_section_{n}.jpg
#   - extracted_data.json
#   - capture_manifest.json

import asyncio
import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.async_api import async_playwright

from dealer_vision.core.config import Config, get_config
from dealer_vision.core.logging import get_logger, init_capture_logging
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from dealer_vision.core.process_logger import get_process_logger
from dealer_vision.core.process_models import ProcessStatus, ProcessStep
from dealer_vision.crawler.file_manager import (
    ensure_output_dirs,
    write_manifest,
    write_merged_result,
    write_section_image,
)
from dealer_vision.crawler.geometry import SectionCapture
from dealer_vision.crawler.listing_locator import NoListingsFoundError, locate_listings
from dealer_vision.crawler.page_analyzer import wait_for_vehicle_content
from dealer_vision.crawler.page_preparer import prepare_page
from dealer_vision.crawler.section_capture import capture_section, plan_sections
from dealer_vision.crawler.session import ViewportSession, navigate, open_session
from dealer_vision.llm.parsers import reconcile
from dealer_vision.utils.url_utils import domain_of

logger = get_logger(__name__)

Analyzer = Callable[[SectionCapture], Optional[str]]


@dataclass
class CaptureResult:
    """Everything a capture run produced, for persistence and the manifest."""

    merged: Dict[str, Any]
    strategy: Optional[str]
    listings: int
    sections: List[Dict[str, Any]] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


def gemini_analyzer(cfg: Config, domain: str, url: str) -> Analyzer:
    """Section analyzer backed by the Gemini vision model."""
    # Imported here so the crawler loads without google-generativeai.
    from dealer_vision.llm.extractor import analyze_section

    def _analyze(capture: SectionCapture) -> Optional[str]:
        return analyze_section(capture, model_name=cfg.gemini_model, domain=domain, url=url)

    return _analyze


async def extract_vehicles(
    session: ViewportSession,
    cfg: Config,
    analyzer: Analyzer,
    screenshot_dir: Path,
    run_id: Optional[str] = None,
) -> CaptureResult:
    """
    Run the capture pipeline on a page that has already been navigated.

    Precondition: session.page shows session.url.
    Postcondition: one screenshot file per section in screenshot_dir.

    Raises:
        NoListingsFoundError: if no strategy located any listing (before any
            capture or model call)
        Exception: screenshot failures propagate
    """
    domain = session.domain
    process_logger = get_process_logger()

    def _step(step: ProcessStep, **metadata):
        if run_id:
            process_logger.log_step(run_id=run_id, step=step, domain=domain, metadata=metadata)

    # ----- Prepare
    hidden, scroll = await prepare_page(
        session,
        distance=cfg.scroll_distance,
        interval_ms=cfg.scroll_interval_ms,
        max_steps=cfg.max_scroll_steps,
        stable_checks=cfg.scroll_stable_checks,
    )
    _step(ProcessStep.PAGE_PREPARED, hidden=hidden, scroll=scroll.reason, steps=scroll.steps)

    logger.info("Waiting for vehicle content...")
    await wait_for_vehicle_content(session, timeout_ms=cfg.readiness_timeout_ms)

    # ----- Locate
    strategy, listings = await locate_listings(
        session,
        min_size=cfg.min_listing_size,
        min_text_length=cfg.min_listing_text,
    )
    if not listings:
        raise NoListingsFoundError(f"No vehicle listings found on {session.url}")
    _step(ProcessStep.LISTINGS_LOCATED, listings=len(listings), strategy=strategy)

    # ----- Capture + analyze, one section at a time
    ranges = plan_sections(len(listings), cfg.items_per_section)
    results: List[Optional[str]] = []
    sections: List[Dict[str, Any]] = []

    for number, (start, end) in enumerate(ranges, 1):
        logger.info(f"Processing section {number}/{len(ranges)} (items {start + 1}-{end})")
        capture = await capture_section(
            session,
            listings,
            start,
            end,
            padding=cfg.section_padding,
            scroll_settle_ms=cfg.scroll_settle_ms,
            image_poll_interval_ms=cfg.image_poll_interval_ms,
            image_wait_timeout_ms=cfg.image_wait_timeout_ms,
            animation_settle_ms=cfg.animation_settle_ms,
            quality=cfg.screenshot_quality,
        )
        if capture is None:
            break

        image_path = write_section_image(screenshot_dir, number, capture)
        _step(ProcessStep.SECTION_CAPTURED, section=number, start=start + 1, end=capture.end_index)

        raw = await asyncio.to_thread(analyzer, capture)
        results.append(raw)
        _step(ProcessStep.SECTION_ANALYZED, section=number, ok=raw is not None)

        entry = capture.summary()
        entry.update({"section": number, "image": image_path.name, "analyzed": raw is not None})
        sections.append(entry)

        await session.pause(cfg.section_delay_ms)

    # ----- Merge
    merged, stats = reconcile(results, domain=domain)
    _step(ProcessStep.RESULTS_MERGED, vehicles=len(merged["vehicles"]), **stats)

    return CaptureResult(
        merged=merged,
        strategy=strategy,
        listings=len(listings),
        sections=sections,
        stats=stats,
    )


async def run_capture(cfg: Config, analyzer: Optional[Analyzer] = None) -> Path:
    """
    Open a browser, capture cfg.target_url and write all outputs.

    Returns:
        Path to the merged JSON file
    """
    url = cfg.target_url
    dirs = ensure_output_dirs(cfg.base_out_dir, url)
    process_logger = get_process_logger()
    run_id = process_logger.generate_run_id()

    async with async_playwright() as pw:
        async with open_session(
            pw,
            url,
            viewport_width=cfg.viewport_width,
            viewport_height=cfg.viewport_height,
            headless=cfg.headless,
        ) as session:
            process_logger.log_step(run_id=run_id, step=ProcessStep.RUN_START, domain=session.domain,
                                    metadata={"url": url})
            logger.info(f"Navigating to {url}...")
            await navigate(session, timeout_ms=cfg.nav_timeout_ms, max_retries=cfg.nav_max_retries)

            if analyzer is None:
                analyzer = gemini_analyzer(cfg, session.domain, url)
            try:
                result = await extract_vehicles(
                    session, cfg, analyzer, dirs["screenshots"], run_id=run_id
                )
            except Exception as e:
                process_logger.log_step(run_id=run_id, step=ProcessStep.RUN_COMPLETE,
                                        domain=session.domain, status=ProcessStatus.FAILED,
                                        metadata={"error": str(e)})
                raise

    out_path = write_merged_result(dirs["root"] / cfg.output_filename, result.merged)
    write_manifest(
        dirs["root"],
        url,
        run_id,
        result.strategy or "",
        result.listings,
        result.sections,
        len(result.merged["vehicles"]),
        cfg={
            "items_per_section": cfg.items_per_section,
            "section_padding": cfg.section_padding,
            "viewport": [cfg.viewport_width, cfg.viewport_height],
            "model": cfg.gemini_model,
            "stats": result.stats,
        },
    )
    process_logger.log_step(run_id=run_id, step=ProcessStep.RUN_COMPLETE, domain=domain_of(url),
                            metadata={"vehicles": len(result.merged["vehicles"]), "output": str(out_path)})
    logger.info(f"Extraction complete! Results saved to {out_path}")
    return out_path


# -------------------
# CLI
# -------------------
def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Capture vehicle listings from a dealer page with Gemini vision.")
    ap.add_argument("--url", help="Listings page URL (default: TARGET_URL)")
    ap.add_argument("--headed", action="store_true", default=False, help="Show the browser window")
    ap.add_argument("--headless", action="store_true", default=False, help="Force headless (overrides --headed)")
    ap.add_argument("--items-per-section", type=int, help="Listings per screenshot section")
    ap.add_argument("--padding", type=int, help="Vertical padding around each section in px")
    ap.add_argument("--out-dir", help="Base output directory (default: BASE_OUT_DIR)")
    ap.add_argument("--verbose", action="store_true", help="DEBUG logging")
    return ap


def apply_cli_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    """Copy explicitly given CLI flags onto cfg."""
    if args.url:
        cfg.target_url = args.url
    if args.headless:
        cfg.headless = True
    elif args.headed:
        cfg.headless = False
    if args.items_per_section is not None:
        cfg.items_per_section = args.items_per_section
    if args.padding is not None:
        cfg.section_padding = args.padding
    if args.out_dir:
        cfg.base_out_dir = Path(args.out_dir)
    if args.verbose:
        cfg.log_level = "DEBUG"
    return cfg


def main(argv: Optional[List[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    cfg = apply_cli_overrides(get_config(), args)
    init_capture_logging(
        verbose=cfg.log_level.upper() == "DEBUG",
        log_dir=cfg.log_dir,
        domain=domain_of(cfg.target_url),
    )

    try:
        cfg.validate()
    except ValueError as e:
        logger.error(str(e))
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.CONFIG,
            stage=ErrorStage.LOAD_CONFIG,
            domain="unknown",
            severity=ErrorSeverity.CRITICAL,
        )
        return

    logger.info(f"Loaded {cfg!r}")
    try:
        asyncio.run(run_capture(cfg))
    except KeyboardInterrupt:
        logger.warning("[abort] KeyboardInterrupt, stopping capture.")
    except NoListingsFoundError as e:
        logger.error(f"[fatal] {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.LOCATOR,
            stage=ErrorStage.LOCATE_LISTINGS,
            domain=domain_of(cfg.target_url),
            url=cfg.target_url,
        )
    except Exception as e:
        logger.exception(f"[fatal] uncaught error during capture: {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.UNKNOWN,
            stage=ErrorStage.RUN,
            domain=domain_of(cfg.target_url),
            url=cfg.target_url,
            severity=ErrorSeverity.CRITICAL,
        )


if __name__ == "__main__":
    main()

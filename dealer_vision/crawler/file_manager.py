"""
File I/O management for capture outputs.

This module saves section screenshots, the merged vehicle JSON and the
run manifest under out/<domain>/.
"""

import base64
import json
import time
from pathlib import Path
from typing import Any, Dict, List

from dealer_vision.core.logging import get_logger
from dealer_vision.crawler.geometry import SectionCapture
from dealer_vision.utils.url_utils import site_dir

logger = get_logger(__name__)

SCREENSHOT_DIR = "screenshots"


def ensure_output_dirs(base_out: Path, url: str) -> Dict[str, Path]:
    """
    Create the output directories for a target URL.

    Example:
        >>> dirs = ensure_output_dirs(Path("out"), "https://www.hudsonbussales.com/x")
        >>> dirs["screenshots"]
        PosixPath('out/www.hudsonbussales.com/screenshots')
    """
    root = site_dir(base_out, url)
    shots = root / SCREENSHOT_DIR
    shots.mkdir(parents=True, exist_ok=True)
    return {"root": root, "screenshots": shots}


def section_image_path(screenshot_dir: Path, section_number: int) -> Path:
    """Path for a 1-based section number, e.g. screenshot_section_3.jpg."""
    return Path(screenshot_dir) / f"screenshot_section_{section_number}.jpg"


def write_section_image(screenshot_dir: Path, section_number: int, capture: SectionCapture) -> Path:
    """
    Decode a section's screenshot and write it as a JPEG.

    Returns:
        Path written
    """
    path = section_image_path(screenshot_dir, section_number)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(base64.b64decode(capture.screenshot))
    logger.debug(f"[saved] {path}")
    return path


def write_merged_result(path: Path, merged: Dict[str, Any]) -> Path:
    """
    Write the merged {"vehicles": [...]} document, replacing any previous run.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(merged, ensure_ascii=False, indent=2), "utf-8")
    logger.info(f"[saved] {path} ({len(merged.get('vehicles', []))} vehicles)")
    return path


def write_manifest(
    root: Path,
    url: str,
    run_id: str,
    strategy: str,
    listings: int,
    sections: List[Dict[str, Any]],
    vehicles: int,
    cfg: Dict[str, Any],
) -> Path:
    """
    Write a manifest summarizing one capture run.

    Args:
        root: Site output directory
        url: Target URL
        run_id: Process log correlation id
        strategy: Listing strategy that matched
        listings: Number of listings located
        sections: Per-section summaries (range, dimensions, image, status)
        vehicles: Unique vehicles after merging
        cfg: Capture parameters used

    Returns:
        Path written
    """
    manifest = {
        "url": url,
        "run_id": run_id,
        "strategy": strategy,
        "listings": listings,
        "sections": sections,
        "vehicles": vehicles,
        "config": cfg,
        "ts": int(time.time()),
    }
    path = Path(root) / "capture_manifest.json"
    path.write_text(json.dumps(manifest, ensure_ascii=False, indent=2), "utf-8")
    return path

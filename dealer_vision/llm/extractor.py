"""
Per-section vehicle extraction using the Gemini vision model.

One call per captured section: section image + item-range prompt in,
raw model text out. Failures are logged and reported as None so the
remaining sections still run.
"""

import base64
from typing import Optional

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorType, ErrorStage
from dealer_vision.crawler.geometry import SectionCapture
from dealer_vision.llm.prompt_loader import build_section_prompt
from dealer_vision.llm.client import call_gemini_vision

logger = get_logger(__name__)


def analyze_section(
    capture: SectionCapture,
    model_name: Optional[str] = None,
    schema: Optional[str] = None,
    domain: str = "unknown",
    url: str = "",
) -> Optional[str]:
    """
    Ask the vision model to extract the vehicles shown in one section.

    Args:
        capture: Captured section (base64 JPEG + item range)
        model_name: Optional Gemini model name
        schema: Optional output-schema text (defaults to the loaded prompt)
        domain: Domain name for error logging
        url: Page URL for error logging

    Returns:
        Raw model text, or None if the call failed or returned nothing
    """
    prompt = build_section_prompt(capture.start_index, capture.end_index, schema)
    section = f"items {capture.start_index + 1}-{capture.end_index}"

    try:
        image_bytes = base64.b64decode(capture.screenshot)
        text = call_gemini_vision(prompt, image_bytes, model_name=model_name)
    except Exception as e:
        logger.error(f"Error analyzing section {section}: {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.VISION,
            stage=ErrorStage.CALL_VISION,
            domain=domain,
            url=url,
            severity=ErrorSeverity.ERROR,
            metadata=capture.summary(),
        )
        return None

    if not text:
        logger.warning(f"Empty model response for section {section}")
        get_error_logger().log_error(
            component=ErrorComponent.VISION,
            stage=ErrorStage.CALL_VISION,
            error_type=ErrorType.EMPTY_RESPONSE,
            domain=domain,
            url=url,
            severity=ErrorSeverity.WARNING,
            message=f"Empty model response for section {section}",
            metadata=capture.summary(),
        )
        return None

    logger.debug(f"Section {section}: {len(text):,} chars from model")
    return text

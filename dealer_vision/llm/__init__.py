"""
LLM module for vehicle extraction from section screenshots using Google Gemini.

Module Structure:
- models: Pydantic models for extracted vehicle records
- parsers: JSON parsing and result reconciliation
- prompt_loader: Prompt management
- client: Gemini API interactions
- extractor: Per-section extraction
"""

# Export parser functions directly - these don't require Gemini
from dealer_vision.llm.parsers import (
    parse_json_robust,
    sanitize_json_text,
    strip_code_fences,
    parse_vehicle_list,
    identity_key,
    merge_results,
    reconcile,
)

# Export prompt functions - no Gemini dependency
from dealer_vision.llm.prompt_loader import (
    load_extraction_prompt,
    build_section_prompt,
)
from dealer_vision.llm.models import VehicleRecord


# Lazy import for functions that require Gemini
# This allows tests to import parsers without installing google-generativeai
def __getattr__(name):
    """Lazy loading for Gemini-dependent functions."""
    if name == "analyze_section":
        from dealer_vision.llm.extractor import analyze_section
        return analyze_section

    if name in ("get_gemini_model", "call_gemini_vision"):
        from dealer_vision.llm.client import get_gemini_model, call_gemini_vision
        if name == "get_gemini_model":
            return get_gemini_model
        return call_gemini_vision

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Parser functions (no Gemini dependency)
    "parse_json_robust",
    "sanitize_json_text",
    "strip_code_fences",
    "parse_vehicle_list",
    "identity_key",
    "merge_results",
    "reconcile",
    # Prompt functions (no Gemini dependency)
    "load_extraction_prompt",
    "build_section_prompt",
    "VehicleRecord",
    # Extraction functions (require Gemini - lazy loaded)
    "analyze_section",
    # Client functions (require Gemini - lazy loaded)
    "get_gemini_model",
    "call_gemini_vision",
]

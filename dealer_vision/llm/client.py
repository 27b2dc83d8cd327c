"""
Gemini API client for vehicle extraction from screenshots.

This module handles all interactions with the Google Gemini API,
including initialization, retries, and error handling.
"""

from typing import Dict, Any, Optional

from dealer_vision.core.config import get_config
from dealer_vision.core.logging import get_logger
from dealer_vision.utils.retry import RetryConfig, retry_with_backoff

logger = get_logger(__name__)

# Import Gemini SDK
try:
    import google.generativeai as genai
except ImportError as e:
    raise RuntimeError(
        "google-generativeai not installed. "
        "pip install google-generativeai>=0.8.0"
    ) from e


def default_generation_config(max_output_tokens: Optional[int] = None) -> Dict[str, Any]:
    """Deterministic JSON-mode generation settings."""
    cfg = get_config()
    return {
        "temperature": 0.0,
        "candidate_count": 1,
        "response_mime_type": "application/json",
        "max_output_tokens": max_output_tokens or cfg.llm_max_output_tokens,
    }


def get_gemini_model(api_key: Optional[str] = None, model_name: Optional[str] = None):
    """
    Initialize and configure a Gemini model.

    Args:
        api_key: Optional API key (defaults to config GEMINI_API_KEY)
        model_name: Optional model name (defaults to config GEMINI_MODEL)

    Returns:
        Configured GenerativeModel instance

    Raises:
        RuntimeError: If API key is missing
    """
    cfg = get_config()
    key = api_key or cfg.gemini_api_key
    if not key:
        raise RuntimeError(
            "GEMINI_API_KEY missing. "
            "Set it in configs/.env (e.g., GEMINI_API_KEY=...)"
        )

    genai.configure(api_key=key)
    model = model_name or cfg.gemini_model

    logger.debug(f"[LLM Client] Initialized Gemini model: {model}")
    return genai.GenerativeModel(model)


def call_gemini_vision(
    prompt: str,
    image_bytes: bytes,
    mime_type: str = "image/jpeg",
    model_name: Optional[str] = None,
    generation_config: Optional[Dict[str, Any]] = None,
    retry_config: Optional[RetryConfig] = None,
) -> str:
    """
    Send one image plus instruction text to Gemini and return the reply text.

    Blocking; callers on the event loop should run it in a worker thread.

    Args:
        prompt: Instruction text
        image_bytes: Encoded image
        mime_type: Image MIME type
        model_name: Optional model name
        generation_config: Optional generation configuration dict
        retry_config: Backoff settings (defaults from LLM_MAX_RETRIES /
            LLM_RETRY_BASE_SLEEP)

    Returns:
        Response text, stripped (may be empty)

    Raises:
        Last exception if all retries exhausted

    Example:
        >>> text = call_gemini_vision("Extract vehicles...", jpeg_bytes)
        >>> isinstance(text, str)
        True
    """
    cfg = get_config()
    if generation_config is None:
        generation_config = default_generation_config()
    if retry_config is None:
        retry_config = RetryConfig(
            max_retries=cfg.llm_max_retries,
            base_delay=cfg.llm_retry_base_sleep,
        )

    model = get_gemini_model(model_name=model_name)
    parts = [prompt, {"mime_type": mime_type, "data": image_bytes}]

    response = retry_with_backoff(
        lambda: model.generate_content(parts, generation_config=generation_config),
        config=retry_config,
    )
    return (getattr(response, "text", None) or "").strip()

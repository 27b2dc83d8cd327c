"""
Configuration Management for dealer-vision

This module provides centralized configuration management with:
- Environment variable loading
- Type validation
- Sensible defaults
- Configuration documentation
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


DEFAULT_TARGET_URL = "https://www.hudsonbussales.com/PreOwnedBusesForSale"

_FALSEY = {"0", "false", "False"}


class Config:
    """
    Application configuration loaded from environment variables.

    All configuration is read from configs/.env file or environment variables.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        load_dotenv(dotenv_path=env_path, override=True)

        # === Gemini API Configuration ===
        self.gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "models/gemini-1.5-pro-latest")
        self.llm_max_retries: int = int(os.getenv("LLM_MAX_RETRIES", "2"))
        self.llm_retry_base_sleep: float = float(os.getenv("LLM_RETRY_BASE_SLEEP", "1.6"))
        self.llm_max_output_tokens: int = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "4096"))

        # === Browser Configuration ===
        self.target_url: str = os.getenv("TARGET_URL", DEFAULT_TARGET_URL)
        self.headless: bool = os.getenv("HEADLESS", "1") not in _FALSEY
        self.viewport_width: int = int(os.getenv("VIEWPORT_WIDTH", "1920"))
        self.viewport_height: int = int(os.getenv("VIEWPORT_HEIGHT", "1920"))
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "60000"))
        self.nav_max_retries: int = int(os.getenv("NAV_MAX_RETRIES", "3"))

        # === Page Preparation ===
        self.readiness_timeout_ms: int = int(os.getenv("READINESS_TIMEOUT_MS", "10000"))
        self.scroll_distance: int = int(os.getenv("SCROLL_DISTANCE", "100"))
        self.scroll_interval_ms: int = int(os.getenv("SCROLL_INTERVAL_MS", "200"))
        self.max_scroll_steps: int = int(os.getenv("MAX_SCROLL_STEPS", "50"))
        self.scroll_stable_checks: int = int(os.getenv("SCROLL_STABLE_CHECKS", "5"))

        # === Listing Detection / Sections ===
        self.min_listing_size: int = int(os.getenv("MIN_LISTING_SIZE", "100"))
        self.min_listing_text: int = int(os.getenv("MIN_LISTING_TEXT", "50"))
        self.items_per_section: int = int(os.getenv("ITEMS_PER_SECTION", "4"))
        self.section_padding: int = int(os.getenv("SECTION_PADDING", "20"))
        self.image_wait_timeout_ms: int = int(os.getenv("IMAGE_WAIT_TIMEOUT_MS", "10000"))
        self.image_poll_interval_ms: int = int(os.getenv("IMAGE_POLL_INTERVAL_MS", "100"))
        self.scroll_settle_ms: int = int(os.getenv("SCROLL_SETTLE_MS", "500"))
        self.animation_settle_ms: int = int(os.getenv("ANIMATION_SETTLE_MS", "500"))
        self.section_delay_ms: int = int(os.getenv("SECTION_DELAY_MS", "1000"))
        self.screenshot_quality: int = int(os.getenv("SCREENSHOT_QUALITY", "80"))

        # === Logging Configuration ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))

        # === Output Paths ===
        self.base_out_dir: Path = Path(os.getenv("BASE_OUT_DIR", "out"))
        self.output_filename: str = os.getenv("OUTPUT_FILENAME", "extracted_data.json")

    def validate(self) -> None:
        """
        Validate required configuration is present.

        Raises:
            ValueError: If required configuration is missing or invalid
        """
        errors = []

        if not self.gemini_api_key:
            errors.append("GEMINI_API_KEY is required")

        if not self.target_url.startswith(("http://", "https://")):
            errors.append(f"TARGET_URL must be an http(s) URL, got {self.target_url!r}")

        if self.items_per_section <= 0:
            errors.append(f"ITEMS_PER_SECTION must be positive, got {self.items_per_section}")

        if self.section_padding < 0:
            errors.append(f"SECTION_PADDING must be non-negative, got {self.section_padding}")

        if self.viewport_width <= 0 or self.viewport_height <= 0:
            errors.append(
                f"Viewport must be positive, got {self.viewport_width}x{self.viewport_height}"
            )

        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.max_scroll_steps <= 0:
            errors.append(f"MAX_SCROLL_STEPS must be positive, got {self.max_scroll_steps}")

        if self.llm_max_retries < 0:
            errors.append(f"LLM_MAX_RETRIES must be non-negative, got {self.llm_max_retries}")

        if not 0 < self.screenshot_quality <= 100:
            errors.append(f"SCREENSHOT_QUALITY must be in 1..100, got {self.screenshot_quality}")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def __repr__(self) -> str:
        """Return string representation of config (without secrets)."""
        return (
            f"Config(\n"
            f"  target_url={self.target_url},\n"
            f"  gemini_model={self.gemini_model},\n"
            f"  gemini_api_key={'***' if self.gemini_api_key else 'NOT SET'},\n"
            f"  items_per_section={self.items_per_section},\n"
            f"  section_padding={self.section_padding},\n"
            f"  headless={self.headless},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


# Global configuration instance (lazy-loaded)
_config: Optional[Config] = None


def get_config(env_path: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        env_path: Optional path to .env file (only used on first call)

    Returns:
        Global Config instance

    Example:
        >>> config = get_config()
        >>> print(config.items_per_section)
    """
    global _config
    if _config is None:
        _config = Config(env_path=env_path)
    return _config


def validate_config(env_path: Optional[Path] = None) -> None:
    """
    Validate configuration and raise error if invalid.

    This should be called at application startup to fail fast
    if configuration is incorrect.

    Args:
        env_path: Optional path to .env file

    Raises:
        ValueError: If configuration is invalid
    """
    config = get_config(env_path=env_path)
    config.validate()

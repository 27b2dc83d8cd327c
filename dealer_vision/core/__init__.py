"""
Core utilities for dealer-vision.

This module contains shared utilities used across all components:
- Configuration management
- Structured logging
- Error and process logging
- Constants and enums
"""

from dealer_vision.core.logging import get_logger, setup_logging
from dealer_vision.core.config import get_config, validate_config, Config
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.process_logger import get_process_logger
from dealer_vision.core.error_models import (
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
    ErrorStage,
    ErrorRecord,
)
from dealer_vision.core.process_models import ProcessStep, ProcessStatus

__all__ = [
    "get_logger",
    "setup_logging",
    "get_config",
    "validate_config",
    "Config",
    "get_error_logger",
    "get_process_logger",
    "ErrorComponent",
    "ErrorSeverity",
    "ErrorType",
    "ErrorStage",
    "ErrorRecord",
    "ProcessStep",
    "ProcessStatus",
]

"""
Pydantic models for structured error logging.

This module defines type-safe error record models with automatic validation
and classification to ensure consistency across the error logging system.
"""

import json
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict


class ErrorComponent(str, Enum):
    """Pipeline components that can generate errors."""
    BROWSER = "browser"
    LOCATOR = "locator"
    CAPTURE = "capture"
    VISION = "vision"
    RECONCILER = "reconciler"
    CONFIG = "config"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Error severity levels matching logging standards."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorType(str, Enum):
    """
    Categorized error types for classification.

    New error types should be added here to maintain consistency.
    """
    # Validation errors
    VALIDATION_ERROR = "validation_error"

    # Network/API errors
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    EMPTY_RESPONSE = "empty_response"

    # Parsing errors
    PARSE_ERROR = "parse_error"
    JSON_ERROR = "json_error"

    # Browser errors
    BROWSER_ERROR = "browser_error"
    NAVIGATION_ERROR = "navigation_error"
    SCREENSHOT_ERROR = "screenshot_error"
    NO_LISTINGS = "no_listings"

    # File system errors
    FILE_ERROR = "file_error"

    # Configuration errors
    CONFIG_ERROR = "config_error"

    UNKNOWN = "unknown"


class ErrorStage:
    """
    Standardized stage names for error logging.

    Use these constants to ensure consistency across the codebase.
    """
    # Browser stages
    NAVIGATE = "navigate"
    HIDE_OVERLAYS = "hide_overlays"
    AUTO_SCROLL = "auto_scroll"
    WAIT_FOR_CONTENT = "wait_for_content"

    # Locator stages
    SNAPSHOT_DOM = "snapshot_dom"
    LOCATE_LISTINGS = "locate_listings"

    # Capture stages
    CAPTURE_SECTION = "capture_section"
    WAIT_FOR_IMAGES = "wait_for_images"
    SAVE_SECTION = "save_section"

    # Vision stages
    CALL_VISION = "call_vision"

    # Reconciler stages
    PARSE_JSON = "parse_json"
    MERGE_RESULTS = "merge_results"
    SAVE_OUTPUT = "save_output"

    # Run-level stages
    LOAD_CONFIG = "load_config"
    RUN = "run"


class ErrorRecord(BaseModel):
    """
    Structured error record written to the error log.

    This model validates all error data before logging to ensure consistency
    and prevent logging errors from causing additional failures.
    """
    component: ErrorComponent = Field(..., description="Pipeline component")
    stage: str = Field(..., min_length=1, max_length=100, description="Processing stage")
    error_type: ErrorType = Field(..., description="Error category")
    severity: ErrorSeverity = Field(default=ErrorSeverity.ERROR, description="Severity level")
    domain: str = Field(..., min_length=1, max_length=255, description="Target domain")
    message: str = Field(..., min_length=1, description="Human-readable error message")

    url: Optional[str] = Field(None, max_length=2048, description="Page URL if applicable")
    exception_type: Optional[str] = Field(None, max_length=255, description="Exception class name")
    stack_trace: Optional[str] = Field(None, description="Stack trace for unexpected errors")

    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional context")

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Error timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v: str) -> str:
        """Ensure stage is not empty and normalized."""
        if not v or not v.strip():
            return "unknown"
        return v.strip().lower().replace(" ", "_")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is not empty."""
        if not v or not v.strip():
            return "No error message provided"
        return v.strip()[:5000]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize metadata to ensure it's JSON-serializable.

        Converts non-serializable types to strings.
        """
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        domain: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: bool = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ErrorRecord":
        """
        Create ErrorRecord from an exception with automatic classification.

        Args:
            exc: The exception that occurred
            component: Pipeline component where error occurred
            stage: Processing stage
            domain: Target domain
            url: Optional page URL
            severity: Error severity (default: ERROR)
            error_type: Optional explicit error type (auto-detected if None)
            include_stack_trace: Whether to include full stack trace (auto if None)
            metadata: Additional context

        Returns:
            ErrorRecord instance ready for logging

        Example:
            >>> try:
            ...     await page.goto(url)
            ... except Exception as e:
            ...     record = ErrorRecord.from_exception(
            ...         e,
            ...         component=ErrorComponent.BROWSER,
            ...         stage=ErrorStage.NAVIGATE,
            ...         domain="www.hudsonbussales.com",
            ...     )
        """
        if error_type is None:
            error_type = cls._classify_exception(exc)

        message = str(exc) or f"{type(exc).__name__} occurred"
        exception_type = f"{type(exc).__module__}.{type(exc).__name__}"

        if include_stack_trace is None:
            include_stack_trace = cls._should_include_stack(exc, severity)

        stack_trace = None
        if include_stack_trace:
            try:
                stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
                # Truncate to 10KB
                if len(stack_trace) > 10000:
                    stack_trace = stack_trace[:10000] + "\n... (truncated)"
            except Exception:
                stack_trace = None

        return cls(
            component=component,
            stage=stage,
            error_type=error_type,
            severity=severity,
            domain=domain,
            url=url,
            message=message,
            exception_type=exception_type,
            stack_trace=stack_trace,
            metadata=metadata or {},
        )

    @staticmethod
    def _classify_exception(exc: Exception) -> ErrorType:
        """
        Automatically classify exception into ErrorType.

        Uses exception type and message patterns to determine category.
        """
        exc_name = type(exc).__name__.lower()
        exc_msg = str(exc).lower()

        if "nolistings" in exc_name:
            return ErrorType.NO_LISTINGS

        if "validation" in exc_name:
            return ErrorType.VALIDATION_ERROR

        if "timeout" in exc_name or "timeout" in exc_msg:
            return ErrorType.TIMEOUT
        if "connection" in exc_name:
            return ErrorType.CONNECTION_ERROR
        if "429" in exc_msg or "rate limit" in exc_msg or "resourceexhausted" in exc_name:
            return ErrorType.RATE_LIMIT
        if "http" in exc_name or "status" in exc_msg:
            return ErrorType.HTTP_ERROR

        if "json" in exc_name:
            return ErrorType.JSON_ERROR
        if "parse" in exc_name:
            return ErrorType.PARSE_ERROR

        if "net::" in exc_msg or "navigation" in exc_msg:
            return ErrorType.NAVIGATION_ERROR
        if "screenshot" in exc_msg:
            return ErrorType.SCREENSHOT_ERROR
        if "playwright" in exc_name or "browser" in exc_name or "target closed" in exc_msg:
            return ErrorType.BROWSER_ERROR

        if "file" in exc_name or "permission" in exc_name or exc_name == "oserror":
            return ErrorType.FILE_ERROR

        return ErrorType.UNKNOWN

    @staticmethod
    def _should_include_stack(exc: Exception, severity: ErrorSeverity) -> bool:
        """
        Determine if stack trace should be included based on exception type and severity.

        Expected errors (validation, not-found) don't need stacks.
        Unexpected errors (browser crashes, bugs) do.
        """
        if severity == ErrorSeverity.CRITICAL:
            return True

        if severity in (ErrorSeverity.WARNING, ErrorSeverity.INFO, ErrorSeverity.DEBUG):
            return False

        EXPECTED_ERRORS = (
            'ValidationError',
            'FileNotFoundError',
            'KeyError',
            'ValueError',
            'TimeoutError',
            'NoListingsFoundError',
        )

        error_type = type(exc).__name__
        return error_type not in EXPECTED_ERRORS

"""
Centralized error logging system with JSONL file storage.

This module provides a fail-safe error logger that:
- Writes errors as structured JSON lines under logs/errors/
- Mirrors every record to the standard logger
- Uses Pydantic validation for type safety
- Follows singleton pattern for global access
"""

import os
import json
from pathlib import Path
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_models import (
    ErrorRecord,
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
)

logger = get_logger(__name__)

ERROR_LOG_DIR = Path(os.getenv("ERROR_LOG_DIR", "logs/errors"))

# Singleton instance
_error_logger: Optional["ErrorLogger"] = None


class ErrorLogger:
    """
    Centralized error logger backed by dated JSONL files.

    Usage:
        >>> error_logger = get_error_logger()
        >>> error_logger.log_error(
        ...     component=ErrorComponent.BROWSER,
        ...     stage=ErrorStage.WAIT_FOR_CONTENT,
        ...     error_type=ErrorType.TIMEOUT,
        ...     domain="www.hudsonbussales.com",
        ...     message="No vehicle content after 10000ms",
        ...     severity=ErrorSeverity.WARNING,
        ... )
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """Initialize error logger and its output directory."""
        self._log_dir = Path(log_dir) if log_dir else ERROR_LOG_DIR
        self._log_dir.mkdir(exist_ok=True, parents=True)

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def log_error(
        self,
        component: ErrorComponent,
        stage: str,
        error_type: ErrorType,
        domain: str,
        message: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        exception_type: Optional[str] = None,
        stack_trace: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an error record.

        This method never raises exceptions.

        Args:
            component: Pipeline component
            stage: Processing stage
            error_type: Error category
            domain: Target domain
            message: Human-readable error message
            url: Optional page URL
            severity: Error severity (default: ERROR)
            exception_type: Exception class name
            stack_trace: Full stack trace (for unexpected errors)
            metadata: Additional context

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord(
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
            return self._write_to_file(record)

        except Exception as e:
            # Fail-safe: If error logging itself fails, log to standard logger
            logger.error(f"Error logger failed: {e} - Original error: {message}")
            return False

    def log_exception(
        self,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        domain: str,
        url: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: bool = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an exception with automatic classification.

        Args:
            exc: The exception to log
            component: Pipeline component
            stage: Processing stage
            domain: Target domain
            url: Optional page URL
            severity: Error severity (default: ERROR)
            error_type: Optional explicit error type (auto-detected if None)
            include_stack_trace: Whether to include stack trace (auto if None)
            metadata: Additional context

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord.from_exception(
                exc=exc,
                component=component,
                stage=stage,
                domain=domain,
                url=url,
                severity=severity,
                error_type=error_type,
                include_stack_trace=include_stack_trace,
                metadata=metadata,
            )
            return self._write_to_file(record)

        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original exception: {type(exc).__name__}")
            return False

    def _write_to_file(self, record: ErrorRecord) -> bool:
        """Append error record to the dated JSONL file."""
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
            file_path = self._log_dir / f"errors_{date_str}.jsonl"

            with open(file_path, "a", encoding="utf-8") as f:
                json.dump(record.model_dump(), f)
                f.write("\n")

            logger.debug(
                f"[ErrorLog] {record.component} | {record.stage} | {record.error_type} | {record.message[:200]}"
            )
            return True
        except Exception as e:
            logger.error(f"File error write failed: {e}")
            return False

    def read_errors(self, date_str: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read back error records for a given UTC date (default: today).

        Args:
            date_str: Date in YYYYMMDD form

        Returns:
            List of error record dicts (empty if no file exists)
        """
        date_str = date_str or datetime.now(timezone.utc).strftime("%Y%m%d")
        file_path = self._log_dir / f"errors_{date_str}.jsonl"
        if not file_path.exists():
            return []

        records = []
        for line in file_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning(f"Skipping corrupt error log line in {file_path.name}")
        return records


def get_error_logger() -> ErrorLogger:
    """
    Get the global ErrorLogger instance.

    Returns:
        Global ErrorLogger singleton
    """
    global _error_logger
    if _error_logger is None:
        _error_logger = ErrorLogger()
    return _error_logger

"""
Pydantic models for structured process logging.

This module defines type-safe process log models with automatic validation
to ensure consistency across the process logging system.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict


class ProcessStep(str, Enum):
    """
    Process step types for the capture pipeline.

    These follow one run: load -> prepare -> locate -> per-section capture and
    analysis -> merge -> complete.
    """
    RUN_START = "run_start"
    PAGE_PREPARED = "page_prepared"
    LISTINGS_LOCATED = "listings_located"
    SECTION_CAPTURED = "section_captured"
    SECTION_ANALYZED = "section_analyzed"
    RESULTS_MERGED = "results_merged"
    RUN_COMPLETE = "run_complete"


class ProcessStatus(str, Enum):
    """Process execution status."""
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"


class ProcessLogRecord(BaseModel):
    """
    Structured process log record.

    This model validates all process log data before logging to ensure
    consistency and enable reliable querying.
    """
    run_id: str = Field(..., min_length=1, description="UUID correlating steps in a capture run")

    step: ProcessStep = Field(..., description="Process step type")
    domain: str = Field(..., min_length=1, max_length=255, description="Domain being captured")

    started_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Step start timestamp (ISO 8601)"
    )
    completed_at: Optional[str] = Field(None, description="Step completion timestamp (ISO 8601)")
    duration_seconds: Optional[float] = Field(None, ge=0, description="Duration in seconds")

    status: ProcessStatus = Field(
        default=ProcessStatus.SUCCESS,
        description="Execution status"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (listing counts, section ranges, etc.)"
    )

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Log creation timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Ensure domain is not empty and normalized."""
        if not v or not v.strip():
            return "unknown"
        return v.strip().lower()[:255]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Convert non-serializable metadata values to strings."""
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    def calculate_duration(self) -> Optional[float]:
        """
        Calculate duration from started_at and completed_at timestamps.

        Returns:
            Duration in seconds, or None if completed_at is not set
        """
        if not self.completed_at:
            return None

        try:
            start = datetime.fromisoformat(self.started_at.replace('Z', '+00:00'))
            end = datetime.fromisoformat(self.completed_at.replace('Z', '+00:00'))
            return round((end - start).total_seconds(), 3)
        except Exception:
            return None


# Human-readable step descriptions
STEP_DESCRIPTIONS = {
    ProcessStep.RUN_START: "Capturing {url}",
    ProcessStep.PAGE_PREPARED: "Page prepared (hidden {hidden} overlays, scroll {scroll})",
    ProcessStep.LISTINGS_LOCATED: "Found {listings} vehicle listings via {strategy}",
    ProcessStep.SECTION_CAPTURED: "Captured section {section} (items {start}-{end})",
    ProcessStep.SECTION_ANALYZED: "Analyzed section {section}",
    ProcessStep.RESULTS_MERGED: "Merged results, {vehicles} unique vehicles",
    ProcessStep.RUN_COMPLETE: "Run complete",
}


def get_step_description(step: ProcessStep, **kwargs) -> str:
    """
    Get human-readable description for a step.

    Args:
        step: Process step
        **kwargs: Context for formatting (e.g., listings, vehicles)

    Returns:
        Formatted description string
    """
    template = STEP_DESCRIPTIONS.get(step, str(step))
    try:
        return template.format(**kwargs)
    except (KeyError, ValueError):
        return template

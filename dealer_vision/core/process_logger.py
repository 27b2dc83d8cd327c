"""
Centralized process logging system with JSONL file storage.

This module provides a fail-safe process logger that:
- Records each pipeline step as a JSON line under logs/process/
- Correlates steps of one capture run with a run_id
- Uses Pydantic validation for type safety
- Follows singleton pattern for global access
"""

import os
import json
import uuid
from pathlib import Path
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from dealer_vision.core.logging import get_logger
from dealer_vision.core.process_models import (
    ProcessStep,
    ProcessStatus,
    ProcessLogRecord,
    get_step_description,
)

logger = get_logger(__name__)

PROCESS_LOG_DIR = Path(os.getenv("PROCESS_LOG_DIR", "logs/process"))

# Singleton instance
_process_logger: Optional["ProcessLogger"] = None


class ProcessLogger:
    """
    Centralized process logger backed by dated JSONL files.

    Usage:
        >>> process_logger = get_process_logger()
        >>> run_id = process_logger.generate_run_id()
        >>> process_logger.log_step(
        ...     run_id=run_id,
        ...     step=ProcessStep.RUN_START,
        ...     domain="www.hudsonbussales.com",
        ...     metadata={"url": "https://www.hudsonbussales.com/PreOwnedBusesForSale"}
        ... )
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """Initialize process logger and its output directory."""
        self._log_dir = Path(log_dir) if log_dir else PROCESS_LOG_DIR
        self._log_dir.mkdir(exist_ok=True, parents=True)

    @staticmethod
    def generate_run_id() -> str:
        """
        Generate a unique run ID for correlating steps.

        Returns:
            UUID string for this capture run
        """
        return str(uuid.uuid4())

    def log_step(
        self,
        run_id: str,
        step: ProcessStep,
        domain: str,
        started_at: Optional[str] = None,
        completed_at: Optional[str] = None,
        status: ProcessStatus = ProcessStatus.SUCCESS,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log a process step.

        This method never raises exceptions.

        Args:
            run_id: UUID correlating all steps in a run
            step: Process step type
            domain: Domain being captured
            started_at: Step start timestamp (defaults to now)
            completed_at: Step completion timestamp
            status: Execution status
            metadata: Additional context

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            now = datetime.now(timezone.utc).isoformat()

            record = ProcessLogRecord(
                run_id=run_id,
                step=step,
                domain=domain,
                started_at=started_at or now,
                completed_at=completed_at,
                status=status,
                metadata=metadata or {},
            )
            record.duration_seconds = record.calculate_duration()

            desc = get_step_description(step, **(metadata or {}))
            logger.info(f"[Process] {domain} | {step.value} | {desc}")

            return self._write_to_file(record)

        except Exception as e:
            logger.error(f"Process logger failed: {e} - Step: {step.value}")
            return False

    def _write_to_file(self, record: ProcessLogRecord) -> bool:
        """Append process log record to the dated JSONL file."""
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
            file_path = self._log_dir / f"process_{date_str}.jsonl"

            with open(file_path, "a", encoding="utf-8") as f:
                json.dump(record.model_dump(), f)
                f.write("\n")

            return True
        except Exception as e:
            logger.error(f"File process log write failed: {e}")
            return False

    def get_logs_for_run(self, run_id: str, date_str: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Retrieve all process logs for a specific run from one day's file.

        Args:
            run_id: Run correlation ID
            date_str: Date in YYYYMMDD form (default: today, UTC)

        Returns:
            List of process log records in write order
        """
        date_str = date_str or datetime.now(timezone.utc).strftime("%Y%m%d")
        file_path = self._log_dir / f"process_{date_str}.jsonl"
        if not file_path.exists():
            return []

        out = []
        for line in file_path.read_text(encoding="utf-8").splitlines():
            try:
                row = json.loads(line)
            except json.JSONDecodeError:
                continue
            if row.get("run_id") == run_id:
                out.append(row)
        return out


def get_process_logger() -> ProcessLogger:
    """
    Get the global ProcessLogger instance.

    Returns:
        Global ProcessLogger singleton
    """
    global _process_logger
    if _process_logger is None:
        _process_logger = ProcessLogger()
    return _process_logger

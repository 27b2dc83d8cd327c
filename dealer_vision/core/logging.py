"""
Logging setup for dealer-vision capture runs.

One run logs to stdout and to a dated file per target site:
    logs/capture_<domain>_<YYYYMMDD>.log

Browser and model client libraries are noisy at DEBUG; they are capped at
WARNING so --verbose shows the capture pipeline, not HTTP chatter.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Iterable, Optional
from datetime import datetime


DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output during a capture.
NOISY_LOGGERS = (
    "asyncio",
    "urllib3",
    "httpx",
    "grpc",
    "google",
    "google.auth",
    "google.api_core",
)


def capture_log_path(log_dir: Path, domain: Optional[str] = None, when: Optional[datetime] = None) -> Path:
    """Dated log file for a run; the domain is folded into a safe file name."""
    date_str = (when or datetime.now()).strftime("%Y%m%d")
    if domain:
        safe = re.sub(r"[^a-z0-9.\-]+", "_", domain.lower()).strip("_")
        return Path(log_dir) / f"capture_{safe}_{date_str}.log"
    return Path(log_dir) / f"capture_{date_str}.log"


def quiet_noisy_loggers(names: Iterable[str] = NOISY_LOGGERS, level: int = logging.WARNING) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[Path] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Replace the root logger's handlers with a console handler and a file handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of the run log; parent directories are created
        console: Also log to stdout

    Returns:
        The configured root logger
    """
    numeric = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(exist_ok=True, parents=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.info(f"Logging initialized - Level: {level}, File: {log_file}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)


def init_capture_logging(
    verbose: bool = False,
    log_dir: Path = Path("logs"),
    domain: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for one capture run.

    Args:
        verbose: DEBUG for the pipeline instead of INFO
        log_dir: Directory for the run log file
        domain: Target site, used in the log file name

    Returns:
        Configured root logger
    """
    root_logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=capture_log_path(log_dir, domain),
    )
    quiet_noisy_loggers()
    return root_logger

"""
Shared utility functions for dealer-vision.

This module contains reusable utilities used across components:
- Retry logic with exponential backoff
- Async predicate polling with uniform timeout results
- URL / output-path helpers
"""

from dealer_vision.utils.url_utils import domain_of, site_dir
from dealer_vision.utils.retry import retry_with_backoff, retry_async_with_backoff, RetryConfig
from dealer_vision.utils.polling import wait_for_condition, WaitOutcome

__all__ = [
    # URL utilities
    "domain_of",
    "site_dir",
    # Retry utilities
    "retry_with_backoff",
    "retry_async_with_backoff",
    "RetryConfig",
    # Polling
    "wait_for_condition",
    "WaitOutcome",
]

"""
Utility functions for the written exam grader.
"""

from utils.retry import (
    RetryConfig,
    API_RETRY_CONFIG,
    calculate_backoff_ceiling,
    call_with_retry,
    call_with_config,
)

__all__ = [
    'RetryConfig',
    'API_RETRY_CONFIG',
    'calculate_backoff_ceiling',
    'call_with_retry',
    'call_with_config',
]

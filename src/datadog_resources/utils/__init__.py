"""Utility functions for Datadog resource handlers."""

from .http_utils import (
    describe_status,
    is_not_found_status,
    is_retryable_status,
    is_success_status,
)

__all__ = [
    # HTTP utilities
    "describe_status",
    "is_success_status",
    "is_not_found_status",
    "is_retryable_status",
]

"""
HTTP utility functions.

Helpers for interpreting status codes returned by the Datadog API.
"""

from typing import Optional


def describe_status(status_code: Optional[int]) -> Optional[str]:
    """
    Describe a Datadog API status code in words.

    404 and 429 get their own labels because handlers act on them:
    a missing object leaves state, rate limiting is retried.

    Args:
        status_code: HTTP status code (e.g., 200, 404, 500)

    Returns:
        Short label, or None if status_code is None or out of range

    Examples:
        >>> describe_status(404)
        'not found'
        >>> describe_status(503)
        'server error'
    """
    if status_code is None or not 100 <= status_code < 600:
        return None

    if status_code == 404:
        return "not found"
    if status_code == 429:
        return "rate limited"
    if status_code < 300:
        return "success"
    if status_code < 400:
        return "redirect"
    if status_code < 500:
        return "client error"
    return "server error"


def is_success_status(status_code: Optional[int]) -> bool:
    """Check if status code indicates success (2xx)."""
    return status_code is not None and 200 <= status_code < 300


def is_not_found_status(status_code: Optional[int]) -> bool:
    return status_code == 404


def is_retryable_status(status_code: Optional[int]) -> bool:
    """
    Check if a request with this status code is worth repeating.

    Rate limiting (429) and server errors (5xx) are transient; other
    client errors will fail the same way again.
    """
    if status_code is None:
        return False
    return status_code == 429 or 500 <= status_code < 600

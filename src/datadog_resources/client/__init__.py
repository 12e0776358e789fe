"""Datadog API client module.

This module provides the HTTP client used by the resource handlers.
"""

from .api import DatadogClient, get_datadog_client
from .errors import (
    DatadogApiError,
    DatadogConnectionError,
    UnparsedResponseError,
)

__all__ = [
    # Client
    "DatadogClient",
    "get_datadog_client",
    # Errors
    "DatadogApiError",
    "DatadogConnectionError",
    "UnparsedResponseError",
]

"""
Custom exceptions for the Datadog API client.
"""

from typing import Any, Optional

import httpx

from ..utils.http_utils import is_not_found_status, is_retryable_status


class DatadogApiError(Exception):
    """
    Raised when the Datadog API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code (None when no response was received)
        body: Decoded response body, or raw text when it is not JSON
        response: The httpx response, when available
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        response: Optional[httpx.Response] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        self.response = response
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message

    @property
    def errors(self) -> list[str]:
        """Error strings reported by the API in the response body."""
        if isinstance(self.body, dict):
            errors = self.body.get("errors", [])
            return [e if isinstance(e, str) else str(e) for e in errors]
        return []

    @property
    def is_not_found(self) -> bool:
        return is_not_found_status(self.status_code)

    @property
    def is_retryable(self) -> bool:
        return is_retryable_status(self.status_code)


class DatadogConnectionError(DatadogApiError):
    """Raised when the request never produced an HTTP response."""

    pass


class UnparsedResponseError(DatadogApiError):
    """Raised when a response body is missing fields the caller relies on."""

    pass

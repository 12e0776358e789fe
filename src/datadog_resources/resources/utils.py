"""
Shared helpers for resource handlers.

Id parsing, response validation and translation of API errors into
diagnostics.
"""

from typing import Any, Iterable

from ..client.errors import DatadogApiError, UnparsedResponseError
from .base import Diagnostic, Diagnostics, Severity
from .exceptions import InvalidResourceIdError


def tenant_and_client_from_id(resource_id: str) -> tuple[str, str]:
    """
    Split an Azure integration id into tenant name and client id.

    Args:
        resource_id: Id in the form '<tenant_name>:<client_id>'

    Returns:
        Tuple of (tenant_name, client_id)

    Raises:
        InvalidResourceIdError: If the id does not have exactly two parts
    """
    parts = resource_id.split(":")
    if len(parts) != 2 or not all(parts):
        raise InvalidResourceIdError(resource_id, "<tenant_name>:<client_id>")
    return parts[0], parts[1]


def _error_detail(error: BaseException) -> str:
    if isinstance(error, DatadogApiError):
        api_errors = error.errors
        if api_errors:
            return f"{error}: {', '.join(api_errors)}"
        if isinstance(error.body, str) and error.body:
            return f"{error}: {error.body}"
    return str(error)


def translate_client_error(error: BaseException, message: str) -> DatadogApiError:
    """
    Wrap a client error with a handler-specific message.

    Args:
        error: Exception raised by the API client
        message: Context, e.g. 'error creating an Azure integration'

    Returns:
        DatadogApiError carrying the original status code and body
    """
    if isinstance(error, DatadogApiError):
        return DatadogApiError(
            f"{message}: {_error_detail(error)}",
            status_code=error.status_code,
            body=error.body,
            response=error.response,
        )
    return DatadogApiError(f"{message}: {error}")


def translate_client_error_diag(error: BaseException, message: str) -> Diagnostics:
    """Translate a client error into a single error diagnostic."""
    return [
        Diagnostic(
            severity=Severity.ERROR,
            summary=message,
            detail=_error_detail(error),
        )
    ]


def check_for_unparsed(payload: Any, required_keys: Iterable[str] = ()) -> None:
    """
    Check a decoded response has the shape a handler relies on.

    Args:
        payload: Decoded JSON body
        required_keys: Keys that must be present when payload is a dict

    Raises:
        UnparsedResponseError: If payload is not JSON or misses a key
    """
    if isinstance(payload, list):
        for item in payload:
            check_for_unparsed(item, required_keys)
        return

    if not isinstance(payload, dict):
        raise UnparsedResponseError(
            f"object contains unparsed element: {payload!r}"
        )

    missing = [key for key in required_keys if key not in payload]
    if missing:
        raise UnparsedResponseError(
            f"object is missing expected element(s): {', '.join(missing)}",
            body=payload,
        )

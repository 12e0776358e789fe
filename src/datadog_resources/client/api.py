"""
Datadog REST API client for resource handlers.

Wraps the endpoints the resource handlers need:
- Azure integration accounts (v1)
- Sensitive data scanner configuration and rules (v2)
- Security monitoring rules (v2)

Every call returns the decoded JSON body (None for empty bodies) and
raises DatadogApiError for non-2xx responses, so handlers can inspect
the status code of a failure.
"""

import logging
from typing import Any, Optional

import httpx

from ..config.constants import (
    AZURE_INTEGRATION_PATH,
    SCANNER_CONFIG_PATH,
    SCANNER_RULES_PATH,
    SECURITY_RULES_PATH,
)
from ..config.settings import Settings, get_settings
from ..utils.http_utils import describe_status, is_success_status
from .errors import DatadogApiError, DatadogConnectionError

logger = logging.getLogger(__name__)


class DatadogClient:
    """
    Authenticated HTTP client for the Datadog API.

    Usage:
        with DatadogClient() as client:
            groups = client.list_scanning_groups()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Application settings (uses default if None)
            transport: httpx transport override, mainly for tests
        """
        if settings is None:
            settings = get_settings()
        self.settings = settings
        self._http = httpx.Client(
            base_url=settings.api_url,
            headers={
                "DD-API-KEY": settings.api_key,
                "DD-APPLICATION-KEY": settings.app_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "DatadogClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to the API URL
            json: Request body

        Returns:
            Decoded JSON body, or None when the body is empty

        Raises:
            DatadogApiError: If the API answers with a non-2xx status
            DatadogConnectionError: If no response was received
        """
        logger.debug(f"{method} {path}")

        try:
            response = self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise DatadogConnectionError(f"{method} {path} failed: {e}") from e

        body = _decode_body(response)

        if not is_success_status(response.status_code):
            logger.debug(
                f"{method} {path} returned HTTP {response.status_code} "
                f"({describe_status(response.status_code)})"
            )
            raise DatadogApiError(
                f"{method} {path} failed",
                status_code=response.status_code,
                body=body,
                response=response,
            )

        return body

    # =========================================================================
    # Azure Integration (v1)
    # =========================================================================

    def list_azure_integrations(self) -> list[dict]:
        return self._request("GET", AZURE_INTEGRATION_PATH) or []

    def create_azure_integration(self, account: dict) -> Any:
        return self._request("POST", AZURE_INTEGRATION_PATH, json=account)

    def update_azure_integration(self, account: dict) -> Any:
        return self._request("PUT", AZURE_INTEGRATION_PATH, json=account)

    def delete_azure_integration(self, account: dict) -> Any:
        return self._request("DELETE", AZURE_INTEGRATION_PATH, json=account)

    # =========================================================================
    # Sensitive Data Scanner (v2)
    # =========================================================================

    def list_scanning_groups(self) -> dict:
        """Get the scanning configuration, with groups and rules in 'included'."""
        return self._request("GET", SCANNER_CONFIG_PATH) or {}

    def create_scanning_rule(self, body: dict) -> dict:
        return self._request("POST", SCANNER_RULES_PATH, json=body)

    def update_scanning_rule(self, rule_id: str, body: dict) -> dict:
        return self._request("PATCH", f"{SCANNER_RULES_PATH}/{rule_id}", json=body)

    def delete_scanning_rule(self, rule_id: str, body: dict) -> Any:
        return self._request("DELETE", f"{SCANNER_RULES_PATH}/{rule_id}", json=body)

    # =========================================================================
    # Security Monitoring (v2)
    # =========================================================================

    def get_security_monitoring_rule(self, rule_id: str) -> dict:
        return self._request("GET", f"{SECURITY_RULES_PATH}/{rule_id}")

    def create_security_monitoring_rule(self, body: dict) -> dict:
        return self._request("POST", SECURITY_RULES_PATH, json=body)

    def update_security_monitoring_rule(self, rule_id: str, body: dict) -> dict:
        return self._request("PUT", f"{SECURITY_RULES_PATH}/{rule_id}", json=body)

    def delete_security_monitoring_rule(self, rule_id: str) -> Any:
        return self._request("DELETE", f"{SECURITY_RULES_PATH}/{rule_id}")


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to text for non-JSON payloads."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def get_datadog_client(settings: Optional[Settings] = None) -> DatadogClient:
    """
    Create authenticated Datadog client.

    Args:
        settings: Application settings (uses default if None)

    Returns:
        Authenticated Datadog client
    """
    if settings is None:
        settings = get_settings()
    return DatadogClient(settings=settings)

"""
Existence and destruction checks for managed resources.

After an apply, every resource recorded in state should exist in
Datadog; after a destroy, none should. Deletions are eventually
consistent, so the destroyed check polls with RetryRunner: a 404 counts
as gone, any other answer is retried until the attempt budget runs out.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..client.api import DatadogClient
from ..client.errors import DatadogApiError
from ..config.constants import (
    RESOURCE_CLOUD_CONFIGURATION_RULE,
    RESOURCE_INTEGRATION_AZURE,
    RESOURCE_SENSITIVE_DATA_SCANNER_RULE,
)
from ..config.settings import Settings, get_settings
from ..monitoring.retry_handler import ProbeResult, RetryConfig, RetryRunner
from .exceptions import ResourceTypeNotFoundError, VerificationError
from .sensitive_data_scanner_rule import find_rule
from .utils import tenant_and_client_from_id, translate_client_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManagedResource:
    """A resource recorded in state: its type and remote id."""

    type: str
    id: str


def load_state_resources(state: dict) -> list[ManagedResource]:
    """
    Extract managed resources from a Terraform v4 state document.

    Args:
        state: Decoded terraform.tfstate

    Returns:
        One ManagedResource per resource instance with an id
    """
    resources = []
    for resource in state.get("resources", []):
        if resource.get("mode", "managed") != "managed":
            continue
        for instance in resource.get("instances", []):
            resource_id = instance.get("attributes", {}).get("id")
            if resource_id:
                resources.append(ManagedResource(type=resource["type"], id=resource_id))
    return resources


def load_state_file(path: Path) -> list[ManagedResource]:
    """Read a state file and extract its managed resources."""
    with open(path, encoding="utf-8") as f:
        return load_state_resources(json.load(f))


# =============================================================================
# Lookups
# =============================================================================


def _scanning_rule_exists(client: DatadogClient, rule_id: str) -> bool:
    try:
        config = client.list_scanning_groups()
    except DatadogApiError as e:
        if e.is_not_found:
            return False
        raise
    return find_rule(config, rule_id) is not None


def _security_rule_exists(client: DatadogClient, rule_id: str) -> bool:
    try:
        client.get_security_monitoring_rule(rule_id)
    except DatadogApiError as e:
        if e.is_not_found:
            return False
        raise
    return True


def _azure_integration_exists(client: DatadogClient, resource_id: str) -> bool:
    tenant_name, client_id = tenant_and_client_from_id(resource_id)
    try:
        integrations = client.list_azure_integrations()
    except DatadogApiError as e:
        if e.is_not_found:
            return False
        raise
    return any(
        i.get("tenant_name") == tenant_name and i.get("client_id") == client_id
        for i in integrations
    )


# Resource type -> (label used in messages, existence lookup)
EXISTENCE_CHECKS: dict[str, tuple[str, Callable[[DatadogClient, str], bool]]] = {
    RESOURCE_SENSITIVE_DATA_SCANNER_RULE: (
        "sensitive data scanner rule",
        _scanning_rule_exists,
    ),
    RESOURCE_CLOUD_CONFIGURATION_RULE: (
        "cloud configuration rule",
        _security_rule_exists,
    ),
    RESOURCE_INTEGRATION_AZURE: ("Azure integration", _azure_integration_exists),
}


def _select(
    resources: list[ManagedResource], resource_type: Optional[str]
) -> list[ManagedResource]:
    if resource_type is not None and resource_type not in EXISTENCE_CHECKS:
        raise ResourceTypeNotFoundError(resource_type, list(EXISTENCE_CHECKS))
    return [
        r
        for r in resources
        if r.type in EXISTENCE_CHECKS
        and (resource_type is None or r.type == resource_type)
    ]


# =============================================================================
# Checks
# =============================================================================


def check_resources_exist(
    client: DatadogClient,
    resources: list[ManagedResource],
    resource_type: Optional[str] = None,
) -> None:
    """
    Check every selected resource exists remotely.

    Args:
        client: Datadog client
        resources: Resources recorded in state
        resource_type: Only check this type (all known types if None)

    Raises:
        VerificationError: If a resource is missing
        DatadogApiError: If a lookup fails
    """
    for resource in _select(resources, resource_type):
        label, exists = EXISTENCE_CHECKS[resource.type]
        try:
            found = exists(client, resource.id)
        except DatadogApiError as e:
            raise translate_client_error(e, f"error retrieving {label}") from e
        if not found:
            raise VerificationError(resource.type, f"{label} {resource.id} does not exist")
        logger.debug(f"{label} {resource.id} exists")


def check_resources_destroyed(
    client: DatadogClient,
    resources: list[ManagedResource],
    resource_type: Optional[str] = None,
    runner: Optional[RetryRunner] = None,
    max_attempts: Optional[int] = None,
    delay_seconds: Optional[float] = None,
    settings: Optional[Settings] = None,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """
    Check every selected resource is gone, polling until it is.

    Budget and delay default to the retry settings (two attempts, ten
    seconds apart).

    Args:
        client: Datadog client
        resources: Resources recorded in state before the destroy
        resource_type: Only check this type (all known types if None)
        runner: Retry runner (built from settings if None)
        max_attempts: Attempt budget override
        delay_seconds: Delay override
        settings: Application settings
        cancel_event: Stops polling early when set

    Raises:
        VerificationError: If resources remain once retries are exhausted,
            carrying the last failure reason
    """
    selected = _select(resources, resource_type)
    if not selected:
        return

    if runner is None:
        if settings is None:
            settings = get_settings()
        runner = RetryRunner(RetryConfig.from_settings(settings.retry))

    # Resource that failed the most recent attempt
    last_failed = [selected[0]]

    def probe() -> ProbeResult:
        for resource in selected:
            label, exists = EXISTENCE_CHECKS[resource.type]
            try:
                found = exists(client, resource.id)
            except DatadogApiError as e:
                last_failed[0] = resource
                return ProbeResult.retryable(f"received an error retrieving {label} {e}")
            if found:
                last_failed[0] = resource
                return ProbeResult.retryable(f"{label} still exists")
        return ProbeResult.success()

    outcome = runner.run(
        max_attempts=max_attempts,
        delay_seconds=delay_seconds,
        probe=probe,
        cancel_event=cancel_event,
    )

    if not outcome.success:
        raise VerificationError(
            last_failed[0].type,
            outcome.last_reason or f"destroy check {outcome.status.value}",
        )

    logger.info(f"Verified {len(selected)} resource(s) destroyed")

"""
Cloud configuration rule resource.

A cloud configuration rule is a security monitoring rule of type
'cloud_configuration' whose detection logic is a Rego policy evaluated
against cloud resources of a given type.
"""

import logging
from typing import Any

from ..client.errors import DatadogApiError
from ..config.constants import RESOURCE_CLOUD_CONFIGURATION_RULE, RULE_SEVERITIES
from .base import Diagnostics, ResourceData, ResourceHandler, diag_errorf, diag_from_error
from .registry import ResourceRegistry
from .utils import check_for_unparsed, translate_client_error_diag

logger = logging.getLogger(__name__)

RULE_TYPE = "cloud_configuration"

# Optional list attributes; left out of state when empty
OPTIONAL_LISTS = ("notifications", "group_by", "related_resource_types", "tags")


def build_rule_request(data: ResourceData) -> dict:
    """
    Build a security monitoring rule payload from state.

    Raises:
        ValueError: If severity is not a known value
    """
    severity = data.get("severity", "")
    if severity not in RULE_SEVERITIES:
        raise ValueError(
            f"invalid severity {severity!r}, expected one of "
            f"{', '.join(RULE_SEVERITIES)}"
        )

    resource_type = data.get("resource_type", "")
    related = list(data.get("related_resource_types") or [])
    group_by = list(data.get("group_by") or [])

    return {
        "type": RULE_TYPE,
        "name": data.get("name", ""),
        "message": data.get("message", ""),
        "isEnabled": bool(data.get("enabled", False)),
        "tags": list(data.get("tags") or []),
        "options": {
            "complianceRuleOptions": {
                "resourceType": resource_type,
                "complexRule": len(related) > 0,
                "regoRule": {
                    "policy": data.get("policy", ""),
                    "resourceTypes": [resource_type] + related,
                },
            },
        },
        "cases": [
            {
                "status": severity,
                "notifications": list(data.get("notifications") or []),
            }
        ],
        "complianceSignalOptions": {
            "userActivationStatus": len(group_by) > 0,
            "userGroupByFields": group_by,
        },
        "filters": [],
    }


def update_rule_state(data: ResourceData, rule: dict) -> None:
    """Copy a security monitoring rule into state."""
    data.set("name", rule.get("name", ""))
    data.set("message", rule.get("message", ""))
    data.set("enabled", bool(rule.get("isEnabled", False)))

    compliance = rule.get("options", {}).get("complianceRuleOptions", {})
    resource_type = compliance.get("resourceType", "")
    rego = compliance.get("regoRule", {})
    data.set("resource_type", resource_type)
    data.set("policy", rego.get("policy", ""))

    cases = rule.get("cases") or [{}]
    data.set("severity", cases[0].get("status", ""))

    signal_options = rule.get("complianceSignalOptions") or {}
    lists: dict[str, Any] = {
        "notifications": cases[0].get("notifications") or [],
        "group_by": signal_options.get("userGroupByFields") or [],
        "related_resource_types": [
            t for t in rego.get("resourceTypes") or [] if t != resource_type
        ],
        "tags": rule.get("tags") or [],
    }
    for key in OPTIONAL_LISTS:
        if lists[key]:
            data.set(key, list(lists[key]))
        else:
            data.unset(key)


@ResourceRegistry.register(RESOURCE_CLOUD_CONFIGURATION_RULE)
class CloudConfigurationRuleResource(ResourceHandler):
    """Handler for datadog_cloud_configuration_rule."""

    @property
    def resource_type(self) -> str:
        return RESOURCE_CLOUD_CONFIGURATION_RULE

    def read(self, data: ResourceData) -> Diagnostics:
        try:
            rule = self.client.get_security_monitoring_rule(data.id)
        except DatadogApiError as e:
            if e.is_not_found:
                logger.warning(
                    f"Cloud configuration rule {data.id} not found, removing from state"
                )
                data.set_id("")
                return []
            return translate_client_error_diag(
                e, "error retrieving cloud configuration rule"
            )

        try:
            check_for_unparsed(rule, ["id", "name"])
        except DatadogApiError as e:
            return diag_from_error(e)

        update_rule_state(data, rule)
        return []

    def create(self, data: ResourceData) -> Diagnostics:
        try:
            body = build_rule_request(data)
        except ValueError as e:
            return diag_from_error(e)

        try:
            rule = self.client.create_security_monitoring_rule(body)
        except DatadogApiError as e:
            return translate_client_error_diag(
                e, "error creating cloud configuration rule"
            )

        try:
            check_for_unparsed(rule, ["id"])
        except DatadogApiError as e:
            return diag_from_error(e)

        if not rule["id"]:
            return diag_errorf("error creating cloud configuration rule: empty id")

        data.set_id(rule["id"])
        logger.info(f"Created cloud configuration rule {data.id}")
        update_rule_state(data, rule)
        return []

    def update(self, data: ResourceData) -> Diagnostics:
        try:
            body = build_rule_request(data)
        except ValueError as e:
            return diag_from_error(e)

        try:
            rule = self.client.update_security_monitoring_rule(data.id, body)
        except DatadogApiError as e:
            return translate_client_error_diag(
                e, "error updating cloud configuration rule"
            )

        try:
            check_for_unparsed(rule, ["id"])
        except DatadogApiError as e:
            return diag_from_error(e)

        update_rule_state(data, rule)
        return []

    def delete(self, data: ResourceData) -> Diagnostics:
        try:
            self.client.delete_security_monitoring_rule(data.id)
        except DatadogApiError as e:
            return translate_client_error_diag(
                e, "error deleting cloud configuration rule"
            )

        logger.info(f"Deleted cloud configuration rule {data.id}")
        return []

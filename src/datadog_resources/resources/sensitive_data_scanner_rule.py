"""
Sensitive data scanner rule resource.

Rules live inside the scanner configuration: there is no per-rule GET,
so read fetches the whole configuration and looks the rule up among the
'included' objects. Every write returns a configuration version in
'meta', which is kept in state and sent back on delete.
"""

import logging
from typing import Any, Optional

from ..client.errors import DatadogApiError
from ..config.constants import (
    RESOURCE_SENSITIVE_DATA_SCANNER_RULE,
    TEXT_REPLACEMENT_TYPES,
)
from .base import (
    Diagnostics,
    ResourceData,
    ResourceHandler,
    diag_errorf,
    diag_from_error,
)
from .registry import ResourceRegistry
from .utils import check_for_unparsed, translate_client_error_diag

logger = logging.getLogger(__name__)

RULE_TYPE = "sensitive_data_scanner_rule"
GROUP_TYPE = "sensitive_data_scanner_group"

PARTIAL_REPLACEMENT_TYPES = (
    "partial_replacement_from_beginning",
    "partial_replacement_from_end",
)


class TextReplacementError(ValueError):
    """Raised when a text_replacement block is invalid."""

    pass


def build_text_replacement(block: Optional[dict]) -> dict:
    """
    Build the text_replacement payload from the nested state block.

    Raises:
        TextReplacementError: If the type is unknown or a partial
            replacement has no positive number_of_chars
    """
    block = block or {}
    replacement: dict[str, Any] = {}

    replacement_type = block.get("type") or "none"
    if replacement_type not in TEXT_REPLACEMENT_TYPES:
        raise TextReplacementError(
            f"invalid value {replacement_type!r} for text_replacement.type, "
            f"expected one of {', '.join(TEXT_REPLACEMENT_TYPES)}"
        )
    replacement["type"] = replacement_type

    number_of_chars = block.get("number_of_chars")
    if number_of_chars not in (None, ""):
        try:
            replacement["number_of_chars"] = int(number_of_chars)
        except (TypeError, ValueError) as e:
            raise TextReplacementError(
                f"text_replacement.number_of_chars must be an integer, "
                f"got {number_of_chars!r}"
            ) from e

    if replacement_type in PARTIAL_REPLACEMENT_TYPES:
        if replacement.get("number_of_chars", 0) <= 0:
            raise TextReplacementError(
                f"text_replacement.number_of_chars must be > 0 "
                f"for type {replacement_type!r}"
            )

    replacement_string = block.get("replacement_string")
    if replacement_string:
        replacement["replacement_string"] = replacement_string

    return replacement


def build_rule_attributes(data: ResourceData) -> dict:
    """Build rule attributes from state."""
    attributes: dict[str, Any] = {}

    description, ok = data.get_ok("description")
    if ok:
        attributes["description"] = description

    attributes["excluded_attributes"] = list(data.get("excluded_attributes") or [])

    if data.has("is_enabled"):
        attributes["is_enabled"] = bool(data.get("is_enabled"))

    name, ok = data.get_ok("name")
    if ok:
        attributes["name"] = name

    pattern, ok = data.get_ok("pattern")
    if ok:
        attributes["pattern"] = pattern

    attributes["tags"] = list(data.get("tags") or [])

    blocks = data.get("text_replacement") or []
    attributes["text_replacement"] = build_text_replacement(
        blocks[0] if blocks else None
    )

    return attributes


def _relationships(data: ResourceData) -> dict:
    group_id, ok = data.get_ok("group_id")
    if not ok:
        return {}
    return {"group": {"data": {"type": GROUP_TYPE, "id": group_id}}}


def _meta(data: ResourceData) -> dict:
    """Request meta carrying the configuration version, when state has a usable one."""
    version, ok = data.get_ok("version")
    if not ok:
        return {}
    try:
        return {"version": int(version)}
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric configuration version {version!r}")
        return {}


def build_create_request(data: ResourceData) -> dict:
    body: dict[str, Any] = {
        "data": {
            "type": RULE_TYPE,
            "attributes": build_rule_attributes(data),
        },
        "meta": _meta(data),
    }
    relationships = _relationships(data)
    if relationships:
        body["data"]["relationships"] = relationships
    return body


def build_update_request(data: ResourceData) -> dict:
    body = build_create_request(data)
    body["data"]["id"] = data.id
    return body


def update_rule_state(
    data: ResourceData, rule: dict, version: Optional[int] = None
) -> None:
    """Copy rule attributes from an API object into state."""
    attributes = rule.get("attributes", {})

    for key in ("description", "name", "pattern"):
        if key in attributes:
            data.set(key, attributes[key])
    if "is_enabled" in attributes:
        data.set("is_enabled", bool(attributes["is_enabled"]))
    data.set("excluded_attributes", list(attributes.get("excluded_attributes") or []))
    data.set("tags", list(attributes.get("tags") or []))

    replacement = attributes.get("text_replacement")
    if replacement:
        data.set(
            "text_replacement",
            [
                {
                    "type": replacement.get("type", "none"),
                    "number_of_chars": replacement.get("number_of_chars", 0),
                    "replacement_string": replacement.get("replacement_string", ""),
                }
            ],
        )

    group = rule.get("relationships", {}).get("group", {}).get("data")
    if group and group.get("id"):
        data.set("group_id", group["id"])

    if version is not None:
        data.set("version", version)


def find_rule(config: dict, rule_id: str) -> Optional[dict]:
    """Find a rule by id among the configuration's included objects."""
    for item in config.get("included", []) or []:
        if item.get("type") == RULE_TYPE and item.get("id") == rule_id:
            return item
    return None


@ResourceRegistry.register(RESOURCE_SENSITIVE_DATA_SCANNER_RULE)
class SensitiveDataScannerRuleResource(ResourceHandler):
    """Handler for datadog_sensitive_data_scanner_rule."""

    @property
    def resource_type(self) -> str:
        return RESOURCE_SENSITIVE_DATA_SCANNER_RULE

    def read(self, data: ResourceData) -> Diagnostics:
        try:
            config = self.client.list_scanning_groups()
        except DatadogApiError as e:
            if e.is_not_found:
                logger.warning(f"Scanning rule {data.id} not found, removing from state")
                data.set_id("")
                return []
            return translate_client_error_diag(e, "error calling ListScanningGroups")

        try:
            check_for_unparsed(config, ["data"])
        except DatadogApiError as e:
            return diag_from_error(e)

        rule = find_rule(config, data.id)
        if rule is None:
            logger.warning(f"Scanning rule {data.id} not found, removing from state")
            data.set_id("")
            return []

        update_rule_state(data, rule, config.get("meta", {}).get("version"))
        return []

    def create(self, data: ResourceData) -> Diagnostics:
        try:
            body = build_create_request(data)
        except TextReplacementError as e:
            return diag_from_error(e)

        try:
            resp = self.client.create_scanning_rule(body)
        except DatadogApiError as e:
            return translate_client_error_diag(
                e, "error creating SensitiveDataScannerRule"
            )

        return self._apply_response(data, resp)

    def update(self, data: ResourceData) -> Diagnostics:
        try:
            body = build_update_request(data)
        except TextReplacementError as e:
            return diag_from_error(e)

        try:
            resp = self.client.update_scanning_rule(data.id, body)
        except DatadogApiError as e:
            return translate_client_error_diag(
                e, "error updating SensitiveDataScannerRule"
            )

        return self._apply_response(data, resp)

    def delete(self, data: ResourceData) -> Diagnostics:
        try:
            self.client.delete_scanning_rule(data.id, {"meta": _meta(data)})
        except DatadogApiError as e:
            # State is kept: the rule is assumed to still exist.
            return translate_client_error_diag(
                e, "error deleting SensitiveDataScannerRule"
            )

        logger.info(f"Deleted scanning rule {data.id}")
        return []

    def _apply_response(self, data: ResourceData, resp: Any) -> Diagnostics:
        try:
            check_for_unparsed(resp, ["data"])
            check_for_unparsed(resp["data"], ["id"])
        except DatadogApiError as e:
            return diag_from_error(e)

        rule = resp["data"]
        if not rule.get("id"):
            return diag_errorf("error creating SensitiveDataScannerRule: empty id")

        data.set_id(rule["id"])
        update_rule_state(data, rule, (resp.get("meta") or {}).get("version"))
        return []

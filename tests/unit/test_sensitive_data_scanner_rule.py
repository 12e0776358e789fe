"""
Unit tests for the sensitive data scanner rule resource handler.
"""

import pytest

from datadog_resources.resources import (
    ResourceData,
    SensitiveDataScannerRuleResource,
    has_error,
)
from datadog_resources.resources.sensitive_data_scanner_rule import (
    TextReplacementError,
    build_create_request,
    build_text_replacement,
    build_update_request,
    find_rule,
)

CONFIG_PATH = "/api/v2/sensitive-data-scanner/config"
RULES_PATH = "/api/v2/sensitive-data-scanner/config/rules"


def rule_state(**overrides) -> ResourceData:
    attributes = {
        "description": "Detects card numbers",
        "excluded_attributes": ["username"],
        "is_enabled": True,
        "name": "card-numbers",
        "pattern": r"\d{16}",
        "tags": ["team:security"],
        "group_id": "group-1",
        "text_replacement": [
            {
                "type": "partial_replacement_from_end",
                "number_of_chars": 4,
                "replacement_string": "",
            }
        ],
    }
    attributes.update(overrides)
    return ResourceData(attributes=attributes)


def rule_object(rule_id: str = "rule-1", **attributes) -> dict:
    base = {
        "description": "Detects card numbers",
        "excluded_attributes": ["username"],
        "is_enabled": True,
        "name": "card-numbers",
        "pattern": r"\d{16}",
        "tags": ["team:security"],
        "text_replacement": {"type": "partial_replacement_from_end", "number_of_chars": 4},
    }
    base.update(attributes)
    return {
        "id": rule_id,
        "type": "sensitive_data_scanner_rule",
        "attributes": base,
        "relationships": {
            "group": {"data": {"id": "group-1", "type": "sensitive_data_scanner_group"}}
        },
    }


def config_response(*rules, version: int = 3) -> dict:
    return {
        "data": {"id": "config-1", "type": "sensitive_data_scanner_configuration"},
        "included": [
            {"id": "group-1", "type": "sensitive_data_scanner_group", "attributes": {}},
            *rules,
        ],
        "meta": {"version": version},
    }


@pytest.fixture
def handler(provider) -> SensitiveDataScannerRuleResource:
    return SensitiveDataScannerRuleResource(provider)


class TestTextReplacement:
    """Tests for build_text_replacement."""

    def test_default_is_none(self):
        assert build_text_replacement(None) == {"type": "none"}

    def test_replacement_string(self):
        block = {"type": "replacement_string", "replacement_string": "[redacted]"}

        assert build_text_replacement(block) == {
            "type": "replacement_string",
            "replacement_string": "[redacted]",
        }

    def test_number_of_chars_parsed(self):
        block = {"type": "partial_replacement_from_beginning", "number_of_chars": "6"}

        assert build_text_replacement(block)["number_of_chars"] == 6

    def test_unknown_type(self):
        with pytest.raises(TextReplacementError, match="text_replacement.type"):
            build_text_replacement({"type": "scramble"})

    def test_partial_requires_positive_chars(self):
        with pytest.raises(TextReplacementError, match="must be > 0"):
            build_text_replacement({"type": "partial_replacement_from_end"})

    def test_non_numeric_chars(self):
        with pytest.raises(TextReplacementError, match="integer"):
            build_text_replacement({"type": "hash", "number_of_chars": "four"})


class TestRequestBodies:
    """Tests for create/update payloads."""

    def test_create_body(self):
        body = build_create_request(rule_state())

        data = body["data"]
        assert data["type"] == "sensitive_data_scanner_rule"
        assert "id" not in data
        assert data["attributes"]["name"] == "card-numbers"
        assert data["attributes"]["excluded_attributes"] == ["username"]
        assert data["attributes"]["is_enabled"] is True
        assert data["attributes"]["text_replacement"] == {
            "type": "partial_replacement_from_end",
            "number_of_chars": 4,
        }
        assert data["relationships"]["group"]["data"]["id"] == "group-1"
        assert body["meta"] == {}

    def test_disabled_rule_is_sent(self):
        """is_enabled=False is sent, not dropped as a zero value."""
        body = build_create_request(rule_state(is_enabled=False))

        assert body["data"]["attributes"]["is_enabled"] is False

    def test_optional_fields_omitted(self):
        body = build_create_request(ResourceData())

        attributes = body["data"]["attributes"]
        assert "description" not in attributes
        assert "is_enabled" not in attributes
        assert attributes["tags"] == []
        assert attributes["text_replacement"] == {"type": "none"}
        assert "relationships" not in body["data"]

    def test_update_body(self):
        data = rule_state(version=5)
        data.set_id("rule-1")

        body = build_update_request(data)

        assert body["data"]["id"] == "rule-1"
        assert body["meta"] == {"version": 5}


class TestFindRule:
    def test_finds_rule_by_id(self):
        config = config_response(rule_object("rule-1"), rule_object("rule-2"))

        assert find_rule(config, "rule-2")["id"] == "rule-2"

    def test_ignores_groups(self):
        config = config_response()

        assert find_rule(config, "group-1") is None


class TestCreate:
    """Tests for create()."""

    def test_create(self, handler, fake_api):
        fake_api.add("POST", RULES_PATH, body={"data": rule_object("rule-9"), "meta": {"version": 4}})
        data = rule_state()

        diagnostics = handler.create(data)

        assert diagnostics == []
        assert data.id == "rule-9"
        assert data.get("version") == 4
        assert data.get("text_replacement")[0]["number_of_chars"] == 4

    def test_invalid_replacement_skips_api(self, handler, fake_api):
        data = rule_state(text_replacement=[{"type": "scramble"}])

        diagnostics = handler.create(data)

        assert has_error(diagnostics)
        assert fake_api.requests == []

    def test_create_error(self, handler, fake_api):
        fake_api.add("POST", RULES_PATH, status=400, body={"errors": ["Invalid pattern"]})

        diagnostics = handler.create(rule_state())

        assert diagnostics[0].summary == "error creating SensitiveDataScannerRule"
        assert "Invalid pattern" in diagnostics[0].detail

    def test_response_without_id(self, handler, fake_api):
        fake_api.add("POST", RULES_PATH, body={"data": {"type": "sensitive_data_scanner_rule"}})
        data = rule_state()

        diagnostics = handler.create(data)

        assert has_error(diagnostics)
        assert data.id == ""


class TestRead:
    """Tests for read()."""

    def test_read_updates_state(self, handler, fake_api):
        fake_api.add(
            "GET",
            CONFIG_PATH,
            body=config_response(rule_object("rule-1", name="renamed", is_enabled=False)),
        )
        data = ResourceData("rule-1")

        diagnostics = handler.read(data)

        assert diagnostics == []
        assert data.id == "rule-1"
        assert data.get("name") == "renamed"
        assert data.get("is_enabled") is False
        assert data.get("group_id") == "group-1"
        assert data.get("version") == 3

    def test_missing_rule_removed_from_state(self, handler, fake_api):
        fake_api.add("GET", CONFIG_PATH, body=config_response(rule_object("other")))
        data = ResourceData("rule-1")

        assert handler.read(data) == []
        assert data.is_removed

    def test_404_removed_from_state(self, handler, fake_api):
        fake_api.add("GET", CONFIG_PATH, status=404, body={"errors": ["Not found"]})
        data = ResourceData("rule-1")

        assert handler.read(data) == []
        assert data.is_removed

    def test_other_error_keeps_state(self, handler, fake_api):
        fake_api.add("GET", CONFIG_PATH, status=500, body={"errors": ["Internal"]})
        data = ResourceData("rule-1")

        diagnostics = handler.read(data)

        assert diagnostics[0].summary == "error calling ListScanningGroups"
        assert data.id == "rule-1"


class TestUpdateAndDelete:
    """Tests for update() and delete()."""

    def test_update(self, handler, fake_api):
        fake_api.add(
            "PATCH",
            f"{RULES_PATH}/rule-1",
            body={"data": rule_object("rule-1", name="new-name"), "meta": {"version": 6}},
        )
        data = rule_state(name="new-name", version=5)
        data.set_id("rule-1")

        assert handler.update(data) == []
        assert data.get("name") == "new-name"
        assert data.get("version") == 6

    def test_delete_sends_version(self, handler, fake_api):
        fake_api.add("DELETE", f"{RULES_PATH}/rule-1", body={"meta": {}})
        data = rule_state(version=6)
        data.set_id("rule-1")

        assert handler.delete(data) == []
        request = fake_api.calls("DELETE", f"{RULES_PATH}/rule-1")[0]
        assert fake_api.json_body(request) == {"meta": {"version": 6}}

    def test_delete_with_unparseable_version(self, handler, fake_api):
        """A version that is not a number is left out of the request."""
        fake_api.add("DELETE", f"{RULES_PATH}/rule-1", body={"meta": {}})
        data = ResourceData("rule-1", {"version": "v7"})

        assert handler.delete(data) == []
        request = fake_api.calls("DELETE", f"{RULES_PATH}/rule-1")[0]
        assert fake_api.json_body(request) == {"meta": {}}

    def test_create_with_unparseable_version(self, handler, fake_api):
        fake_api.add("POST", RULES_PATH, body={"data": rule_object("rule-9"), "meta": {"version": 4}})
        data = rule_state(version="latest")

        assert handler.create(data) == []
        sent = fake_api.json_body(fake_api.calls("POST", RULES_PATH)[0])
        assert sent["meta"] == {}
        assert data.get("version") == 4

    def test_delete_error_keeps_state(self, handler, fake_api):
        fake_api.add("DELETE", f"{RULES_PATH}/rule-1", status=409, body={"errors": ["Conflict"]})
        data = rule_state()
        data.set_id("rule-1")

        diagnostics = handler.delete(data)

        assert diagnostics[0].summary == "error deleting SensitiveDataScannerRule"
        assert data.id == "rule-1"

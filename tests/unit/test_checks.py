"""
Unit tests for resource existence and destruction checks.
"""

import json
from functools import partial

import pytest

from datadog_resources.client import DatadogApiError
from datadog_resources.config import Settings
from datadog_resources.config.settings import RetrySettings
from datadog_resources.monitoring import RetryConfig, RetryRunner
from datadog_resources.resources import checks
from datadog_resources.resources import (
    ManagedResource,
    ResourceTypeNotFoundError,
    VerificationError,
    check_resources_destroyed,
    check_resources_exist,
    load_state_file,
    load_state_resources,
)

CONFIG_PATH = "/api/v2/sensitive-data-scanner/config"
RULES_PATH = "/api/v2/security_monitoring/rules"
AZURE_PATH = "/api/v1/integration/azure"

SCANNER_RULE = ManagedResource("datadog_sensitive_data_scanner_rule", "rule-1")
SECURITY_RULE = ManagedResource("datadog_cloud_configuration_rule", "abc-123")
AZURE = ManagedResource("datadog_integration_azure", "tenant-a:client-a")


def scanner_config(*rule_ids) -> dict:
    return {
        "data": {"id": "config-1"},
        "included": [{"id": i, "type": "sensitive_data_scanner_rule"} for i in rule_ids],
    }


@pytest.fixture
def runner(sleeper) -> RetryRunner:
    return RetryRunner(RetryConfig(max_attempts=2, delay_seconds=10), sleep=sleeper)


class TestLoadState:
    """Tests for state parsing."""

    STATE = {
        "version": 4,
        "resources": [
            {
                "mode": "managed",
                "type": "datadog_cloud_configuration_rule",
                "name": "acceptance_test",
                "instances": [{"attributes": {"id": "abc-123", "name": "r"}}],
            },
            {
                "mode": "data",
                "type": "datadog_role",
                "name": "ro",
                "instances": [{"attributes": {"id": "role-1"}}],
            },
            {
                "mode": "managed",
                "type": "datadog_integration_azure",
                "name": "az",
                "instances": [{"attributes": {"id": ""}}],
            },
        ],
    }

    def test_managed_resources_only(self):
        assert load_state_resources(self.STATE) == [SECURITY_RULE]

    def test_empty_state(self):
        assert load_state_resources({}) == []

    def test_load_state_file(self, tmp_path):
        path = tmp_path / "terraform.tfstate"
        path.write_text(json.dumps(self.STATE))

        assert load_state_file(path) == [SECURITY_RULE]


class TestCheckResourcesExist:
    """Tests for check_resources_exist."""

    def test_all_exist(self, client, fake_api):
        fake_api.add("GET", CONFIG_PATH, body=scanner_config("rule-1"))
        fake_api.add("GET", f"{RULES_PATH}/abc-123", body={"id": "abc-123"})
        fake_api.add(
            "GET", AZURE_PATH, body=[{"tenant_name": "tenant-a", "client_id": "client-a"}]
        )

        check_resources_exist(client, [SCANNER_RULE, SECURITY_RULE, AZURE])

    def test_missing_resource(self, client, fake_api):
        with pytest.raises(VerificationError, match="abc-123 does not exist"):
            check_resources_exist(client, [SECURITY_RULE])

    def test_api_error_translated(self, client, fake_api):
        fake_api.add("GET", f"{RULES_PATH}/abc-123", status=500, body={"errors": ["boom"]})

        with pytest.raises(DatadogApiError) as exc_info:
            check_resources_exist(client, [SECURITY_RULE])

        assert "error retrieving cloud configuration rule" in str(exc_info.value)
        assert exc_info.value.status_code == 500

    def test_filter_by_type(self, client, fake_api):
        fake_api.add("GET", CONFIG_PATH, body=scanner_config("rule-1"))

        check_resources_exist(
            client, [SCANNER_RULE, SECURITY_RULE], "datadog_sensitive_data_scanner_rule"
        )

        assert fake_api.calls("GET", f"{RULES_PATH}/abc-123") == []

    def test_unknown_type(self, client):
        with pytest.raises(ResourceTypeNotFoundError):
            check_resources_exist(client, [SCANNER_RULE], "datadog_monitor")

    def test_unhandled_types_skipped(self, client, fake_api):
        check_resources_exist(client, [ManagedResource("datadog_monitor", "1")])

        assert fake_api.requests == []


class TestCheckResourcesDestroyed:
    """Tests for check_resources_destroyed."""

    def test_gone_on_first_attempt(self, client, fake_api, runner, sleeper):
        check_resources_destroyed(client, [SECURITY_RULE], runner=runner)

        assert len(fake_api.requests) == 1
        assert sleeper.count == 0

    def test_scanner_404_counts_as_gone(self, client, fake_api, runner, sleeper):
        fake_api.add("GET", CONFIG_PATH, status=404, body={"errors": ["Not found"]})

        check_resources_destroyed(client, [SCANNER_RULE], runner=runner)

        assert sleeper.count == 0

    def test_eventually_gone(self, client, fake_api, runner, sleeper):
        """First lookup still sees the rule, the second does not."""
        fake_api.add("GET", CONFIG_PATH, body=scanner_config("rule-1"))
        fake_api.add("GET", CONFIG_PATH, body=scanner_config())

        check_resources_destroyed(client, [SCANNER_RULE], runner=runner)

        assert len(fake_api.calls("GET", CONFIG_PATH)) == 2
        assert sleeper.delays == [10]

    def test_still_exists_after_retries(self, client, fake_api, runner, sleeper):
        fake_api.add("GET", f"{RULES_PATH}/abc-123", body={"id": "abc-123"})

        with pytest.raises(VerificationError, match="cloud configuration rule still exists"):
            check_resources_destroyed(client, [SECURITY_RULE], runner=runner)

        assert len(fake_api.requests) == 2
        assert sleeper.delays == [10]

    def test_error_names_the_remaining_type(self, client, fake_api, runner):
        """The scanner rule is gone; the security rule is what remains."""
        fake_api.add("GET", f"{RULES_PATH}/abc-123", body={"id": "abc-123"})

        with pytest.raises(VerificationError) as exc_info:
            check_resources_destroyed(client, [SCANNER_RULE, SECURITY_RULE], runner=runner)

        assert exc_info.value.resource_type == "datadog_cloud_configuration_rule"
        assert exc_info.value.reason == "cloud configuration rule still exists"

    def test_api_errors_are_retried(self, client, fake_api, runner, sleeper):
        fake_api.add("GET", CONFIG_PATH, status=500, body={"errors": ["Internal"]})

        with pytest.raises(VerificationError) as exc_info:
            check_resources_destroyed(client, [SCANNER_RULE], runner=runner)

        assert exc_info.value.reason.startswith(
            "received an error retrieving sensitive data scanner rule"
        )
        assert len(fake_api.requests) == 2

    def test_budget_override(self, client, fake_api, runner, sleeper):
        fake_api.add("GET", f"{RULES_PATH}/abc-123", body={"id": "abc-123"})

        with pytest.raises(VerificationError):
            check_resources_destroyed(
                client, [SECURITY_RULE], runner=runner, max_attempts=4, delay_seconds=1
            )

        assert len(fake_api.requests) == 4
        assert sleeper.delays == [1, 1, 1]

    def test_runner_built_from_settings(self, client, fake_api, sleeper, monkeypatch):
        """Without a runner, the retry settings drive the loop."""
        monkeypatch.setattr(checks, "RetryRunner", partial(RetryRunner, sleep=sleeper))
        fake_api.add("GET", f"{RULES_PATH}/abc-123", body={"id": "abc-123"})
        settings = Settings(retry=RetrySettings(max_attempts=3, delay_seconds=0.5))

        with pytest.raises(VerificationError):
            check_resources_destroyed(client, [SECURITY_RULE], settings=settings)

        assert len(fake_api.requests) == 3
        assert sleeper.delays == [0.5, 0.5]

    def test_nothing_to_check(self, client, fake_api, runner):
        check_resources_destroyed(client, [], runner=runner)

        assert fake_api.requests == []

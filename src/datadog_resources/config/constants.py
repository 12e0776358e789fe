"""
Constants for Datadog API access and managed resource types.
"""

# =============================================================================
# API
# =============================================================================

DEFAULT_API_URL = "https://api.datadoghq.com"
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0

# Endpoint paths, relative to the API URL
AZURE_INTEGRATION_PATH = "/api/v1/integration/azure"
SCANNER_CONFIG_PATH = "/api/v2/sensitive-data-scanner/config"
SCANNER_RULES_PATH = "/api/v2/sensitive-data-scanner/config/rules"
SECURITY_RULES_PATH = "/api/v2/security_monitoring/rules"

# =============================================================================
# Retry
# =============================================================================

# Delete verification polls twice, ten seconds apart
DEFAULT_RETRY_MAX_ATTEMPTS = 2
DEFAULT_RETRY_DELAY_SECONDS = 10.0

# =============================================================================
# Resource Types
# =============================================================================

RESOURCE_INTEGRATION_AZURE = "datadog_integration_azure"
RESOURCE_SENSITIVE_DATA_SCANNER_RULE = "datadog_sensitive_data_scanner_rule"
RESOURCE_CLOUD_CONFIGURATION_RULE = "datadog_cloud_configuration_rule"

RESOURCE_TYPES = [
    RESOURCE_INTEGRATION_AZURE,
    RESOURCE_SENSITIVE_DATA_SCANNER_RULE,
    RESOURCE_CLOUD_CONFIGURATION_RULE,
]

# Text replacement types accepted by the sensitive data scanner
TEXT_REPLACEMENT_TYPES = [
    "none",
    "hash",
    "replacement_string",
    "partial_replacement_from_beginning",
    "partial_replacement_from_end",
]

# Severities accepted for cloud configuration rules
RULE_SEVERITIES = ["info", "low", "medium", "high", "critical"]

"""Configuration module."""

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
    RESOURCE_CLOUD_CONFIGURATION_RULE,
    RESOURCE_INTEGRATION_AZURE,
    RESOURCE_SENSITIVE_DATA_SCANNER_RULE,
    RESOURCE_TYPES,
)
from .settings import RetrySettings, Settings, clear_settings_cache, get_settings
from .sops_loader import check_sops_installed, decrypt_sops_file

__all__ = [
    # API
    "DEFAULT_API_URL",
    # Retry
    "DEFAULT_RETRY_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY_SECONDS",
    # Resource types
    "RESOURCE_INTEGRATION_AZURE",
    "RESOURCE_SENSITIVE_DATA_SCANNER_RULE",
    "RESOURCE_CLOUD_CONFIGURATION_RULE",
    "RESOURCE_TYPES",
    # Settings
    "Settings",
    "RetrySettings",
    "get_settings",
    "clear_settings_cache",
    # Config loading
    "decrypt_sops_file",
    "check_sops_installed",
]

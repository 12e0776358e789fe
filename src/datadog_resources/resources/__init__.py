"""
Resource handlers for Datadog objects managed as code.

Importing this package registers every handler with ResourceRegistry.

Usage:
    from datadog_resources.resources import ProviderConfiguration, ResourceRegistry

    provider = ProviderConfiguration.from_settings()
    handler = ResourceRegistry.get_handler('datadog_cloud_configuration_rule', provider)
    diagnostics = handler.create(data)
"""

from .base import (
    Diagnostic,
    Diagnostics,
    ProviderConfiguration,
    ResourceData,
    ResourceHandler,
    Severity,
    diag_errorf,
    diag_from_error,
    has_error,
)
from .checks import (
    ManagedResource,
    check_resources_destroyed,
    check_resources_exist,
    load_state_file,
    load_state_resources,
)
from .cloud_configuration_rule import CloudConfigurationRuleResource
from .exceptions import (
    InvalidResourceIdError,
    ResourceError,
    ResourceTypeNotFoundError,
    VerificationError,
)
from .integration_azure import IntegrationAzureResource
from .registry import ResourceRegistry
from .sensitive_data_scanner_rule import SensitiveDataScannerRuleResource
from .utils import (
    check_for_unparsed,
    tenant_and_client_from_id,
    translate_client_error,
    translate_client_error_diag,
)

__all__ = [
    # Base
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "ResourceData",
    "ResourceHandler",
    "ProviderConfiguration",
    "diag_errorf",
    "diag_from_error",
    "has_error",
    # Registry
    "ResourceRegistry",
    # Handlers
    "IntegrationAzureResource",
    "SensitiveDataScannerRuleResource",
    "CloudConfigurationRuleResource",
    # Checks
    "ManagedResource",
    "check_resources_exist",
    "check_resources_destroyed",
    "load_state_file",
    "load_state_resources",
    # Helpers
    "check_for_unparsed",
    "tenant_and_client_from_id",
    "translate_client_error",
    "translate_client_error_diag",
    # Exceptions
    "ResourceError",
    "InvalidResourceIdError",
    "ResourceTypeNotFoundError",
    "VerificationError",
]

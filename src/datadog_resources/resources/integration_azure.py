"""
Azure integration resource.

Manages one Azure AD application connected to Datadog. The API has no
per-account GET, so read lists every account and matches on tenant name
and client id. Writes are serialized: the API rejects concurrent changes
to the Azure integration list.

State attributes:
    tenant_name, client_id, client_secret (sensitive), host_filters, automute

Id: '<tenant_name>:<client_id>'
"""

import logging
import threading

from ..client.errors import DatadogApiError
from ..config.constants import RESOURCE_INTEGRATION_AZURE
from .base import (
    Diagnostics,
    ResourceData,
    ResourceHandler,
    diag_errorf,
    diag_from_error,
)
from .exceptions import InvalidResourceIdError
from .registry import ResourceRegistry
from .utils import (
    check_for_unparsed,
    tenant_and_client_from_id,
    translate_client_error_diag,
)

logger = logging.getLogger(__name__)

integration_azure_lock = threading.Lock()


def build_azure_account(
    data: ResourceData, tenant_name: str, client_id: str, update: bool = False
) -> dict:
    """
    Build the API payload for an Azure account.

    Args:
        data: Resource state
        tenant_name: Tenant that identifies the existing account
        client_id: Client id that identifies the existing account
        update: Include new_tenant_name/new_client_id for a rename

    Returns:
        AzureAccount payload
    """
    account = {
        "tenant_name": tenant_name,
        "client_id": client_id,
        "host_filters": data.get("host_filters", "") or "",
        "automute": bool(data.get("automute", False)),
    }

    client_secret, ok = data.get_ok("client_secret")
    if ok:
        account["client_secret"] = client_secret

    if update:
        new_tenant_name, ok = data.get_ok("tenant_name")
        if ok:
            account["new_tenant_name"] = new_tenant_name
        new_client_id, ok = data.get_ok("client_id")
        if ok:
            account["new_client_id"] = new_client_id

    return account


def _account_id(tenant_name: str, client_id: str) -> str:
    return f"{tenant_name}:{client_id}"


@ResourceRegistry.register(RESOURCE_INTEGRATION_AZURE)
class IntegrationAzureResource(ResourceHandler):
    """Handler for datadog_integration_azure."""

    @property
    def resource_type(self) -> str:
        return RESOURCE_INTEGRATION_AZURE

    def read(self, data: ResourceData) -> Diagnostics:
        try:
            tenant_name, client_id = tenant_and_client_from_id(data.id)
        except InvalidResourceIdError as e:
            return diag_from_error(e)

        try:
            integrations = self.client.list_azure_integrations()
        except DatadogApiError as e:
            return translate_client_error_diag(e, "error listing azure integration")

        try:
            check_for_unparsed(integrations, ["tenant_name", "client_id"])
        except DatadogApiError as e:
            return diag_from_error(e)

        for integration in integrations:
            if (
                integration.get("tenant_name") == tenant_name
                and integration.get("client_id") == client_id
            ):
                data.set("tenant_name", integration["tenant_name"])
                data.set("client_id", integration["client_id"])
                data.set("automute", bool(integration.get("automute", False)))
                if "host_filters" in integration:
                    data.set("host_filters", integration["host_filters"])
                return []

        return diag_errorf(
            "error getting an Azure integration: tenant_name=%s", tenant_name
        )

    def create(self, data: ResourceData) -> Diagnostics:
        with integration_azure_lock:
            tenant_name = data.get("tenant_name", "")
            client_id = data.get("client_id", "")
            account = build_azure_account(data, tenant_name, client_id)

            try:
                self.client.create_azure_integration(account)
            except DatadogApiError as e:
                return translate_client_error_diag(
                    e, "error creating an Azure integration"
                )

            data.set_id(_account_id(tenant_name, client_id))
            logger.info(f"Created Azure integration {data.id}")

        return self.read(data)

    def update(self, data: ResourceData) -> Diagnostics:
        with integration_azure_lock:
            try:
                tenant_name, client_id = tenant_and_client_from_id(data.id)
            except InvalidResourceIdError as e:
                return diag_from_error(e)

            account = build_azure_account(data, tenant_name, client_id, update=True)

            try:
                self.client.update_azure_integration(account)
            except DatadogApiError as e:
                return translate_client_error_diag(
                    e, "error updating an Azure integration"
                )

            data.set_id(
                _account_id(
                    account.get("new_tenant_name", tenant_name),
                    account.get("new_client_id", client_id),
                )
            )
            logger.info(f"Updated Azure integration {data.id}")

        return self.read(data)

    def delete(self, data: ResourceData) -> Diagnostics:
        with integration_azure_lock:
            try:
                tenant_name, client_id = tenant_and_client_from_id(data.id)
            except InvalidResourceIdError as e:
                return diag_from_error(e)

            account = build_azure_account(data, tenant_name, client_id)

            try:
                self.client.delete_azure_integration(account)
            except DatadogApiError as e:
                return translate_client_error_diag(
                    e, "error deleting an Azure integration"
                )

        logger.info(f"Deleted Azure integration {tenant_name}:{client_id}")
        return []

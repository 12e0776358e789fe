"""
Base classes for resource handlers.

A handler translates one managed resource between its state (a flat
attribute dictionary plus an id) and the Datadog API. Handlers report
problems as diagnostics instead of raising, so a plan/apply run can show
every failure with its context.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..client.api import DatadogClient
from ..config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Diagnostics
# =============================================================================


class Severity(Enum):
    """Diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A problem reported by a handler operation."""

    severity: Severity
    summary: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.summary}: {self.detail}"
        return self.summary


Diagnostics = list[Diagnostic]


def diag_errorf(summary: str, *args: Any) -> Diagnostics:
    """Build a single error diagnostic from a %-style format string."""
    if args:
        summary = summary % args
    return [Diagnostic(severity=Severity.ERROR, summary=summary)]


def diag_from_error(error: BaseException) -> Diagnostics:
    """Build a single error diagnostic from an exception."""
    return [Diagnostic(severity=Severity.ERROR, summary=str(error))]


def has_error(diagnostics: Diagnostics) -> bool:
    """Check if any diagnostic is an error."""
    return any(d.severity is Severity.ERROR for d in diagnostics)


# =============================================================================
# Resource State
# =============================================================================


def _is_zero(value: Any) -> bool:
    return value is None or value in ("", 0, False) or value == [] or value == {}


class ResourceData:
    """
    State of one managed resource.

    Holds the resource id and a flat dictionary of attributes. Nested
    blocks (e.g. text_replacement) are stored as a list holding one dict.
    An empty id means the resource is gone and should leave state.
    """

    def __init__(self, resource_id: str = "", attributes: Optional[dict] = None):
        self._id = resource_id
        self._attributes: dict[str, Any] = dict(attributes or {})

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        self._id = resource_id

    @property
    def is_removed(self) -> bool:
        return not self._id

    def get(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """
        Get an attribute and whether it is set to a non-zero value.

        Returns:
            Tuple of (value, ok). ok is False for missing keys and for
            zero values (None, "", 0, False, empty list or dict).
        """
        value = self._attributes.get(key)
        return value, not _is_zero(value)

    def has(self, key: str) -> bool:
        """Check if an attribute is present, whatever its value."""
        return key in self._attributes

    def set(self, key: str, value: Any) -> None:
        self._attributes[key] = value

    def unset(self, key: str) -> None:
        self._attributes.pop(key, None)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"id": self._id, "attributes": dict(self._attributes)}

    def __repr__(self) -> str:
        return f"ResourceData(id={self._id!r}, attributes={self._attributes!r})"


# =============================================================================
# Provider Configuration
# =============================================================================


@dataclass
class ProviderConfiguration:
    """Shared collaborators handed to every handler."""

    client: DatadogClient
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ProviderConfiguration":
        """Build a configuration with an authenticated client."""
        if settings is None:
            settings = get_settings()
        return cls(client=DatadogClient(settings=settings), settings=settings)


# =============================================================================
# Handler Interface
# =============================================================================


class ResourceHandler(ABC):
    """
    Abstract base class for resource handlers.

    Subclasses implement the create/read/update/delete lifecycle against
    the Datadog API. Each operation mutates the given ResourceData and
    returns diagnostics; an empty list means success.
    """

    def __init__(self, provider: ProviderConfiguration):
        self.provider = provider

    @property
    def client(self) -> DatadogClient:
        return self.provider.client

    @property
    @abstractmethod
    def resource_type(self) -> str:
        """Return the resource type name (e.g., 'datadog_integration_azure')."""
        pass

    @abstractmethod
    def create(self, data: ResourceData) -> Diagnostics:
        pass

    @abstractmethod
    def read(self, data: ResourceData) -> Diagnostics:
        """
        Refresh state from the API.

        Clears the id when the remote object no longer exists.
        """
        pass

    @abstractmethod
    def update(self, data: ResourceData) -> Diagnostics:
        pass

    @abstractmethod
    def delete(self, data: ResourceData) -> Diagnostics:
        pass

    def import_state(self, resource_id: str) -> tuple[ResourceData, Diagnostics]:
        """
        Import an existing remote object by id.

        The id is used as-is and state is filled in by read().
        """
        logger.debug(f"Importing {self.resource_type} {resource_id}")
        data = ResourceData(resource_id=resource_id)
        return data, self.read(data)

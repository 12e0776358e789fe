"""
Registry of resource handlers.

Maps resource type names to handler classes.
"""

import logging
from typing import Type

from .base import ProviderConfiguration, ResourceHandler
from .exceptions import ResourceTypeNotFoundError

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """
    Registry for resource handlers.

    Usage:
        # Register using decorator
        @ResourceRegistry.register('datadog_integration_azure')
        class IntegrationAzureResource(ResourceHandler):
            ...

        # Get handler instance
        handler = ResourceRegistry.get_handler('datadog_integration_azure', provider)

        # List all resource types
        types = ResourceRegistry.list_resource_types()
    """

    _handlers: dict[str, Type[ResourceHandler]] = {}

    @classmethod
    def register(cls, resource_type: str):
        """
        Decorator to register a handler class.

        Args:
            resource_type: Resource type name for registry lookup

        Returns:
            Decorator function
        """

        def decorator(handler_class: Type[ResourceHandler]) -> Type[ResourceHandler]:
            cls.register_handler(resource_type, handler_class)
            return handler_class

        return decorator

    @classmethod
    def register_handler(
        cls, resource_type: str, handler_class: Type[ResourceHandler]
    ) -> None:
        """
        Register a handler class for a resource type.

        Raises:
            TypeError: If handler_class doesn't inherit from ResourceHandler
        """
        if not issubclass(handler_class, ResourceHandler):
            raise TypeError(
                f"Handler class must inherit from ResourceHandler, "
                f"got {handler_class.__name__}"
            )

        if resource_type in cls._handlers:
            logger.warning(
                f"Overwriting existing handler for resource type '{resource_type}'"
            )

        cls._handlers[resource_type] = handler_class
        logger.debug(f"Registered resource handler: {resource_type}")

    @classmethod
    def get_handler_class(cls, resource_type: str) -> Type[ResourceHandler]:
        """
        Get a handler class by resource type.

        Raises:
            ResourceTypeNotFoundError: If the type is not registered
        """
        if resource_type not in cls._handlers:
            raise ResourceTypeNotFoundError(
                resource_type=resource_type,
                available_types=list(cls._handlers.keys()),
            )
        return cls._handlers[resource_type]

    @classmethod
    def get_handler(
        cls, resource_type: str, provider: ProviderConfiguration
    ) -> ResourceHandler:
        """
        Get a handler instance bound to a provider configuration.

        Raises:
            ResourceTypeNotFoundError: If the type is not registered
        """
        return cls.get_handler_class(resource_type)(provider)

    @classmethod
    def list_resource_types(cls) -> list[str]:
        """Sorted list of registered resource types."""
        return sorted(cls._handlers.keys())

    @classmethod
    def is_registered(cls, resource_type: str) -> bool:
        return resource_type in cls._handlers

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered handlers.

        Primarily used for testing to reset registry state.
        """
        cls._handlers.clear()
        logger.debug("Cleared resource handler registry")

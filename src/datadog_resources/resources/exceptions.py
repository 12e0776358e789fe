"""
Custom exceptions for the resources module.
"""


class ResourceError(Exception):
    """
    Base exception for all resource-handler errors.

    All other resource exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class InvalidResourceIdError(ResourceError):
    """
    Raised when a resource id does not have the expected shape.

    Attributes:
        resource_id: The offending id
        expected: Description of the expected format
    """

    def __init__(self, resource_id: str, expected: str):
        self.resource_id = resource_id
        self.expected = expected
        super().__init__(
            f"error extracting parts from resource id {resource_id!r}: "
            f"expected {expected}"
        )


class ResourceTypeNotFoundError(ResourceError):
    """
    Raised when no handler is registered for a resource type.

    Attributes:
        resource_type: The requested type
        available_types: Registered types
    """

    def __init__(self, resource_type: str, available_types: list[str]):
        self.resource_type = resource_type
        self.available_types = available_types
        available = ", ".join(sorted(available_types)) or "none"
        super().__init__(
            f"Unknown resource type '{resource_type}'. Available: {available}"
        )


class VerificationError(ResourceError):
    """
    Raised when an exists/destroyed check against the API fails.

    Attributes:
        resource_type: Type being verified
        reason: Last failure reason
    """

    def __init__(self, resource_type: str, reason: str):
        self.resource_type = resource_type
        self.reason = reason
        super().__init__(reason)

"""Custom exception classes for the Wally registry resolver.

Only configuration mistakes are raised. Lookups that fail because of the
network or missing data return ``None`` instead.
"""


class RegistryException(Exception):
    """Base exception for all registry errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(self.message)


class InvalidRegistryError(RegistryException):
    """Raised when a registry URL is not hosted on a recognized provider."""

    def __init__(self, registry: str) -> None:
        """Initialize the exception.

        Args:
            registry: The rejected registry identifier.
        """
        super().__init__(message=f"Invalid registry: {registry}")
        self.registry = registry


class UnsupportedRegistryError(RegistryException):
    """Raised when a registry URL does not have the ``<owner>/<repo>`` shape."""

    def __init__(self, registry: str) -> None:
        """Initialize the exception.

        Args:
            registry: The rejected registry identifier.
        """
        super().__init__(message=f"Unsupported registry: {registry}")
        self.registry = registry

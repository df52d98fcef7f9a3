"""
Blob store exceptions

This module defines the exception hierarchy for the blob store service.
All blob store related errors inherit from BlobStoreError base class.
"""

from typing import Sequence


class BlobStoreError(Exception):
    """
    Base exception for all blob store errors.

    Catch this to handle any blob store error generically (the command line
    front end does exactly that).
    """

    pass


class ProviderResolutionError(BlobStoreError):
    """
    Base exception for provider selection failures.

    These always indicate a usage or configuration problem the caller must
    correct, so they are never swallowed.
    """

    pass


class ProviderNotFoundError(ProviderResolutionError):
    """
    Exception raised when a provider hint matches no active provider.

    Args:
        hint: The provider id that was requested
    """

    def __init__(self, hint: str):
        super().__init__(f"Provider {hint} not found")
        self.hint = hint


class NoProvidersAvailableError(ProviderResolutionError):
    """Exception raised when no hint was given and no provider is active."""

    def __init__(self):
        super().__init__(
            "No providers are present. Note: It takes a couple of seconds for the provider to initialize."
        )


class AmbiguousProviderError(ProviderResolutionError):
    """
    Exception raised when no hint was given and several providers are active.

    Args:
        providerIds: Ids of all active providers, in registry order
    """

    def __init__(self, providerIds: Sequence[str]):
        self.providerIds = list(providerIds)
        super().__init__(
            "Multiple providers are present, please select one using the --provider argument "
            f"in the following values: {', '.join(self.providerIds)}"
        )


class BlobNotFoundError(BlobStoreError):
    """
    Exception raised when a blob does not exist in the container.

    Args:
        containerName: Container that was searched
        blobName: Name of the missing blob
    """

    def __init__(self, containerName: str, blobName: str):
        super().__init__(f"Blob '{blobName}' not found in container '{containerName}'")
        self.containerName = containerName
        self.blobName = blobName


class BlobStoreKeyError(BlobStoreError):
    """
    Exception raised when a container or blob name is invalid.

    Raised when a name is empty or only whitespace, or too long once
    encoded into a file name (see utils.encodeName).
    """

    pass


class BlobStoreConfigError(BlobStoreError):
    """
    Exception raised when blob store configuration is invalid.

    This exception is raised while building the provider registry when:
    - A provider has no type
    - The provider type is not recognized
    - Backend-specific configuration is missing required parameters
    """

    pass


class _WrappedError(BlobStoreError):
    """Blob store error carrying the exception that caused it."""

    def __init__(self, message: str, originalError: Exception | None = None):
        """
        Initialize error with message and optional original error.

        Args:
            message: Description of the error
            originalError: The original exception that caused this error
        """
        super().__init__(message)
        self.originalError = originalError


class BlobStoreBackendError(_WrappedError):
    """
    Exception raised when a backend operation fails.

    Wraps backend-specific errors such as file system errors, S3 client
    errors, permission errors or an unavailable service.
    """

    pass


class BlobStoreIOError(_WrappedError):
    """Exception raised when reading or writing a payload stream fails."""

    pass


class SerializationError(_WrappedError):
    """Exception raised when an object cannot be serialized into a payload."""

    pass


class DeserializationError(_WrappedError):
    """
    Exception raised when a payload cannot be turned back into an object.

    Covers malformed payload content as well as payloads that reference
    classes which cannot be imported in this process.
    """

    pass


class ProviderCapabilityError(BlobStoreError):
    """
    Exception raised when a provider lacks an optional capability.

    Providers only have to create containers and get and put blobs; listing,
    existence checks and removal are optional.

    Args:
        providerId: Provider that was asked
        operation: Name of the unsupported operation
    """

    def __init__(self, providerId: str, operation: str):
        super().__init__(f"Provider {providerId} does not support {operation}")
        self.providerId = providerId
        self.operation = operation

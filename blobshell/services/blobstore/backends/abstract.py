"""
Abstract blob store backend interface

This module defines the capability set a provider handle must offer and an
abstract base class that the bundled backends implement. Resolution and
transfer code only rely on the BlobStoreHandle protocol, so any object that
exposes these methods can be registered as a provider.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from ..models import Blob


@runtime_checkable
class BlobStoreHandle(Protocol):
    """Capability interface of one connected provider, dood."""

    @property
    def providerId(self) -> str: ...

    def createContainer(self, containerName: str, location: Optional[str] = None) -> bool: ...

    def getBlob(self, containerName: str, blobName: str) -> Optional[Blob]: ...

    def putBlob(self, containerName: str, blob: Blob) -> None: ...


@runtime_checkable
class ListableBlobStoreHandle(BlobStoreHandle, Protocol):
    """Provider handle that can also enumerate and delete, dood."""

    def listContainers(self) -> List[str]: ...

    def listBlobs(self, containerName: str, prefix: str = "", limit: Optional[int] = None) -> List[str]: ...

    def blobExists(self, containerName: str, blobName: str) -> bool: ...

    def removeBlob(self, containerName: str, blobName: str) -> bool: ...


class AbstractBlobStoreBackend(ABC):
    """
    Abstract base class for blob store backends.

    Backend implementations should handle backend-specific errors and wrap
    them in BlobStoreBackendError.

    Args:
        providerId: Identifier of this provider, unique among active providers
    """

    providerType: str = "blob"

    def __init__(self, providerId: str):
        self._providerId = providerId

    @property
    def providerId(self) -> str:
        """Identifier of this provider."""
        return self._providerId

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(providerId={self._providerId!r})"

    @abstractmethod
    def createContainer(self, containerName: str, location: Optional[str] = None) -> bool:
        """
        Create a container if it does not exist yet.

        Args:
            containerName: Name of the container
            location: Optional backend-specific location (region) hint

        Returns:
            True if the container was created, False if it already existed

        Raises:
            BlobStoreKeyError: If the container name is invalid
            BlobStoreBackendError: If the creation fails
        """
        pass

    @abstractmethod
    def containerExists(self, containerName: str) -> bool:
        """
        Check if a container exists.

        Raises:
            BlobStoreBackendError: If the check fails
        """
        pass

    @abstractmethod
    def listContainers(self) -> List[str]:
        """
        List names of all containers, sorted.

        Raises:
            BlobStoreBackendError: If the list operation fails
        """
        pass

    @abstractmethod
    def getBlob(self, containerName: str, blobName: str) -> Optional[Blob]:
        """
        Get a blob with an open payload stream.

        The caller owns the returned payload stream and must close it.

        Args:
            containerName: Container holding the blob
            blobName: Name of the blob

        Returns:
            The blob, or None if the container or the blob does not exist

        Raises:
            BlobStoreBackendError: If the retrieval fails (not for missing blobs)
        """
        pass

    @abstractmethod
    def putBlob(self, containerName: str, blob: Blob) -> None:
        """
        Upload a blob, replacing any existing blob with the same name.

        The payload stream (if any) is consumed but not closed.

        Raises:
            BlobStoreKeyError: If the blob name is invalid
            BlobStoreBackendError: If the upload fails
        """
        pass

    @abstractmethod
    def blobExists(self, containerName: str, blobName: str) -> bool:
        """
        Check if a blob exists.

        Raises:
            BlobStoreBackendError: If the check fails
        """
        pass

    @abstractmethod
    def removeBlob(self, containerName: str, blobName: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if the blob was deleted, False if it did not exist

        Raises:
            BlobStoreBackendError: If the deletion fails
        """
        pass

    @abstractmethod
    def listBlobs(self, containerName: str, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        """
        List blob names in a container with an optional prefix filter and limit.

        Returns:
            Sorted list of matching blob names, empty if the container is missing

        Raises:
            BlobStoreBackendError: If the list operation fails
        """
        pass

    def close(self) -> None:
        """Release backend resources. Default implementation does nothing."""
        pass

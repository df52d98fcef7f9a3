"""
Blob store service: provider-hint aware front door for commands

Every method takes an optional provider hint, resolves it against the
registry's current handles and delegates to the transfer operations. The
resolved handle is used for that single call only.
"""

from typing import Any, BinaryIO, List, Optional, Tuple

from . import transfer
from .backends.abstract import BlobStoreHandle, ListableBlobStoreHandle
from .exceptions import ProviderCapabilityError
from .registry import BlobStoreRegistry
from .resolver import resolveBlobStore, resolveBlobStores
from .utils import closeQuietly


class BlobStoreService:
    """
    Blob store operations over a registry of providers.

    Usage:
        registry = BlobStoreRegistry()
        registry.injectConfig(configManager)
        service = BlobStoreService(registry)

        service.createContainer("box", provider="local")
        service.write("box", "settings", {"answer": 42}, provider="local")
        settings = service.read("box", "settings", provider="local")

    With exactly one provider configured the hint can be omitted.

    Thread Safety:
        The service keeps no mutable state of its own; concurrent use is as
        safe as the underlying backends.
    """

    def __init__(self, registry: BlobStoreRegistry):
        self.registry = registry

    def getBlobStore(self, provider: Optional[str] = None) -> BlobStoreHandle:
        """
        Resolve the provider hint to a single handle.

        Raises:
            ProviderNotFoundError, NoProvidersAvailableError, AmbiguousProviderError
        """
        return resolveBlobStore(provider, self.registry.getHandles())

    def getBlobStores(self, provider: Optional[str] = None) -> List[BlobStoreHandle]:
        """Get all active handles, or only the hinted one."""
        return resolveBlobStores(provider, self.registry.getHandles())

    def getProviders(self, provider: Optional[str] = None) -> List[Tuple[str, str]]:
        """Get (providerId, providerType) for each matching provider."""
        return [
            (handle.providerId, getattr(handle, "providerType", "blob")) for handle in self.getBlobStores(provider)
        ]

    def _getListableBlobStore(self, provider: Optional[str], operation: str) -> ListableBlobStoreHandle:
        handle = self.getBlobStore(provider)
        if not isinstance(handle, ListableBlobStoreHandle):
            raise ProviderCapabilityError(handle.providerId, operation)
        return handle

    def createContainer(
        self, containerName: str, location: Optional[str] = None, provider: Optional[str] = None
    ) -> bool:
        return transfer.ensureContainer(self.getBlobStore(provider), containerName, location)

    def listContainers(self, provider: Optional[str] = None) -> List[str]:
        """
        List containers of the resolved provider.

        Raises:
            ProviderCapabilityError: If the provider cannot enumerate containers
        """
        return transfer.listContainers(self._getListableBlobStore(provider, "listing containers"))

    def listBlobs(
        self, containerName: str, prefix: str = "", limit: Optional[int] = None, provider: Optional[str] = None
    ) -> List[str]:
        handle = self._getListableBlobStore(provider, "listing blobs")
        return transfer.listBlobs(handle, containerName, prefix, limit)

    def read(self, containerName: str, blobName: str, provider: Optional[str] = None) -> Any:
        """
        Read an object from the blob store.

        Raises:
            BlobNotFoundError: If the blob does not exist
            BlobStoreIOError: If reading the payload fails
            DeserializationError: If the payload is not a serialized object
        """
        return transfer.readObject(self.getBlobStore(provider), containerName, blobName)

    def getBlobInputStream(self, containerName: str, blobName: str, provider: Optional[str] = None) -> BinaryIO:
        """Get the raw payload stream of a blob; the caller must close it."""
        return transfer.openBlobStream(self.getBlobStore(provider), containerName, blobName)

    def write(self, containerName: str, blobName: str, obj: Any, provider: Optional[str] = None) -> None:
        """Write an object (bytes are stored unchanged) to a blob."""
        transfer.writeObject(self.getBlobStore(provider), containerName, blobName, obj)

    def writeStream(
        self, containerName: str, blobName: str, inputStream: BinaryIO, provider: Optional[str] = None
    ) -> None:
        """Upload a stream to a blob; the stream is closed afterwards."""
        try:
            handle = self.getBlobStore(provider)
        except Exception:
            closeQuietly(inputStream, "input stream")
            raise
        transfer.writeStream(handle, containerName, blobName, inputStream)

    def exists(self, containerName: str, blobName: str, provider: Optional[str] = None) -> bool:
        handle = self._getListableBlobStore(provider, "existence checks")
        return transfer.blobExists(handle, containerName, blobName)

    def remove(self, containerName: str, blobName: str, provider: Optional[str] = None) -> bool:
        handle = self._getListableBlobStore(provider, "blob removal")
        return transfer.removeBlob(handle, containerName, blobName)

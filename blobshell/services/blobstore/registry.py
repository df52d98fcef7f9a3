"""
Provider registry: the set of currently connected blob store providers

The registry is an explicit object handed to whatever needs provider
handles (the blob store service, commands, tests); there is no process-wide
instance.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .backends.abstract import AbstractBlobStoreBackend, BlobStoreHandle
from .backends.filesystem import FSBlobStoreBackend
from .backends.s3 import S3BlobStoreBackend
from .backends.transient import TransientBlobStoreBackend
from .exceptions import BlobStoreConfigError
from .utils import closeQuietly

if TYPE_CHECKING:
    from blobshell.config.manager import ConfigManager

logger = logging.getLogger(__name__)

S3_REQUIRED_PARAMS = ["endpoint", "region", "key-id", "key-secret"]


def createBackend(providerId: str, config: Dict[str, Any]) -> AbstractBlobStoreBackend:
    """
    Create a backend from one provider configuration table.

    Args:
        providerId: Identifier the new provider will be registered under
        config: Provider settings, e.g. {"type": "fs", "base-dir": "./blobs"}

    Returns:
        The connected backend

    Raises:
        BlobStoreConfigError: If the type is missing or unknown, or required
            parameters are missing

    Configuration format:
        {"type": "transient"}
        {"type": "fs", "base-dir": "./blobs"}
        {
            "type": "s3",
            "endpoint": "https://s3.amazonaws.com",
            "region": "us-east-1",
            "key-id": "...",
            "key-secret": "..."
        }
    """
    providerType = config.get("type")
    if not providerType:
        raise BlobStoreConfigError(f"Provider type is not specified for provider '{providerId}'")

    match providerType:
        case "transient":
            return TransientBlobStoreBackend(providerId)

        case "fs":
            baseDir = config.get("base-dir")
            if not baseDir:
                raise BlobStoreConfigError(f"Filesystem base-dir is not specified for provider '{providerId}'")
            return FSBlobStoreBackend(providerId, baseDir)

        case "s3":
            missingParams = [p for p in S3_REQUIRED_PARAMS if not config.get(p)]
            if missingParams:
                raise BlobStoreConfigError(
                    f"S3 configuration of provider '{providerId}' missing required parameters: "
                    f"{', '.join(missingParams)}"
                )
            return S3BlobStoreBackend(
                providerId,
                endpoint=config["endpoint"],
                region=config["region"],
                keyId=config["key-id"],
                keySecret=config["key-secret"],
            )

        case _:
            raise BlobStoreConfigError(f"Unknown provider type '{providerType}' for provider '{providerId}'")


class BlobStoreRegistry:
    """
    Ordered set of active provider handles.

    Mutations are serialized with a lock; readers get snapshot copies, so a
    provider (dis)connecting mid-call never changes a list somebody is
    already iterating.

    Usage:
        registry = BlobStoreRegistry()
        registry.injectConfig(configManager)
        handle = resolveBlobStore("local", registry.getHandles())
    """

    def __init__(self, handles: Optional[List[BlobStoreHandle]] = None):
        self._handles: List[BlobStoreHandle] = []
        self._lock = threading.RLock()
        for handle in handles or []:
            self.register(handle)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def register(self, handle: BlobStoreHandle) -> None:
        """
        Add a connected provider.

        Raises:
            BlobStoreConfigError: If a provider with the same id is already active
        """
        with self._lock:
            if any(h.providerId == handle.providerId for h in self._handles):
                raise BlobStoreConfigError(f"Provider '{handle.providerId}' is already registered")
            self._handles.append(handle)
        logger.info(f"Registered blob store provider '{handle.providerId}', dood!")

    def unregister(self, providerId: str) -> Optional[BlobStoreHandle]:
        """
        Remove a provider.

        Returns:
            The removed handle, or None if no such provider was active
        """
        with self._lock:
            for idx, handle in enumerate(self._handles):
                if handle.providerId == providerId:
                    del self._handles[idx]
                    logger.info(f"Unregistered blob store provider '{providerId}', dood!")
                    return handle
        logger.warning(f"Provider '{providerId}' is not registered, nothing to unregister")
        return None

    def getHandles(self) -> List[BlobStoreHandle]:
        """Get a snapshot of the active handles in registration order."""
        with self._lock:
            return list(self._handles)

    def getProviderIds(self) -> List[str]:
        return [handle.providerId for handle in self.getHandles()]

    def injectConfig(self, configManager: "ConfigManager") -> None:
        """
        Create and register every provider from the blob store configuration.

        Providers are registered in configuration order. Nothing is
        registered if any provider fails to initialize or is already registered.

        Args:
            configManager: The configuration manager holding [blobstore.providers.*]

        Raises:
            BlobStoreConfigError: If configuration is invalid, backend creation fails or a
                provider id is already registered
        """
        providersConfig = configManager.getBlobStoreConfig().get("providers", {})
        if not isinstance(providersConfig, dict):
            raise BlobStoreConfigError("blobstore.providers must be a table of provider configurations")

        created: List[AbstractBlobStoreBackend] = []
        try:
            for providerId, providerConfig in providersConfig.items():
                if not isinstance(providerConfig, dict):
                    raise BlobStoreConfigError(f"Configuration of provider '{providerId}' must be a table")
                created.append(createBackend(providerId, providerConfig))
                logger.info(f"Initialized {providerConfig['type']} provider '{providerId}', dood!")
        except BlobStoreConfigError:
            self._closeAll(created)
            raise
        except Exception as e:
            self._closeAll(created)
            raise BlobStoreConfigError(f"Failed to initialize blob store providers: {e}") from e

        with self._lock:
            activeIds = {h.providerId for h in self._handles}
            duplicateIds = [b.providerId for b in created if b.providerId in activeIds]
            if duplicateIds:
                self._closeAll(created)
                raise BlobStoreConfigError(f"Providers already registered: {', '.join(duplicateIds)}")
            self._handles.extend(created)

        for backend in created:
            logger.info(f"Registered blob store provider '{backend.providerId}', dood!")
        if not created:
            logger.warning("No blob store providers configured, dood!")

    def close(self) -> None:
        """Unregister and close every provider."""
        with self._lock:
            handles = self._handles
            self._handles = []
        self._closeAll(handles)

    @staticmethod
    def _closeAll(handles: List[Any]) -> None:
        for handle in handles:
            if hasattr(handle, "close"):
                closeQuietly(handle, f"provider '{handle.providerId}'")

"""
Transient blob store backend implementation

This module provides an in-memory backend. Contents live as long as the
process does, which makes it handy for tests and scratch work.
"""

import io
import threading
from typing import Dict, List, Optional

from ..exceptions import BlobStoreBackendError
from ..models import Blob
from ..utils import validateName
from .abstract import AbstractBlobStoreBackend


class TransientBlobStoreBackend(AbstractBlobStoreBackend):
    """
    In-memory blob store backend.

    Containers are dictionaries of blob name to bytes. Payloads are copied
    on both upload and download so callers can never alias stored data.
    All operations are guarded by a lock so one instance can be shared
    between threads.

    Example:
        >>> backend = TransientBlobStoreBackend("scratch")
        >>> backend.createContainer("box")
        True
        >>> backend.putBlob("box", Blob("key", b"data"))
        >>> backend.getBlob("box", "key").payload.read()
        b'data'
    """

    providerType = "transient"

    def __init__(self, providerId: str):
        super().__init__(providerId)
        self._containers: Dict[str, Dict[str, bytes]] = {}
        self._lock = threading.RLock()

    def createContainer(self, containerName: str, location: Optional[str] = None) -> bool:
        validateName(containerName, "Container")
        with self._lock:
            if containerName in self._containers:
                return False
            self._containers[containerName] = {}
            return True

    def containerExists(self, containerName: str) -> bool:
        with self._lock:
            return containerName in self._containers

    def listContainers(self) -> List[str]:
        with self._lock:
            return sorted(self._containers.keys())

    def getBlob(self, containerName: str, blobName: str) -> Optional[Blob]:
        with self._lock:
            data = self._containers.get(containerName, {}).get(blobName)
        if data is None:
            return None
        return Blob(name=blobName, payload=io.BytesIO(data), contentLength=len(data))

    def putBlob(self, containerName: str, blob: Blob) -> None:
        validateName(blob.name)
        payload = blob.payload
        try:
            data = bytes(payload) if isinstance(payload, (bytes, bytearray)) else payload.read()
        except Exception as e:
            raise BlobStoreBackendError(f"Failed to read payload for blob '{blob.name}': {e}", originalError=e)

        with self._lock:
            if containerName not in self._containers:
                raise BlobStoreBackendError(f"Container '{containerName}' does not exist")
            self._containers[containerName][blob.name] = data

    def blobExists(self, containerName: str, blobName: str) -> bool:
        with self._lock:
            return blobName in self._containers.get(containerName, {})

    def removeBlob(self, containerName: str, blobName: str) -> bool:
        with self._lock:
            container = self._containers.get(containerName, {})
            if blobName not in container:
                return False
            del container[blobName]
            return True

    def listBlobs(self, containerName: str, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        with self._lock:
            names = sorted(name for name in self._containers.get(containerName, {}) if name.startswith(prefix))
        if limit is not None and limit > 0:
            return names[:limit]
        return names

"""
Filesystem blob store backend implementation

This module provides a backend that stores each container as a directory
and each blob as a file inside it, with atomic writes and proper error
handling.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional

from ..exceptions import BlobStoreBackendError, BlobStoreKeyError
from ..models import Blob
from ..utils import decodeName, encodeName
from .abstract import AbstractBlobStoreBackend

logger = logging.getLogger(__name__)


class FSBlobStoreBackend(AbstractBlobStoreBackend):
    """
    Filesystem-based blob store backend.

    Layout is `<baseDir>/<container>/<blob>`, both names percent-encoded
    into single path components (see encodeName), so "a/b" is stored as
    "a%2Fb" and listed back as "a/b".

    Features:
    - Automatic creation of baseDir
    - Atomic writes through a hidden temporary file and rename
    - File permissions set to 0o644
    - Errors wrapped into BlobStoreBackendError

    Args:
        providerId: Identifier of this provider
        baseDir: Base directory path (will be created if needed)

    Raises:
        BlobStoreBackendError: If baseDir cannot be created or is not a directory
    """

    providerType = "fs"

    def __init__(self, providerId: str, baseDir: str):
        super().__init__(providerId)
        self.baseDir = Path(baseDir)

        try:
            self.baseDir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise BlobStoreBackendError(f"Failed to create base directory '{baseDir}': {e}", originalError=e)

        if not self.baseDir.is_dir():
            raise BlobStoreBackendError(f"Base path '{baseDir}' exists but is not a directory")

    def _getContainerPath(self, containerName: str) -> Path:
        return self.baseDir / encodeName(containerName)

    def _getBlobPath(self, containerName: str, blobName: str) -> Path:
        return self._getContainerPath(containerName) / encodeName(blobName)

    def createContainer(self, containerName: str, location: Optional[str] = None) -> bool:
        containerPath = self._getContainerPath(containerName)
        try:
            containerPath.mkdir(exist_ok=False)
            return True
        except FileExistsError:
            if not containerPath.is_dir():
                raise BlobStoreBackendError(f"Container path '{containerPath}' exists but is not a directory")
            return False
        except Exception as e:
            raise BlobStoreBackendError(f"Failed to create container '{containerName}': {e}", originalError=e)

    def containerExists(self, containerName: str) -> bool:
        try:
            return self._getContainerPath(containerName).is_dir()
        except BlobStoreKeyError:
            return False

    def listContainers(self) -> List[str]:
        try:
            return sorted(
                decodeName(p.name) for p in self.baseDir.iterdir() if p.is_dir() and not p.name.startswith(".")
            )
        except Exception as e:
            raise BlobStoreBackendError(f"Failed to list containers in '{self.baseDir}': {e}", originalError=e)

    def getBlob(self, containerName: str, blobName: str) -> Optional[Blob]:
        blobPath = self._getBlobPath(containerName, blobName)

        try:
            stream = open(blobPath, "rb")
        except FileNotFoundError:
            return None
        except Exception as e:
            raise BlobStoreBackendError(
                f"Failed to open blob '{blobName}' in container '{containerName}': {e}", originalError=e
            )

        return Blob(name=blobName, payload=stream, contentLength=os.fstat(stream.fileno()).st_size)

    def putBlob(self, containerName: str, blob: Blob) -> None:
        """
        Store a blob to a file.

        Writes to a hidden temporary file first, then renames it over the
        target so readers never observe a partial blob.
        """
        containerPath = self._getContainerPath(containerName)
        if not containerPath.is_dir():
            raise BlobStoreBackendError(f"Container '{containerName}' does not exist")

        blobPath = containerPath / encodeName(blob.name)
        tempPath = containerPath / f".{blobPath.name}.tmp"

        try:
            with open(tempPath, "wb") as f:
                if isinstance(blob.payload, (bytes, bytearray)):
                    f.write(blob.payload)
                else:
                    shutil.copyfileobj(blob.payload, f)

            os.chmod(tempPath, 0o644)
            tempPath.replace(blobPath)

        except Exception as e:
            if tempPath.exists():
                try:
                    tempPath.unlink()
                except Exception as cleanupError:
                    logger.warning(f"Failed to remove temporary file {tempPath}: {cleanupError}")

            raise BlobStoreBackendError(
                f"Failed to store blob '{blob.name}' in container '{containerName}': {e}", originalError=e
            )

    def blobExists(self, containerName: str, blobName: str) -> bool:
        return self._getBlobPath(containerName, blobName).is_file()

    def removeBlob(self, containerName: str, blobName: str) -> bool:
        blobPath = self._getBlobPath(containerName, blobName)

        try:
            blobPath.unlink()
            return True
        except FileNotFoundError:
            return False
        except Exception as e:
            raise BlobStoreBackendError(
                f"Failed to delete blob '{blobName}' from container '{containerName}': {e}", originalError=e
            )

    def listBlobs(self, containerName: str, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        containerPath = self._getContainerPath(containerName)
        if not containerPath.is_dir():
            return []

        try:
            # Temporary files are hidden, encoded names never start with a dot
            decoded = (
                decodeName(f.name) for f in containerPath.iterdir() if f.is_file() and not f.name.startswith(".")
            )
            names = sorted(name for name in decoded if name.startswith(prefix))
        except Exception as e:
            raise BlobStoreBackendError(
                f"Failed to list blobs with prefix '{prefix}' in container '{containerName}': {e}", originalError=e
            )

        if limit is not None and limit > 0:
            return names[:limit]
        return names

"""
Blob transfer operations against a resolved provider handle

Container creation, payload read/write as raw bytes or as serialized
objects, and bulk stream copy. These functions hold no state; every stream
they open is released on every exit path, and release failures are only
logged so they never mask the primary outcome.

Objects are serialized with pickle. Only read objects from containers you
trust: unpickling can execute arbitrary code.
"""

import logging
import pickle
from typing import Any, BinaryIO, List, Optional

import httpx

from .backends.abstract import BlobStoreHandle, ListableBlobStoreHandle
from .exceptions import BlobNotFoundError, BlobStoreIOError, DeserializationError, SerializationError
from .models import Blob
from .utils import closeQuietly

logger = logging.getLogger(__name__)

# Size of the intermediate buffer used by copy()
BUFFER_SIZE = 32 * 1024

DEFAULT_URL_TIMEOUT = 30.0


def ensureContainer(handle: BlobStoreHandle, containerName: str, location: Optional[str] = None) -> bool:
    """
    Create a container unless it already exists.

    Returns:
        True if the container was created by this call
    """
    created = handle.createContainer(containerName, location)
    if created:
        logger.debug(f"Created container '{containerName}' in provider '{handle.providerId}', dood!")
    return created


def toBytes(obj: Any) -> bytes:
    """
    Serialize an object into a blob payload.

    Byte sequences (bytes, bytearray, memoryview) are returned as-is instead
    of being wrapped.

    Raises:
        SerializationError: If the object cannot be pickled
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj)

    try:
        return pickle.dumps(obj, protocol=pickle.HIGHEST_PROTOCOL)
    except Exception as e:
        raise SerializationError(f"Failed to serialize object of type {type(obj).__name__}: {e}", originalError=e)


def fromBytes(data: bytes) -> Any:
    """
    Deserialize a payload produced by toBytes() for a non-bytes object.

    Raises:
        DeserializationError: If the payload is malformed or references
            classes that cannot be imported
    """
    try:
        return pickle.loads(data)
    except Exception as e:
        raise DeserializationError(f"Failed to deserialize object: {e}", originalError=e)


def openBlobStream(handle: BlobStoreHandle, containerName: str, blobName: str) -> BinaryIO:
    """
    Open the raw payload stream of a blob.

    The caller owns the returned stream and must close it.

    Raises:
        BlobNotFoundError: If the container or the blob does not exist
    """
    blob = handle.getBlob(containerName, blobName)
    if blob is None:
        raise BlobNotFoundError(containerName, blobName)
    return blob.openPayload()


def readObject(handle: BlobStoreHandle, containerName: str, blobName: str) -> Any:
    """
    Read an object from the blob store.

    Makes sure the container exists, reads the whole payload and
    deserializes it.

    Args:
        handle: Resolved provider handle
        containerName: Container holding the blob
        blobName: Name of the blob

    Returns:
        The deserialized object

    Raises:
        BlobNotFoundError: If the blob does not exist
        BlobStoreIOError: If reading the payload stream fails
        DeserializationError: If the payload cannot be deserialized
    """
    ensureContainer(handle, containerName)
    stream = openBlobStream(handle, containerName, blobName)
    try:
        try:
            data = stream.read()
        except Exception as e:
            raise BlobStoreIOError(f"Failed to read blob '{blobName}' from '{containerName}': {e}", originalError=e)
    finally:
        closeQuietly(stream, f"blob '{blobName}' payload")

    return fromBytes(data)


def writeObject(handle: BlobStoreHandle, containerName: str, blobName: str, obj: Any) -> None:
    """
    Write an object to a blob, replacing any existing blob with that name.

    Raises:
        SerializationError: If the object cannot be serialized
        BlobStoreBackendError: If the upload fails
    """
    handle.putBlob(containerName, Blob(name=blobName, payload=toBytes(obj)))
    logger.debug(f"Stored object to blob '{blobName}' in container '{containerName}', dood!")


def writeStream(handle: BlobStoreHandle, containerName: str, blobName: str, inputStream: BinaryIO) -> None:
    """
    Upload the contents of a stream as a blob payload.

    The input stream is closed after the upload whether or not it succeeded.

    Raises:
        BlobStoreBackendError: If the upload fails
    """
    try:
        handle.putBlob(containerName, Blob(name=blobName, payload=inputStream))
        logger.debug(f"Stored stream to blob '{blobName}' in container '{containerName}', dood!")
    finally:
        closeQuietly(inputStream, "input stream")


def copy(inputStream: BinaryIO, outputStream: BinaryIO, bufferSize: int = BUFFER_SIZE) -> int:
    """
    Copy all data from inputStream to outputStream.

    Reads into a fixed size buffer until end of stream. Both streams are
    closed when copying completes or fails.

    Args:
        inputStream: Source stream
        outputStream: Target stream
        bufferSize: Size of each read

    Returns:
        Number of bytes copied

    Raises:
        BlobStoreIOError: If reading or writing fails; bytes already written
            stay in the target
    """
    total = 0
    try:
        while True:
            try:
                chunk = inputStream.read(bufferSize)
            except Exception as e:
                raise BlobStoreIOError(f"Failed to read from stream after {total} bytes: {e}", originalError=e)
            if not chunk:
                break

            try:
                outputStream.write(chunk)
            except Exception as e:
                raise BlobStoreIOError(f"Failed to write to stream after {total} bytes: {e}", originalError=e)
            total += len(chunk)
    finally:
        closeQuietly(outputStream, "output stream")
        closeQuietly(inputStream, "input stream")

    return total


def readFromUrl(url: str, timeout: float = DEFAULT_URL_TIMEOUT) -> bytes:
    """
    Fetch a payload from a URL.

    Raises:
        BlobStoreIOError: On network errors, timeouts or non-2xx responses
    """
    logger.debug(f"Fetching payload from {url}")
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as session:
            response = session.get(url)
            response.raise_for_status()
            return response.content
    except httpx.TimeoutException as e:
        raise BlobStoreIOError(f"Timeout reading from {url}", originalError=e)
    except httpx.HTTPStatusError as e:
        raise BlobStoreIOError(f"Failed to read from {url}: HTTP {e.response.status_code}", originalError=e)
    except httpx.RequestError as e:
        raise BlobStoreIOError(f"Failed to read from {url}: {e}", originalError=e)


def listContainers(handle: ListableBlobStoreHandle) -> List[str]:
    return handle.listContainers()


def listBlobs(
    handle: ListableBlobStoreHandle, containerName: str, prefix: str = "", limit: Optional[int] = None
) -> List[str]:
    return handle.listBlobs(containerName, prefix=prefix, limit=limit)


def blobExists(handle: ListableBlobStoreHandle, containerName: str, blobName: str) -> bool:
    return handle.blobExists(containerName, blobName)


def removeBlob(handle: ListableBlobStoreHandle, containerName: str, blobName: str) -> bool:
    removed = handle.removeBlob(containerName, blobName)
    if removed:
        logger.debug(f"Removed blob '{blobName}' from container '{containerName}', dood!")
    else:
        logger.warning(f"Blob '{blobName}' not found for removal in container '{containerName}', dood!")
    return removed

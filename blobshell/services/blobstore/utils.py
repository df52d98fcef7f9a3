"""
Blob store utility functions

This module provides helpers shared by the backends and the transfer layer:
reversible name encoding for path-based backends and best-effort stream release.
"""

import logging
from typing import Any
from urllib.parse import quote, unquote

from .exceptions import BlobStoreKeyError

logger = logging.getLogger(__name__)

# Maximum encoded name length, leaves room for the ".<name>.tmp" temporary file
MAX_NAME_LENGTH = 250


def validateName(name: str, kind: str = "Blob") -> str:
    """
    Check that a container or blob name is usable as-is.

    Remote backends keep names verbatim (S3 keys may contain slashes), so
    only emptiness and length are checked here.

    Args:
        name: The container or blob name
        kind: Human readable kind for error messages ("Blob", "Container")

    Returns:
        The name unchanged

    Raises:
        BlobStoreKeyError: If the name is empty, only whitespace or too long
    """
    if not name or not name.strip():
        raise BlobStoreKeyError(f"{kind} name cannot be empty or only whitespace")
    if len(name) > 1024:
        raise BlobStoreKeyError(f"{kind} name exceeds maximum length of 1024 characters. Length: {len(name)}")
    return name


def encodeName(name: str) -> str:
    """
    Encode a container or blob name into a single safe path component.

    The mapping is reversible (see decodeName), so distinct names never
    share a file. Path separators, "%" and every character outside
    [A-Za-z0-9_.~-] are percent-encoded; a leading dot is encoded too, so
    encoded names are never "." or ".." and never clash with hidden
    temporary files.

    Args:
        name: The name to encode

    Returns:
        The encoded file name

    Raises:
        BlobStoreKeyError: If the name is empty or the encoded name exceeds
            MAX_NAME_LENGTH characters

    Examples:
        >>> encodeName("valid-key.txt")
        'valid-key.txt'
        >>> encodeName("../etc/passwd")
        '%2E.%2Fetc%2Fpasswd'
        >>> encodeName("a_b") != encodeName("a/b")
        True
    """
    if not name or not name.strip():
        raise BlobStoreKeyError("Name cannot be empty or only whitespace")

    encoded = quote(name, safe="")
    if encoded.startswith("."):
        encoded = "%2E" + encoded[1:]

    if len(encoded) > MAX_NAME_LENGTH:
        raise BlobStoreKeyError(
            f"Encoded name exceeds maximum length of {MAX_NAME_LENGTH} characters. Length: {len(encoded)}"
        )

    return encoded


def decodeName(fileName: str) -> str:
    """Turn a file name produced by encodeName() back into the original name."""
    return unquote(fileName)


def closeQuietly(stream: Any, description: str = "stream") -> None:
    """
    Close a stream, logging (never raising) any failure.

    Used on cleanup paths where the primary outcome is already decided and a
    close failure must not replace it.

    Args:
        stream: Object with a close() method, or None
        description: What is being closed, for the log message
    """
    if stream is None:
        return
    try:
        stream.close()
    except Exception as e:
        logger.warning(f"Error closing {description}: {e}", exc_info=True)

"""
Blob store models
"""

import io
from dataclasses import dataclass
from typing import BinaryIO, Optional, TypeAlias

DEFAULT_CONTENT_TYPE = "application/octet-stream"

PayloadType: TypeAlias = bytes | BinaryIO


@dataclass
class Blob:
    """Named payload stored (or about to be stored) in a container, dood.

    On upload the payload may be raw bytes or a readable binary stream.
    Blobs returned by a backend always carry an open stream which the
    receiver must close.
    """

    name: str
    payload: PayloadType
    contentType: str = DEFAULT_CONTENT_TYPE
    contentLength: Optional[int] = None

    def openPayload(self) -> BinaryIO:
        """Get payload as a readable stream (wrapping raw bytes if needed)."""
        if isinstance(self.payload, (bytes, bytearray)):
            return io.BytesIO(self.payload)
        return self.payload

"""
Blob store backends: transient (in-memory), filesystem and S3.
"""

from .abstract import AbstractBlobStoreBackend, BlobStoreHandle, ListableBlobStoreHandle
from .filesystem import FSBlobStoreBackend
from .s3 import S3BlobStoreBackend
from .transient import TransientBlobStoreBackend

__all__ = [
    "AbstractBlobStoreBackend",
    "BlobStoreHandle",
    "ListableBlobStoreHandle",
    "FSBlobStoreBackend",
    "S3BlobStoreBackend",
    "TransientBlobStoreBackend",
]

"""
Blob store service package

This package resolves a provider hint to one of several configured blob
store providers (transient, filesystem, S3) and transfers payloads, raw or
as serialized objects, to and from their containers.
"""

from .registry import BlobStoreRegistry
from .resolver import resolveBlobStore, resolveBlobStores
from .service import BlobStoreService

__all__ = ["BlobStoreRegistry", "BlobStoreService", "resolveBlobStore", "resolveBlobStores"]

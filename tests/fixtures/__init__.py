"""
Test fixtures package for blobshell tests.

- blobstore_mocks: tracking streams, a minimal provider handle and
  mock ConfigManager factories
"""

from tests.fixtures.blobstore_mocks import FakeHandle, TrackingStream, createMockConfigManager, createMockHandle

__all__ = ["FakeHandle", "TrackingStream", "createMockConfigManager", "createMockHandle"]

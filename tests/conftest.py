"""
Pytest configuration and common fixtures for blobshell tests.

All fixtures follow camelCase naming convention.
"""

import logging
from typing import Generator

import pytest

from blobshell.services.blobstore.backends.transient import TransientBlobStoreBackend
from blobshell.services.blobstore.registry import BlobStoreRegistry
from blobshell.services.blobstore.service import BlobStoreService
from tests.fixtures.blobstore_mocks import createMockConfigManager

# ============================================================================
# Blob Store Fixtures
# ============================================================================


@pytest.fixture
def mockConfigManager():
    """
    Create a mock ConfigManager with one transient provider.

    Example:
        def testConfig(mockConfigManager):
            registry = BlobStoreRegistry()
            registry.injectConfig(mockConfigManager)
    """
    return createMockConfigManager({"providers": {"scratch": {"type": "transient"}}})


@pytest.fixture
def scratchService(mockConfigManager) -> Generator[BlobStoreService, None, None]:
    """
    Provide a BlobStoreService over a single transient provider with a "box" container.

    Yields:
        BlobStoreService: Service whose only provider is "scratch"
    """
    registry = BlobStoreRegistry()
    registry.injectConfig(mockConfigManager)
    service = BlobStoreService(registry)
    service.createContainer("box")
    yield service
    registry.close()


@pytest.fixture
def transientBackend() -> TransientBlobStoreBackend:
    """Provide an empty transient backend"""
    return TransientBlobStoreBackend("scratch")


# ============================================================================
# Logging
# ============================================================================


@pytest.fixture(autouse=True)
def resetRootLoggerLevel() -> Generator[None, None, None]:
    """Restore root logger level after tests that call initLogging()"""
    rootLogger = logging.getLogger()
    level = rootLogger.level
    yield
    rootLogger.setLevel(level)

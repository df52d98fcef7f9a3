"""
Tests for blob transfer operations, dood!

Round trips through readObject/writeObject, byte pass-through, bulk copy
boundaries and stream release on success and failure paths.
"""

import io
import logging
import pickle
from dataclasses import dataclass
from unittest.mock import Mock, patch

import httpx
import pytest

from blobshell.services.blobstore import transfer
from blobshell.services.blobstore.backends.transient import TransientBlobStoreBackend
from blobshell.services.blobstore.exceptions import (
    BlobNotFoundError,
    BlobStoreIOError,
    DeserializationError,
    SerializationError,
)
from tests.fixtures.blobstore_mocks import FakeHandle, TrackingStream


@dataclass
class Settings:
    """Module level class so pickle can find it"""

    name: str
    retries: int
    tags: list


@pytest.fixture
def handle():
    """Minimal provider handle with one container, dood!"""
    fake = FakeHandle("fake")
    fake.createContainer("box")
    return fake


@pytest.fixture
def transientHandle():
    """In-memory backend with one container"""
    backend = TransientBlobStoreBackend("scratch")
    backend.createContainer("box")
    return backend


class TestEnsureContainer:
    """Test ensureContainer, dood!"""

    def testCreatesMissingContainer(self, transientHandle):
        """Test that missing container is created"""
        assert transfer.ensureContainer(transientHandle, "new") is True
        assert transientHandle.containerExists("new")

    def testExistingContainerIsNotAnError(self, transientHandle):
        """Test that ensuring an existing container is a no-op"""
        assert transfer.ensureContainer(transientHandle, "box") is False
        assert transfer.ensureContainer(transientHandle, "box") is False

    def testLocationPassedToBackend(self, handle):
        """Test that location hint reaches the backend"""
        transfer.ensureContainer(handle, "eu", location="eu-west-1")
        assert handle.createCalls[-1] == ("eu", "eu-west-1")


class TestObjectRoundTrip:
    """Test writeObject followed by readObject, dood!"""

    @pytest.mark.parametrize(
        "obj",
        [
            {"answer": 42, "nested": {"list": [1, 2, 3]}},
            [1, "two", 3.0, None],
            "plain string",
            "",
            12345678901234567890,
            (1, 2),
            {"a", "b"},
            None,
            Settings(name="primary", retries=3, tags=["x", "y"]),
        ],
    )
    def testRoundTrip(self, handle, obj):
        """Test that readObject reproduces what writeObject stored"""
        transfer.writeObject(handle, "box", "obj", obj)
        assert transfer.readObject(handle, "box", "obj") == obj

    def testRoundTripWithTransientBackend(self, transientHandle):
        """Test round trip through a real backend"""
        transfer.writeObject(transientHandle, "box", "settings", {"k": "v"})
        assert transfer.readObject(transientHandle, "box", "settings") == {"k": "v"}

    def testWriteReplacesExistingBlob(self, handle):
        """Test that writing again replaces the old payload"""
        transfer.writeObject(handle, "box", "obj", "old")
        transfer.writeObject(handle, "box", "obj", "new")
        assert transfer.readObject(handle, "box", "obj") == "new"

    def testReadObjectEnsuresContainer(self, handle):
        """Test that readObject creates the container before reading"""
        with pytest.raises(BlobNotFoundError):
            transfer.readObject(handle, "fresh", "obj")
        assert ("fresh", None) in handle.createCalls
        assert "fresh" in handle.containers


class TestBytesPassThrough:
    """Test that byte sequences are stored unchanged, dood!"""

    @pytest.mark.parametrize("payload", [b"raw bytes", bytearray(b"\x00\x01\x02"), memoryview(b"view"), b""])
    def testBytesStoredVerbatim(self, handle, payload):
        """Test that openBlobStream returns exactly the written bytes"""
        transfer.writeObject(handle, "box", "raw", payload)

        stream = transfer.openBlobStream(handle, "box", "raw")
        try:
            assert stream.read() == bytes(payload)
        finally:
            stream.close()

    def testToBytesPassesBytesThrough(self):
        """Test toBytes does not wrap bytes"""
        assert transfer.toBytes(b"abc") == b"abc"

    def testToBytesPicklesOtherObjects(self):
        """Test toBytes pickles non-bytes objects"""
        data = transfer.toBytes({"a": 1})
        assert pickle.loads(data) == {"a": 1}
        assert transfer.fromBytes(data) == {"a": 1}

    def testToBytesUnserializableRaisesError(self):
        """Test that unpicklable objects raise SerializationError"""
        with pytest.raises(SerializationError, match="function"):
            transfer.toBytes(lambda: None)

    def testWriteUnserializableDoesNotUpload(self, handle):
        """Test that failed serialization leaves the container untouched"""
        with pytest.raises(SerializationError):
            transfer.writeObject(handle, "box", "bad", lambda: None)
        assert "bad" not in handle.containers["box"]


class TestReadObjectFailures:
    """Test readObject error paths and stream release, dood!"""

    def testMissingBlobRaisesNotFound(self, handle):
        """Test that missing blob raises BlobNotFoundError"""
        with pytest.raises(BlobNotFoundError) as excInfo:
            transfer.readObject(handle, "box", "missing")
        assert excInfo.value.containerName == "box"
        assert excInfo.value.blobName == "missing"

    def testMalformedPayloadRaisesDeserializationError(self, handle):
        """Test that non-pickle payload raises DeserializationError"""
        handle.containers["box"]["junk"] = b"definitely not a pickle"

        with pytest.raises(DeserializationError) as excInfo:
            transfer.readObject(handle, "box", "junk")

        assert excInfo.value.originalError is not None
        assert handle.openedStreams[0].closeCount == 1

    def testUnknownClassRaisesDeserializationError(self, handle):
        """Test that payload referencing a missing module raises DeserializationError"""
        handle.containers["box"]["ghost"] = b"cnonexistent_module_for_blobshell_tests\nThing\n)R."

        with pytest.raises(DeserializationError):
            transfer.readObject(handle, "box", "ghost")
        assert handle.openedStreams[0].closeCount == 1

    def testEmptyPayloadRaisesDeserializationError(self, handle):
        """Test that empty payload is not silently turned into None"""
        handle.containers["box"]["empty"] = b""

        with pytest.raises(DeserializationError):
            transfer.readObject(handle, "box", "empty")

    def testReadFailureRaisesIOError(self):
        """Test that stream read failure raises BlobStoreIOError and closes stream"""
        fake = FakeHandle("fake", streamFactory=lambda data: TrackingStream(data, failRead=True))
        fake.containers["box"] = {"obj": pickle.dumps("value")}

        with pytest.raises(BlobStoreIOError):
            transfer.readObject(fake, "box", "obj")
        assert fake.openedStreams[0].closeCount == 1

    def testSuccessClosesStreamOnce(self, handle):
        """Test that stream is closed exactly once on success"""
        transfer.writeObject(handle, "box", "obj", [1, 2])
        transfer.readObject(handle, "box", "obj")
        assert handle.openedStreams[0].closeCount == 1

    def testCloseFailureDoesNotMaskResult(self, caplog):
        """Test that a failing close is logged and the object still returned"""
        fake = FakeHandle("fake", streamFactory=lambda data: TrackingStream(data, failClose=True))
        fake.containers["box"] = {"obj": pickle.dumps({"ok": True})}

        with caplog.at_level(logging.WARNING):
            assert transfer.readObject(fake, "box", "obj") == {"ok": True}

        assert fake.openedStreams[0].closeCount == 1
        assert "Error closing" in caplog.text

    def testCloseFailureDoesNotMaskDeserializationError(self):
        """Test that the primary failure survives a failing close"""
        fake = FakeHandle("fake", streamFactory=lambda data: TrackingStream(data, failClose=True))
        fake.containers["box"] = {"obj": b"garbage"}

        with pytest.raises(DeserializationError):
            transfer.readObject(fake, "box", "obj")


class TestOpenBlobStream:
    """Test openBlobStream, dood!"""

    def testReturnsOpenStream(self, handle):
        """Test that stream is handed to the caller unclosed"""
        handle.containers["box"]["raw"] = b"payload"

        stream = transfer.openBlobStream(handle, "box", "raw")
        assert stream.closeCount == 0
        assert stream.read() == b"payload"
        stream.close()

    def testMissingBlobRaisesNotFound(self, handle):
        """Test that missing blob raises BlobNotFoundError"""
        with pytest.raises(BlobNotFoundError):
            transfer.openBlobStream(handle, "box", "missing")

    def testMissingContainerRaisesNotFound(self, handle):
        """Test that missing container also raises BlobNotFoundError"""
        with pytest.raises(BlobNotFoundError):
            transfer.openBlobStream(handle, "nope", "missing")


class TestWriteStream:
    """Test writeStream, dood!"""

    def testUploadsAndClosesStream(self, handle):
        """Test that stream contents are stored and the stream closed once"""
        source = TrackingStream(b"streamed payload")

        transfer.writeStream(handle, "box", "s", source)

        assert handle.containers["box"]["s"] == b"streamed payload"
        assert source.closeCount == 1

    def testClosesStreamWhenUploadFails(self):
        """Test that input stream is closed even if upload fails"""
        fake = FakeHandle("fake", failPut=True)
        source = TrackingStream(b"data")

        with pytest.raises(OSError, match="Simulated upload failure"):
            transfer.writeStream(fake, "box", "s", source)
        assert source.closeCount == 1

    def testCloseFailureIsNotPropagated(self, handle, caplog):
        """Test that failing close after upload is only logged"""
        source = TrackingStream(b"data", failClose=True)

        with caplog.at_level(logging.WARNING):
            transfer.writeStream(handle, "box", "s", source)

        assert handle.containers["box"]["s"] == b"data"
        assert "Error closing input stream" in caplog.text


class TestCopy:
    """Test bulk copy, dood!"""

    @pytest.mark.parametrize("size", [0, 1, 32768, 32769, 1000000])
    def testCopiesAllBytes(self, size):
        """Test that every byte arrives, across buffer boundaries"""
        data = bytes(i % 251 for i in range(size))
        source = TrackingStream(data)
        target = TrackingStream()

        copied = transfer.copy(source, target)

        assert copied == size
        assert target.finalValue == data
        assert source.closeCount == 1
        assert target.closeCount == 1

    def testUsesFixedBuffer(self):
        """Test that reads use the 32 KiB buffer"""
        source = TrackingStream(b"x" * 32769)
        transfer.copy(source, TrackingStream())

        # 32768 + 1 + end of stream
        assert source.readCalls == 3
        assert transfer.BUFFER_SIZE == 32 * 1024

    def testReadFailureRaisesAndClosesBoth(self):
        """Test that read failure raises BlobStoreIOError and releases both streams"""
        source = TrackingStream(b"y" * 40000, failRead=True, failAfter=1)
        target = TrackingStream()

        with pytest.raises(BlobStoreIOError, match="after 32768 bytes"):
            transfer.copy(source, target)

        assert target.finalValue == b"y" * 32768
        assert source.closeCount == 1
        assert target.closeCount == 1

    def testWriteFailureRaisesAndClosesBoth(self):
        """Test that write failure raises BlobStoreIOError and releases both streams"""
        source = TrackingStream(b"data")
        target = TrackingStream(failWrite=True)

        with pytest.raises(BlobStoreIOError, match="write"):
            transfer.copy(source, target)

        assert source.closeCount == 1
        assert target.closeCount == 1

    def testCloseFailureIsNotPropagated(self):
        """Test that failing close of target does not fail the copy"""
        source = TrackingStream(b"data")
        target = TrackingStream(failClose=True)

        assert transfer.copy(source, target) == 4
        assert source.closeCount == 1
        assert target.finalValue == b"data"


class TestReadFromUrl:
    """Test readFromUrl with mocked httpx client, dood!"""

    def _mockClient(self, mockClientClass):
        session = Mock()
        mockClientClass.return_value.__enter__.return_value = session
        mockClientClass.return_value.__exit__.return_value = False
        return session

    def testReturnsContent(self):
        """Test that response body is returned"""
        with patch("blobshell.services.blobstore.transfer.httpx.Client") as mockClientClass:
            session = self._mockClient(mockClientClass)
            session.get.return_value = httpx.Response(
                200, content=b"remote payload", request=httpx.Request("GET", "https://example.com/blob")
            )

            assert transfer.readFromUrl("https://example.com/blob") == b"remote payload"
            session.get.assert_called_once_with("https://example.com/blob")

    def testHttpErrorRaisesIOError(self):
        """Test that non-2xx status raises BlobStoreIOError"""
        with patch("blobshell.services.blobstore.transfer.httpx.Client") as mockClientClass:
            session = self._mockClient(mockClientClass)
            session.get.return_value = httpx.Response(404, request=httpx.Request("GET", "https://example.com/x"))

            with pytest.raises(BlobStoreIOError, match="HTTP 404"):
                transfer.readFromUrl("https://example.com/x")

    def testNetworkErrorRaisesIOError(self):
        """Test that connection errors raise BlobStoreIOError"""
        with patch("blobshell.services.blobstore.transfer.httpx.Client") as mockClientClass:
            session = self._mockClient(mockClientClass)
            session.get.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(BlobStoreIOError, match="connection refused"):
                transfer.readFromUrl("https://example.com/x")

    def testTimeoutRaisesIOError(self):
        """Test that timeouts raise BlobStoreIOError"""
        with patch("blobshell.services.blobstore.transfer.httpx.Client") as mockClientClass:
            session = self._mockClient(mockClientClass)
            session.get.side_effect = httpx.ReadTimeout("too slow")

            with pytest.raises(BlobStoreIOError, match="Timeout"):
                transfer.readFromUrl("https://example.com/x")


class TestListingHelpers:
    """Test listing and removal helpers, dood!"""

    def testListAndRemove(self, transientHandle):
        """Test listBlobs, blobExists and removeBlob together"""
        for name in ["a1", "a2", "b1"]:
            transfer.writeObject(transientHandle, "box", name, b"x")

        assert transfer.listContainers(transientHandle) == ["box"]
        assert transfer.listBlobs(transientHandle, "box") == ["a1", "a2", "b1"]
        assert transfer.listBlobs(transientHandle, "box", prefix="a") == ["a1", "a2"]
        assert transfer.blobExists(transientHandle, "box", "a1") is True

        assert transfer.removeBlob(transientHandle, "box", "a1") is True
        assert transfer.removeBlob(transientHandle, "box", "a1") is False
        assert transfer.blobExists(transientHandle, "box", "a1") is False


class TestBlobModel:
    """Test Blob.openPayload, dood!"""

    def testBytesPayloadWrapped(self):
        """Test that bytes payload is wrapped into a stream"""
        from blobshell.services.blobstore.models import Blob

        assert Blob("x", b"abc").openPayload().read() == b"abc"

    def testStreamPayloadReturnedAsIs(self):
        """Test that stream payload is returned unchanged"""
        from blobshell.services.blobstore.models import Blob

        stream = io.BytesIO(b"abc")
        assert Blob("x", stream).openPayload() is stream

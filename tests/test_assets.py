"""
Binary asset encoder tests - data URL encoding, batches and preview handles.
"""

import asyncio
import base64

import pytest

from profilebook.core.assets import (
    BinaryAsset,
    PreviewHandle,
    PreviewRegistry,
    decode,
    encode,
    encode_batch,
)
from profilebook.core.errors import ReadError


class FailingStream:
    """File-like object whose read always fails."""

    def __init__(self):
        self.reads = 0

    def read(self):
        self.reads += 1
        raise OSError("device not ready")


class AsyncStream:
    """File-like object with coroutine read/seek, like an upload."""

    def __init__(self, data: bytes):
        self.data = data
        self.sought = False

    async def seek(self, offset):
        self.sought = True

    async def read(self):
        return self.data


class NoneStream:
    """File-like object that hands back nothing."""

    def read(self):
        return None


class EofStream:
    def read(self):
        raise EOFError("truncated upload")


class CountingStream:
    def __init__(self, data: bytes):
        self.data = data
        self.reads = 0

    def read(self):
        self.reads += 1
        return self.data


class TestEncode:
    """Test single asset encoding."""

    def test_encode_png(self):
        asset = BinaryAsset.from_bytes("me.png", b"\x89PNG\r\n")
        encoded = asyncio.run(encode(asset))

        assert encoded.startswith("data:image/png;base64,")
        assert base64.b64decode(encoded.split(",", 1)[1]) == b"\x89PNG\r\n"

    def test_explicit_content_type_wins(self):
        asset = BinaryAsset.from_bytes("upload", b"abc", content_type="image/webp")
        assert asyncio.run(encode(asset)).startswith("data:image/webp;base64,")

    def test_unknown_type_falls_back(self):
        asset = BinaryAsset.from_bytes("blob", b"abc")
        assert asyncio.run(encode(asset)).startswith("data:application/octet-stream;base64,")

    def test_async_stream(self):
        stream = AsyncStream(b"jpeg-bytes")
        encoded = asyncio.run(encode(BinaryAsset("a.jpg", stream)))

        assert stream.sought
        assert decode(encoded) == ("image/jpeg", b"jpeg-bytes")

    def test_read_failure_raises_read_error(self):
        asset = BinaryAsset("broken.png", FailingStream())
        with pytest.raises(ReadError, match="broken.png") as exc_info:
            asyncio.run(encode(asset))
        assert exc_info.value.name == "broken.png"

    def test_stream_returning_nothing_raises_read_error(self):
        with pytest.raises(ReadError, match="x.png"):
            asyncio.run(encode(BinaryAsset("x.png", NoneStream())))

    def test_unexpected_stream_error_raises_read_error(self):
        with pytest.raises(ReadError, match="truncated upload"):
            asyncio.run(encode_batch([BinaryAsset("x.png", EofStream())]))

    def test_from_path(self, tmp_path):
        image = tmp_path / "face.gif"
        image.write_bytes(b"GIF89a")
        encoded = asyncio.run(encode(BinaryAsset.from_path(image)))
        assert decode(encoded) == ("image/gif", b"GIF89a")

    def test_from_missing_path(self, tmp_path):
        asset = BinaryAsset.from_path(tmp_path / "missing.png")
        with pytest.raises(ReadError):
            asyncio.run(encode(asset))


class TestEncodeBatch:
    """Test all-or-nothing batch encoding."""

    def test_batch_preserves_order(self):
        assets = [BinaryAsset.from_bytes(f"{i}.png", bytes([i])) for i in range(3)]
        encoded = asyncio.run(encode_batch(assets))
        assert [decode(item)[1] for item in encoded] == [b"\x00", b"\x01", b"\x02"]

    def test_second_of_three_fails(self):
        first, third = CountingStream(b"a"), CountingStream(b"c")
        assets = [
            BinaryAsset("1.png", first),
            BinaryAsset("2.png", FailingStream()),
            BinaryAsset("3.png", third),
        ]

        with pytest.raises(ReadError, match="2.png"):
            asyncio.run(encode_batch(assets))

        # Every read settled before the failure was reported
        assert first.reads == 1
        assert third.reads == 1

    def test_empty_entries_are_dropped(self):
        encoded = asyncio.run(encode_batch([None, BinaryAsset.from_bytes("a.png", b"a"), None]))
        assert len(encoded) == 1

    def test_empty_batch(self):
        assert asyncio.run(encode_batch([])) == []


class TestDecode:
    """Test reconstituting stored encodings."""

    @pytest.mark.parametrize("bad", [
        "not a data url",
        "data:image/png;base64",
        "data:image/png,plain-text",
        "data:image/png;base64,@@@",
        None,
    ])
    def test_malformed(self, bad):
        with pytest.raises(ReadError):
            decode(bad)


class TestPreviewRegistry:
    """Test revocable preview handles."""

    def test_acquire_and_resolve(self):
        registry = PreviewRegistry()
        asset = BinaryAsset.from_bytes("a.png", b"a")
        handle = registry.acquire(asset)

        assert isinstance(handle, PreviewHandle)
        assert str(handle).startswith("preview:")
        assert handle.name == "a.png"
        assert registry.resolve(handle) is asset
        assert registry.resolve(handle.id) is asset

    def test_handles_are_unique(self):
        registry = PreviewRegistry()
        asset = BinaryAsset.from_bytes("a.png", b"a")
        assert registry.acquire(asset) != registry.acquire(asset)
        assert len(registry) == 2

    def test_revoke(self):
        registry = PreviewRegistry()
        handle = registry.acquire(BinaryAsset.from_bytes("a.png", b"a"))
        registry.revoke(handle)

        assert not registry.is_live(handle)
        with pytest.raises(KeyError):
            registry.resolve(handle)

        # Revoking twice is harmless
        registry.revoke(handle)

    def test_acquire_all_skips_empty(self):
        registry = PreviewRegistry()
        handles = registry.acquire_all([None, BinaryAsset.from_bytes("a.png", b"a")])
        assert len(handles) == 1

    def test_context_manager_releases_everything(self):
        with PreviewRegistry() as registry:
            handles = registry.acquire_all([
                BinaryAsset.from_bytes("a.png", b"a"),
                BinaryAsset.from_bytes("b.png", b"b"),
            ])
            assert all(registry.is_live(handle) for handle in handles)

        assert len(registry) == 0
        assert not any(registry.is_live(handle) for handle in handles)

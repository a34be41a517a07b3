"""
Binary asset encoder - turns uploaded images into self-contained data URLs
and hands out revocable preview handles for transient display.
"""

import asyncio
import base64
import binascii
import inspect
import io
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import ReadError
from ..util.logging import logger

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class BinaryAsset:
    """Reference to binary input that has not been encoded yet.

    ``stream`` is any file-like object with a ``read()`` method; the method may
    be a coroutine function (FastAPI's ``UploadFile``) or a plain blocking call.
    """

    def __init__(self, name: str, stream: Any, content_type: Optional[str] = None):
        self.name = name
        self.stream = stream
        self.content_type = content_type or mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: Optional[str] = None) -> "BinaryAsset":
        return cls(name, io.BytesIO(data), content_type)

    @classmethod
    def from_path(cls, path, content_type: Optional[str] = None) -> "BinaryAsset":
        path = Path(path)
        return cls(path.name, _LazyFile(path), content_type)

    async def read(self) -> bytes:
        """Read the full content, rewinding first where the stream allows it."""
        seek = getattr(self.stream, "seek", None)
        if seek is not None:
            result = seek(0)
            if inspect.isawaitable(result):
                await result

        reader = self.stream.read
        if inspect.iscoroutinefunction(reader):
            data = await reader()
        else:
            data = await asyncio.to_thread(reader)

        if isinstance(data, str):
            data = data.encode("utf-8")
        return data

    def __repr__(self):
        return f"BinaryAsset(name={self.name!r}, content_type={self.content_type!r})"


class _LazyFile:
    """Opens the file only when read, so missing files fail at encode time."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> bytes:
        return self.path.read_bytes()


async def encode(asset: BinaryAsset) -> str:
    """Encode one asset as a ``data:<mime>;base64,<payload>`` string."""
    try:
        data = await asset.read()
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"read() returned {type(data).__name__}, expected bytes")
    except Exception as e:
        logger.log_asset_operation("encode", asset.name, status="failed", error=str(e))
        raise ReadError(asset.name, str(e)) from e

    encoded = f"data:{asset.content_type};base64,{base64.b64encode(data).decode('ascii')}"
    logger.log_asset_operation("encode", asset.name, len(data))
    return encoded


async def encode_batch(assets: Iterable[Optional[BinaryAsset]]) -> List[str]:
    """Encode every asset concurrently; all must succeed or ReadError is raised.

    Empty entries are dropped. Every encoding is allowed to settle before the
    outcome is decided, so no read is left running after a failure.
    """
    pending = [asset for asset in assets if asset]
    if not pending:
        return []

    results = await asyncio.gather(*(encode(asset) for asset in pending), return_exceptions=True)

    for result in results:
        if isinstance(result, BaseException):
            logger.log_asset_operation("encode_batch", f"{len(pending)} assets", status="failed",
                                       error=str(result))
            raise result

    return list(results)


def decode(encoding: str) -> Tuple[str, bytes]:
    """Reconstitute a data URL into (content_type, bytes)."""
    if not isinstance(encoding, str) or not encoding.startswith("data:") or "," not in encoding:
        raise ReadError("<encoded>", "not a data URL")

    header, payload = encoding[5:].split(",", 1)
    parts = header.split(";")
    content_type = parts[0] or DEFAULT_CONTENT_TYPE
    if "base64" not in parts[1:]:
        raise ReadError("<encoded>", "only base64 data URLs are supported")

    try:
        return content_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ReadError("<encoded>", str(e)) from e


@dataclass(frozen=True)
class PreviewHandle:
    """Transient reference to an asset, valid until revoked."""
    id: str
    name: str

    def __str__(self):
        return self.id


class PreviewRegistry:
    """Issues and revokes preview handles for one view's lifetime.

    Use as a context manager so every handle is released when the view goes away.
    """

    def __init__(self):
        self._live: Dict[str, BinaryAsset] = {}

    def acquire(self, asset: BinaryAsset) -> PreviewHandle:
        handle = PreviewHandle(id=f"preview:{uuid.uuid4()}", name=asset.name)
        self._live[handle.id] = asset
        return handle

    def acquire_all(self, assets: Iterable[Optional[BinaryAsset]]) -> List[PreviewHandle]:
        return [self.acquire(asset) for asset in assets if asset]

    def resolve(self, handle) -> BinaryAsset:
        """Return the asset behind a live handle; KeyError once revoked.

        The asset carries the name and content type; its bytes are read with
        ``await asset.read()``.
        """
        handle_id = handle.id if isinstance(handle, PreviewHandle) else str(handle)
        return self._live[handle_id]

    def is_live(self, handle) -> bool:
        handle_id = handle.id if isinstance(handle, PreviewHandle) else str(handle)
        return handle_id in self._live

    def revoke(self, handle) -> None:
        handle_id = handle.id if isinstance(handle, PreviewHandle) else str(handle)
        self._live.pop(handle_id, None)

    def release_all(self) -> None:
        self._live.clear()

    def __len__(self):
        return len(self._live)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release_all()
        return False

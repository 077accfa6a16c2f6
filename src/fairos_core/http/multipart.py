"""
Multipart/form-data encoding for binary transfer.

Builds request bodies from ordered text fields and byte sources using
aiohttp's MultipartWriter, serialized into memory so the body can travel
through the regular Transport POST path. Fields are always written before
streams, each group in the order given.

In-memory bytes, open binary files and file paths all encode identically
for the same content, filename and content type: sources are read fully
before encoding.
"""

import asyncio
import mimetypes
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

import aiohttp
from aiohttp import payload

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FilePart:
    """
    File-backed byte source.

    Attributes:
        path: Local file to read
        content_type: MIME type (None = guess from the file extension)
    """

    path: Path
    content_type: Optional[str] = None


ByteSource = Union[bytes, bytearray, BinaryIO, FilePart]


@dataclass(frozen=True)
class StreamPart:
    """
    One binary part of a multipart body.

    Attributes:
        name: Form field name (e.g. "files", "csv", "json")
        source: bytes, an open binary file, or a FilePart
        filename: Filename reported to the server (FilePart defaults to the basename)
        content_type: MIME type of the part (defaults to application/octet-stream)
    """

    name: str
    source: ByteSource
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class MultipartBody:
    """Encoded multipart body and the boundary it was built with."""

    boundary: str
    body: bytes

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __len__(self) -> int:
        return len(self.body)


class _BufferWriter:
    """Async sink collecting what MultipartWriter.write() emits."""

    def __init__(self) -> None:
        self.buffer = bytearray()

    async def write(self, chunk: bytes) -> None:
        self.buffer.extend(chunk)


def generate_boundary() -> str:
    """Random boundary token (32 hex characters)."""
    return secrets.token_hex(16)


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_CONTENT_TYPE


async def _read_source(part: StreamPart) -> tuple[bytes, Optional[str], str]:
    """Read a stream part fully. Returns (data, filename, content_type)."""
    source = part.source
    filename = part.filename
    content_type = part.content_type

    if isinstance(source, FilePart):
        path = Path(source.path)
        # Disk I/O off the event loop
        data = await asyncio.to_thread(path.read_bytes)
        filename = filename or path.name
        content_type = content_type or source.content_type or guess_content_type(path.name)
    elif isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif hasattr(source, "read"):
        data = await asyncio.to_thread(source.read)
        if isinstance(data, str):
            raise TypeError(f"Stream part '{part.name}' must be opened in binary mode")
    else:
        raise TypeError(
            f"Unsupported source for stream part '{part.name}': {type(source).__name__}"
        )

    return data, filename, content_type or DEFAULT_CONTENT_TYPE


async def encode_multipart(
    fields: Sequence[tuple[str, str]] = (),
    streams: Sequence[StreamPart] = (),
    boundary: Optional[str] = None,
) -> MultipartBody:
    """
    Encode text fields and byte streams as multipart/form-data.

    Args:
        fields: Ordered (name, value) text fields
        streams: Ordered binary parts
        boundary: Fixed boundary (None = random)

    Returns:
        MultipartBody with boundary and encoded bytes

    Raises:
        TypeError: If a stream source is not bytes, a binary file or a FilePart
        OSError: If a FilePart cannot be read

    Example:
        body = await encode_multipart(
            fields=[("pod_name", "photos"), ("dir_path", "/")],
            streams=[StreamPart("files", FilePart(Path("cat.jpg")))],
        )
        headers = {"Content-Type": body.content_type}
    """
    boundary = boundary or generate_boundary()
    writer = aiohttp.MultipartWriter("form-data", boundary=boundary)

    for name, value in fields:
        part = payload.StringPayload(str(value))
        part.set_content_disposition("form-data", name=name)
        writer.append_payload(part)

    for stream in streams:
        data, filename, content_type = await _read_source(stream)
        part = payload.BytesPayload(data, content_type=content_type)
        if filename is not None:
            part.set_content_disposition("form-data", name=stream.name, filename=filename)
        else:
            part.set_content_disposition("form-data", name=stream.name)
        writer.append_payload(part)

    sink = _BufferWriter()
    await writer.write(sink)
    return MultipartBody(boundary=boundary, body=bytes(sink.buffer))


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "FilePart",
    "StreamPart",
    "MultipartBody",
    "encode_multipart",
    "generate_boundary",
    "guess_content_type",
]

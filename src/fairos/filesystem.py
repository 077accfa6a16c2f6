"""
Directory and file operations.

Uploads and downloads travel as multipart/form-data through the
transport's multipart path. Downloads return the raw body bytes and are
never JSON-decoded.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional, Union

from fairos_core.errors import DecodeFailedError
from fairos_core.http import COMPRESSION_HEADER, FilePart, StreamPart, encode_multipart

from fairos.base import BaseClient
from fairos.blocksize import BlockSize, Megabytes
from fairos.schemas import (
    DirListResponse,
    DirStatResponse,
    FileReceiveInfoResponse,
    FileReceiveResponse,
    FileShareResponse,
    FileStatResponse,
    FileUploadResponse,
    PresentResponse,
)

logger = logging.getLogger(__name__)

DOMAIN = "filesystem"

DEFAULT_BLOCK_SIZE = Megabytes(1)


class Compression(Enum):
    GZIP = "gzip"
    SNAPPY = "snappy"

    @classmethod
    def from_wire(cls, value: str) -> Optional["Compression"]:
        """Empty string means uncompressed."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError as e:
            raise DecodeFailedError(
                f"Unknown compression in file metadata: {value!r}", cause=e
            ) from e


@dataclass(frozen=True)
class DirEntry:
    name: str
    content_type: str
    creation_time: int
    modification_time: int
    access_time: int


@dataclass(frozen=True)
class FileEntry:
    name: str
    content_type: str
    size: int
    block_size: BlockSize
    creation_time: int
    modification_time: int
    access_time: int


@dataclass(frozen=True)
class DirInfo:
    pod: str
    path: str
    name: str
    creation_time: int
    modification_time: int
    access_time: int
    no_of_dirs: int
    no_of_files: int


@dataclass(frozen=True)
class FileBlock:
    name: str
    reference: str
    size: int
    compressed_size: int


@dataclass(frozen=True)
class FileInfo:
    """
    Metadata of a stored file.

    content_type and compression are None when the service reports them empty.
    """

    pod: str
    path: str
    name: str
    content_type: Optional[str]
    size: int
    block_size: BlockSize
    compression: Optional[Compression]
    creation_time: int
    modification_time: int
    access_time: int
    blocks: list[FileBlock] = field(default_factory=list)


@dataclass(frozen=True)
class SharedFileInfo:
    pod: str
    name: str
    content_type: Optional[str]
    size: int
    block_size: BlockSize
    no_of_blocks: int
    compression: Optional[Compression]
    sender: str
    receiver: str
    shared_time: int


class FileSystemOperations(BaseClient):
    # -------------------------------------------------------------------------
    # Directories
    # -------------------------------------------------------------------------

    async def mkdir(self, username: str, pod: str, path: str) -> None:
        await self._post(
            DOMAIN, "/dir/mkdir", {"pod_name": pod, "dir_path": path}, username=username
        )

    async def rmdir(self, username: str, pod: str, path: str) -> None:
        await self._delete(
            DOMAIN, "/dir/rmdir", {"pod_name": pod, "dir_path": path}, username=username
        )

    async def ls(self, username: str, pod: str, path: str) -> tuple[list[DirEntry], list[FileEntry]]:
        """List a directory. Returns (directories, files) in service order."""
        res = await self._get(
            DOMAIN,
            "/dir/ls",
            {"pod_name": pod, "dir_path": path},
            username=username,
            model=DirListResponse,
        )
        dirs = [
            DirEntry(
                name=entry.name,
                content_type=entry.content_type,
                creation_time=entry.creation_time,
                modification_time=entry.modification_time,
                access_time=entry.access_time,
            )
            for entry in res.dirs or []
        ]
        files = [
            FileEntry(
                name=entry.name,
                content_type=entry.content_type,
                size=entry.size,
                block_size=BlockSize.from_bytes(entry.block_size),
                creation_time=entry.creation_time,
                modification_time=entry.modification_time,
                access_time=entry.access_time,
            )
            for entry in res.files or []
        ]
        return dirs, files

    async def dir_exists(self, username: str, pod: str, path: str) -> bool:
        res = await self._get(
            DOMAIN,
            "/dir/present",
            {"pod_name": pod, "dir_path": path},
            username=username,
            model=PresentResponse,
        )
        return res.present

    async def dir_info(self, username: str, pod: str, path: str) -> DirInfo:
        res = await self._get(
            DOMAIN,
            "/dir/stat",
            {"pod_name": pod, "dir_path": path},
            username=username,
            model=DirStatResponse,
        )
        return DirInfo(
            pod=res.pod_name,
            path=res.dir_path,
            name=res.dir_name,
            creation_time=res.creation_time,
            modification_time=res.modification_time,
            access_time=res.access_time,
            no_of_dirs=res.no_of_directories,
            no_of_files=res.no_of_files,
        )

    # -------------------------------------------------------------------------
    # Upload / download
    # -------------------------------------------------------------------------

    async def _upload_stream(
        self,
        username: str,
        pod: str,
        dir: str,
        stream: StreamPart,
        block_size: BlockSize,
        compression: Optional[Compression],
    ) -> str:
        multipart = await encode_multipart(
            fields=[("pod_name", pod), ("dir_path", dir), ("block_size", str(block_size))],
            streams=[stream],
        )
        headers = {COMPRESSION_HEADER: compression.value} if compression is not None else None
        res = await self._upload(
            DOMAIN,
            "/file/upload",
            multipart,
            username,
            model=FileUploadResponse,
            headers=headers,
            pod=pod,
        )
        names = res.file_names()
        if not names:
            raise DecodeFailedError(
                "Upload response listed no files", context={"api_endpoint": "/file/upload"}
            )
        logger.info(
            "File uploaded",
            extra={"pod": pod, "file_name": names[0], "bytes_sent": len(multipart)},
        )
        return names[0]

    async def upload_buffer(
        self,
        username: str,
        pod: str,
        dir: str,
        file_name: str,
        buffer: Union[bytes, bytearray, BinaryIO],
        content_type: str = "application/octet-stream",
        block_size: BlockSize = DEFAULT_BLOCK_SIZE,
        compression: Optional[Compression] = None,
    ) -> str:
        """
        Upload in-memory bytes or an open binary file as dir/file_name.

        Args:
            username: Session owner
            pod: Target pod
            dir: Target directory path
            file_name: Name to store the file under
            buffer: bytes or binary file object (read fully)
            content_type: MIME type recorded for the file
            block_size: Storage block size
            compression: Optional server-side compression

        Returns:
            Stored file name as reported by the service
        """
        stream = StreamPart("files", buffer, filename=file_name, content_type=content_type)
        return await self._upload_stream(username, pod, dir, stream, block_size, compression)

    async def upload_file(
        self,
        username: str,
        pod: str,
        dir: str,
        local_path: Union[str, Path],
        block_size: BlockSize = DEFAULT_BLOCK_SIZE,
        compression: Optional[Compression] = None,
    ) -> str:
        """Upload a local file. Name and MIME type come from the path."""
        stream = StreamPart("files", FilePart(Path(local_path)))
        return await self._upload_stream(username, pod, dir, stream, block_size, compression)

    async def download_buffer(self, username: str, pod: str, path: str) -> bytes:
        multipart = await encode_multipart(fields=[("pod_name", pod), ("file_path", path)])
        return await self._download(DOMAIN, "/file/download", multipart, username, pod=pod)

    async def download_file(
        self,
        username: str,
        pod: str,
        path: str,
        local_path: Union[str, Path],
    ) -> None:
        data = await self.download_buffer(username, pod, path)
        await asyncio.to_thread(Path(local_path).write_bytes, data)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    async def share_file(self, username: str, pod: str, path: str, receiver: str) -> str:
        """Share a file with another user's address. Returns the sharing reference."""
        res, _ = await self._post(
            DOMAIN,
            "/file/share",
            {"pod_name": pod, "file_path": path, "dest_user": receiver},
            username=username,
            model=FileShareResponse,
        )
        return res.file_sharing_reference

    async def rm(self, username: str, pod: str, path: str) -> None:
        await self._delete(
            DOMAIN, "/file/delete", {"pod_name": pod, "file_path": path}, username=username
        )

    async def file_info(self, username: str, pod: str, path: str) -> FileInfo:
        res = await self._get(
            DOMAIN,
            "/file/stat",
            {"pod_name": pod, "file_path": path},
            username=username,
            model=FileStatResponse,
        )
        return FileInfo(
            pod=res.pod_name,
            path=res.file_path,
            name=res.file_name,
            content_type=res.content_type or None,
            size=res.file_size,
            block_size=BlockSize.from_bytes(res.block_size),
            compression=Compression.from_wire(res.compression),
            creation_time=res.creation_time,
            modification_time=res.modification_time,
            access_time=res.access_time,
            blocks=[
                FileBlock(
                    name=block.name,
                    reference=block.reference,
                    size=block.size,
                    compressed_size=block.compressed_size,
                )
                for block in res.blocks or []
            ],
        )

    async def receive_shared_file(self, username: str, pod: str, reference: str, dir: str) -> str:
        """Accept a shared file into dir. Returns the received file name."""
        res = await self._get(
            DOMAIN,
            "/file/receive",
            {"pod_name": pod, "sharing_ref": reference, "dir_path": dir},
            username=username,
            model=FileReceiveResponse,
        )
        return res.file_name

    async def shared_file_info(self, username: str, pod: str, reference: str) -> SharedFileInfo:
        res = await self._get(
            DOMAIN,
            "/file/receiveinfo",
            {"pod_name": pod, "sharing_ref": reference},
            username=username,
            model=FileReceiveInfoResponse,
        )
        return SharedFileInfo(
            pod=res.pod_name,
            name=res.name,
            content_type=res.content_type or None,
            size=res.size,
            block_size=BlockSize.from_bytes(res.block_size),
            no_of_blocks=res.number_of_blocks,
            compression=Compression.from_wire(res.compression),
            sender=res.source_address,
            receiver=res.dest_address,
            shared_time=res.shared_time,
        )


__all__ = [
    "Compression",
    "DirEntry",
    "DirInfo",
    "FileBlock",
    "FileEntry",
    "FileInfo",
    "FileSystemOperations",
    "SharedFileInfo",
]

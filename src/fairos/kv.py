"""Key-value store operations, CSV loading and range seeks."""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from fairos_core.errors import DecodeFailedError
from fairos_core.http import FilePart, StreamPart, encode_multipart

from fairos.base import BaseClient
from fairos.schemas import (
    KvCountResponse,
    KvEntryResponse,
    KvListResponse,
    PresentResponse,
)
from fairos.seek import SEEK_PATH, KeyValueSeek

logger = logging.getLogger(__name__)

DOMAIN = "kv"


class IndexType(Enum):
    STR = "string"
    NUMBER = "number"


@dataclass(frozen=True)
class KeyValueStore:
    name: str
    indexes: list[str] = field(default_factory=list)


def decode_stored_value(encoded: str, endpoint: str = "") -> Any:
    """Decode a base64 "byte-string" value holding JSON."""
    try:
        return json.loads(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as e:
        raise DecodeFailedError(
            "Stored value is not base64-encoded JSON",
            cause=e,
            context={"api_endpoint": endpoint},
        ) from e


class KeyValueOperations(BaseClient):
    async def create_kv_store(
        self,
        username: str,
        pod: str,
        name: str,
        index_type: IndexType = IndexType.STR,
    ) -> None:
        await self._post(
            DOMAIN,
            "/kv/new",
            {"pod_name": pod, "table_name": name, "indexType": index_type.value},
            username=username,
        )

    async def open_kv_store(self, username: str, pod: str, name: str) -> None:
        await self._post(
            DOMAIN, "/kv/open", {"pod_name": pod, "table_name": name}, username=username
        )

    async def delete_kv_store(self, username: str, pod: str, name: str) -> None:
        await self._delete(
            DOMAIN, "/kv/delete", {"pod_name": pod, "table_name": name}, username=username
        )

    async def list_kv_stores(self, username: str, pod: str) -> list[KeyValueStore]:
        """Stores in the pod, sorted by name."""
        res = await self._get(
            DOMAIN, "/kv/ls", {"pod_name": pod}, username=username, model=KvListResponse
        )
        stores = [
            KeyValueStore(name=table.table_name, indexes=list(table.indexes))
            for table in res.tables
        ]
        return sorted(stores, key=lambda store: store.name)

    async def put_kv_pair(self, username: str, pod: str, store: str, key: str, value: Any) -> None:
        """Store value under key. The value is JSON-serialized."""
        await self._post(
            DOMAIN,
            "/kv/entry/put",
            {"pod_name": pod, "table_name": store, "key": key, "value": json.dumps(value)},
            username=username,
        )

    async def get_kv_pair(self, username: str, pod: str, store: str, key: str) -> Any:
        """
        Fetch and JSON-decode the value stored under key.

        Raises:
            KeyValueError: Rejected by the service (e.g. unknown key)
            DecodeFailedError: Stored value is not base64-encoded JSON
        """
        res = await self._get(
            DOMAIN,
            "/kv/entry/get",
            {"pod_name": pod, "table_name": store, "key": key, "format": "byte-string"},
            username=username,
            model=KvEntryResponse,
        )
        return decode_stored_value(res.values, "/kv/entry/get")

    async def delete_kv_pair(self, username: str, pod: str, store: str, key: str) -> None:
        await self._delete(
            DOMAIN,
            "/kv/entry/del",
            {"pod_name": pod, "table_name": store, "key": key},
            username=username,
        )

    async def count_kv_pairs(self, username: str, pod: str, store: str) -> int:
        res, _ = await self._post(
            DOMAIN,
            "/kv/count",
            {"pod_name": pod, "table_name": store},
            username=username,
            model=KvCountResponse,
        )
        return res.count

    async def kv_pair_exists(self, username: str, pod: str, store: str, key: str) -> bool:
        res = await self._get(
            DOMAIN,
            "/kv/present",
            {"pod_name": pod, "table_name": store, "key": key},
            username=username,
            model=PresentResponse,
        )
        return res.present

    async def _load_csv(
        self,
        username: str,
        pod: str,
        store: str,
        stream: StreamPart,
        memory: bool,
    ) -> None:
        fields = [("pod_name", pod), ("table_name", store)]
        if memory:
            fields.append(("memory", "true"))
        multipart = await encode_multipart(fields=fields, streams=[stream])
        await self._upload(DOMAIN, "/kv/loadcsv", multipart, username, pod=pod)

    async def load_csv_buffer(
        self,
        username: str,
        pod: str,
        store: str,
        buffer: Union[bytes, bytearray, BinaryIO],
        memory: bool = False,
    ) -> None:
        """Bulk-load CSV rows (first column is the key) from bytes or a binary file."""
        stream = StreamPart("csv", buffer, filename="data.csv", content_type="text/csv")
        await self._load_csv(username, pod, store, stream, memory)

    async def load_csv_file(
        self,
        username: str,
        pod: str,
        store: str,
        local_path: Union[str, Path],
        memory: bool = False,
    ) -> None:
        stream = StreamPart("csv", FilePart(Path(local_path)))
        await self._load_csv(username, pod, store, stream, memory)

    async def kv_seek(
        self,
        username: str,
        pod: str,
        store: str,
        start_key: str,
        end_key: Optional[str] = None,
        limit: Optional[int] = None,
        strict: bool = False,
    ) -> KeyValueSeek:
        """
        Position a server-side cursor and return a lazy stream over it.

        Args:
            username: Session owner
            pod: Pod containing the store
            store: Key-value store name
            start_key: First key prefix of the range
            end_key: Last key prefix (None = open-ended)
            limit: Maximum pairs to yield (None = until exhausted)
            strict: Raise unexpected rejections during iteration

        Returns:
            KeyValueSeek yielding (key, value) pairs

        Raises:
            KeyValueError: Cursor setup rejected
            TransportUnreachableError: Service unreachable during setup
        """
        await self._post(
            DOMAIN,
            SEEK_PATH,
            {
                "pod_name": pod,
                "table_name": store,
                "start_prefix": start_key,
                "end_prefix": end_key,
                "limit": limit,
            },
            username=username,
        )
        logger.debug(
            "Seek cursor positioned",
            extra={"pod": pod, "table": store, "limit": limit},
        )
        return KeyValueSeek(
            self.transport,
            self.sessions,
            username,
            pod,
            store,
            limit=limit,
            strict=strict,
        )


__all__ = [
    "IndexType",
    "KeyValueOperations",
    "KeyValueStore",
    "decode_stored_value",
]

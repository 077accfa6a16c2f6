"""
Document database operations.

Documents are JSON objects. put_document() injects a generated `id`;
get_document() and find_documents() decode the base64 JSON the service
returns. Filters are fairos.expr expressions compiled into the `expr`
query value.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Optional, Sequence, Union

from fairos_core.errors import DecodeFailedError
from fairos_core.http import FilePart, MessageResponse, StreamPart, encode_multipart

from fairos.base import BaseClient
from fairos.expr import All, Expr, compile_expr
from fairos.kv import decode_stored_value
from fairos.schemas import DocEntryResponse, DocFindResponse, DocListResponse

logger = logging.getLogger(__name__)

DOMAIN = "document"


class FieldType(Enum):
    """Indexed field type: wire name used at creation, numeric code reported by /doc/ls."""

    STR = ("string", 2)
    NUMBER = ("number", 3)
    MAP = ("map", 4)

    def __init__(self, wire_name: str, code: int):
        self.wire_name = wire_name
        self.code = code

    @classmethod
    def from_code(cls, code: int) -> "FieldType":
        for member in cls:
            if member.code == code:
                return member
        raise DecodeFailedError(
            f"Unknown document field type code: {code}",
            context={"api_endpoint": "/doc/ls"},
        )


@dataclass(frozen=True)
class DocumentDatabase:
    name: str
    fields: list[tuple[str, FieldType]] = field(default_factory=list)


def build_index_spec(fields: Sequence[tuple[str, FieldType]]) -> str:
    """Render indexed fields as the `si` string: "name=string,age=number"."""
    return ",".join(f"{name}={field_type.wire_name}" for name, field_type in fields)


class DocumentOperations(BaseClient):
    async def create_doc_database(
        self,
        username: str,
        pod: str,
        name: str,
        fields: Sequence[tuple[str, FieldType]] = (),
        mutable: bool = True,
    ) -> None:
        """
        Create a document database.

        Args:
            username: Session owner
            pod: Pod to create it in
            name: Database (table) name
            fields: Indexed fields as (name, FieldType) pairs
            mutable: Whether documents may be changed after insertion
        """
        await self._post(
            DOMAIN,
            "/doc/new",
            {
                "pod_name": pod,
                "table_name": name,
                "si": build_index_spec(fields),
                "mutable": mutable,
            },
            username=username,
        )

    async def open_doc_database(self, username: str, pod: str, name: str) -> None:
        await self._post(
            DOMAIN, "/doc/open", {"pod_name": pod, "table_name": name}, username=username
        )

    async def delete_doc_database(self, username: str, pod: str, name: str) -> None:
        await self._delete(
            DOMAIN, "/doc/delete", {"pod_name": pod, "table_name": name}, username=username
        )

    async def list_doc_databases(self, username: str, pod: str) -> list[DocumentDatabase]:
        """Databases sorted by name, each with its indexed fields sorted by name."""
        res = await self._get(
            DOMAIN, "/doc/ls", {"pod_name": pod}, username=username, model=DocListResponse
        )
        databases = [
            DocumentDatabase(
                name=table.table_name,
                fields=sorted(
                    ((prop.name, FieldType.from_code(prop.field_type)) for prop in table.indexes),
                    key=lambda pair: pair[0],
                ),
            )
            for table in res.tables
        ]
        return sorted(databases, key=lambda db: db.name)

    async def put_document(
        self,
        username: str,
        pod: str,
        database: str,
        doc: Mapping[str, Any],
    ) -> str:
        """Insert a document under a new random id. Returns the id."""
        if not isinstance(doc, Mapping):
            raise TypeError(f"Document must be a mapping, got {type(doc).__name__}")
        doc_id = str(uuid.uuid4())
        payload = {**doc, "id": doc_id}
        await self._post(
            DOMAIN,
            "/doc/entry/put",
            {"pod_name": pod, "table_name": database, "doc": json.dumps(payload)},
            username=username,
        )
        return doc_id

    async def get_document(self, username: str, pod: str, database: str, id: str) -> Any:
        res = await self._get(
            DOMAIN,
            "/doc/entry/get",
            {"pod_name": pod, "table_name": database, "id": id},
            username=username,
            model=DocEntryResponse,
        )
        return decode_stored_value(res.doc, "/doc/entry/get")

    async def find_documents(
        self,
        username: str,
        pod: str,
        database: str,
        expr: Expr,
        limit: Optional[int] = None,
    ) -> list[Any]:
        """
        Documents matching expr.

        Raises:
            UnsupportedExpressionError: expr uses And, Or or a Map value
            DocumentError: Rejected by the service
        """
        query = {"pod_name": pod, "table_name": database, "expr": compile_expr(expr)}
        if limit is not None:
            query["limit"] = str(limit)
        res = await self._get(
            DOMAIN, "/doc/find", query, username=username, model=DocFindResponse
        )
        return [decode_stored_value(doc, "/doc/find") for doc in res.docs]

    async def delete_document(self, username: str, pod: str, database: str, id: str) -> None:
        await self._delete(
            DOMAIN,
            "/doc/entry/del",
            {"pod_name": pod, "table_name": database, "id": id},
            username=username,
        )

    async def count_documents(
        self,
        username: str,
        pod: str,
        database: str,
        expr: Expr = All(),
    ) -> int:
        res, _ = await self._post(
            DOMAIN,
            "/doc/count",
            {"pod_name": pod, "table_name": database, "expr": compile_expr(expr)},
            username=username,
            model=MessageResponse,
        )
        # The count comes back as the message text
        try:
            return int(res.message)
        except ValueError as e:
            raise DecodeFailedError(
                f"Document count is not an integer: {res.message!r}",
                cause=e,
                context={"api_endpoint": "/doc/count"},
            ) from e

    async def _load_json(self, username: str, pod: str, database: str, stream: StreamPart) -> None:
        multipart = await encode_multipart(
            fields=[("pod_name", pod), ("table_name", database)],
            streams=[stream],
        )
        await self._upload(DOMAIN, "/doc/loadjson", multipart, username, pod=pod)

    async def load_json_buffer(
        self,
        username: str,
        pod: str,
        database: str,
        buffer: Union[bytes, bytearray, BinaryIO],
    ) -> None:
        stream = StreamPart("json", buffer, filename="data.json", content_type="application/json")
        await self._load_json(username, pod, database, stream)

    async def load_json_file(
        self,
        username: str,
        pod: str,
        database: str,
        local_path: Union[str, Path],
    ) -> None:
        stream = StreamPart("json", FilePart(Path(local_path)))
        await self._load_json(username, pod, database, stream)

    async def index_json(self, username: str, pod: str, database: str, file: str) -> None:
        """Index a JSON file already stored in the pod into the database."""
        await self._post(
            DOMAIN,
            "/doc/indexjson",
            {"pod_name": pod, "table_name": database, "file_name": file},
            username=username,
        )


__all__ = [
    "DocumentDatabase",
    "DocumentOperations",
    "FieldType",
    "build_index_spec",
]

"""Tests for document database operations."""

import json
import uuid

import pytest

from fairos import (
    All,
    And,
    DocumentDatabase,
    Eq,
    FairOSClient,
    FieldType,
    Gt,
    Gte,
    Number,
    Str,
)
from fairos.doc import build_index_spec
from fairos_core.errors import DecodeFailedError, DocumentError, UnsupportedExpressionError

from fakes import ScriptedTransport, message, ok, parse_form


@pytest.fixture
def scripted():
    transport = ScriptedTransport()
    client = FairOSClient(transport=transport)
    client.set_cookie("alice", "tok")
    return transport, client


async def _create_db(client):
    await client.create_doc_database(
        "alice", "pod", "people", [("s", FieldType.STR), ("n", FieldType.NUMBER)]
    )


class TestFieldType:

    def test_wire_names_and_codes(self):
        assert FieldType.STR.wire_name == "string"
        assert FieldType.NUMBER.code == 3
        assert FieldType.from_code(4) is FieldType.MAP

    def test_unknown_code(self):
        with pytest.raises(DecodeFailedError):
            FieldType.from_code(99)

    def test_index_spec(self):
        spec = build_index_spec([("name", FieldType.STR), ("age", FieldType.NUMBER), ("meta", FieldType.MAP)])
        assert spec == "name=string,age=number,meta=map"
        assert build_index_spec([]) == ""


class TestDatabases:

    @pytest.mark.asyncio
    async def test_create_body(self, alice, fake_service):
        await _create_db(alice)

        body = json.loads(fake_service.requests[-1].body)
        assert body == {"pod_name": "pod", "table_name": "people", "si": "s=string,n=number", "mutable": True}

    @pytest.mark.asyncio
    async def test_list_sorted_with_sorted_fields(self, alice):
        await alice.create_doc_database("alice", "pod", "zoo", [("z", FieldType.MAP), ("a", FieldType.STR)])
        await _create_db(alice)

        databases = await alice.list_doc_databases("alice", "pod")

        assert databases == [
            DocumentDatabase(name="people", fields=[("n", FieldType.NUMBER), ("s", FieldType.STR)]),
            DocumentDatabase(name="zoo", fields=[("a", FieldType.STR), ("z", FieldType.MAP)]),
        ]

    @pytest.mark.asyncio
    async def test_open_missing(self, alice):
        with pytest.raises(DocumentError):
            await alice.open_doc_database("alice", "pod", "missing")

    @pytest.mark.asyncio
    async def test_delete(self, scripted):
        transport, client = scripted
        transport.queue(message("document db deleted"))

        await client.delete_doc_database("alice", "pod", "people")

        assert (transport.requests[0].method, transport.requests[0].path) == ("DELETE", "/doc/delete")


class TestDocuments:

    @pytest.mark.asyncio
    async def test_put_injects_id(self, alice):
        await _create_db(alice)

        doc_id = await alice.put_document("alice", "pod", "people", {"s": "a", "n": 1})

        uuid.UUID(doc_id)
        assert await alice.get_document("alice", "pod", "people", doc_id) == {"s": "a", "n": 1, "id": doc_id}

    @pytest.mark.asyncio
    async def test_put_requires_mapping(self, alice):
        with pytest.raises(TypeError):
            await alice.put_document("alice", "pod", "people", ["not", "a", "mapping"])

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, alice):
        await _create_db(alice)
        first = await alice.put_document("alice", "pod", "people", {"s": "a"})
        second = await alice.put_document("alice", "pod", "people", {"s": "a"})
        assert first != second

    @pytest.mark.asyncio
    async def test_delete_document(self, alice):
        await _create_db(alice)
        doc_id = await alice.put_document("alice", "pod", "people", {"s": "a"})

        await alice.delete_document("alice", "pod", "people", doc_id)

        with pytest.raises(DocumentError):
            await alice.get_document("alice", "pod", "people", doc_id)


class TestFind:

    @pytest.mark.asyncio
    async def test_find_greater_than(self, alice):
        client = await self._populate(alice)

        docs = await client.find_documents("alice", "pod", "people", Gt("n", Number(9)))

        assert sorted(doc["n"] for doc in docs) == [10, 20]

    @pytest.mark.asyncio
    async def test_find_string_equality(self, alice):
        client = await self._populate(alice)

        docs = await client.find_documents("alice", "pod", "people", Eq("s", Str("a")))

        assert sorted(doc["n"] for doc in docs) == [5, 10]

    @pytest.mark.asyncio
    async def test_find_with_limit(self, alice, fake_service):
        client = await self._populate(alice)

        docs = await client.find_documents("alice", "pod", "people", Gte("n", Number(5)), limit=2)

        assert len(docs) == 2
        assert dict(fake_service.requests[-1].query)["limit"] == "2"

    @pytest.mark.asyncio
    async def test_find_sends_encoded_expression(self, alice, fake_service):
        client = await self._populate(alice)

        await client.find_documents("alice", "pod", "people", Eq("s", Str("a")))

        assert dict(fake_service.requests[-1].query)["expr"] == "s=%22a%22"

    @pytest.mark.asyncio
    async def test_unsupported_expression_sends_nothing(self, scripted):
        transport, client = scripted

        with pytest.raises(UnsupportedExpressionError):
            await client.find_documents("alice", "pod", "people", And(Eq("s", Str("a")), Eq("n", Number(1))))
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_find_null_docs(self, scripted):
        transport, client = scripted
        transport.queue(ok({"docs": None}))

        assert await client.find_documents("alice", "pod", "people", All()) == []

    @pytest.mark.asyncio
    async def test_count(self, alice):
        client = await self._populate(alice)

        assert await client.count_documents("alice", "pod", "people") == 4
        assert await client.count_documents("alice", "pod", "people", Eq("s", Str("a"))) == 2

    @pytest.mark.asyncio
    async def test_count_not_a_number(self, scripted):
        transport, client = scripted
        transport.queue(message("lots"))

        with pytest.raises(DecodeFailedError):
            await client.count_documents("alice", "pod", "people")

    @staticmethod
    async def _populate(client):
        await _create_db(client)
        for s, n in [("a", 5), ("a", 10), ("b", 20), ("c", 9)]:
            await client.put_document("alice", "pod", "people", {"s": s, "n": n})
        return client


class TestJsonLoading:

    @pytest.mark.asyncio
    async def test_load_buffer(self, scripted):
        transport, client = scripted
        transport.queue(message("json file loaded"))

        await client.load_json_buffer("alice", "pod", "people", b'[{"s": "a"}]')

        request = transport.requests[0]
        assert request.path == "/doc/loadjson"
        form = parse_form(request.content_type, request.body)
        assert list(form) == ["pod_name", "table_name", "json"]
        assert form["json"] == ("data.json", b'[{"s": "a"}]')

    @pytest.mark.asyncio
    async def test_load_file(self, scripted, tmp_path):
        transport, client = scripted
        transport.queue(message("json file loaded"))
        path = tmp_path / "people.json"
        path.write_bytes(b"[]")

        await client.load_json_file("alice", "pod", "people", path)

        form = parse_form(transport.requests[0].content_type, transport.requests[0].body)
        assert form["json"] == ("people.json", b"[]")

    @pytest.mark.asyncio
    async def test_index_json(self, scripted):
        transport, client = scripted
        transport.queue(message("indexing started"))

        await client.index_json("alice", "pod", "people", "/people.json")

        assert json.loads(transport.requests[0].body) == {
            "pod_name": "pod",
            "table_name": "people",
            "file_name": "/people.json",
        }

"""Tests for the key-value seek stream."""

import asyncio
import logging

import pytest
import pytest_asyncio

from fairos import FairOSClient
from fairos.seek import KeyValueSeek, is_end_of_cursor
from fairos_core.errors import KeyValueError, SessionNotFoundError, TransportUnreachableError
from fairos_core.http import RemoteFailure, Success, TransportFailure
from fairos_core.logging import get_log_context
from fairos_core.session import InMemorySessionStore

from fakes import ScriptedTransport, ok


@pytest_asyncio.fixture
async def seeded_client(fake_transport):
    client = FairOSClient(transport=fake_transport)
    await client.signup("alice", "pw")
    await client.create_pod("alice", "pod", "pw")
    await client.create_kv_store("alice", "pod", "table")
    for key, value in [("abc", "A"), ("bcd", "B"), ("cde", "C"), ("def", "D")]:
        await client.put_kv_pair("alice", "pod", "table", key, value)
    return client


def _scripted_seek(*outcomes, limit=None, strict=False):
    transport = ScriptedTransport(*outcomes)
    store = InMemorySessionStore({"alice": "t"})
    return transport, KeyValueSeek(transport, store, "alice", "pod", "table", limit=limit, strict=strict)


class TestEndOfCursor:

    @pytest.mark.parametrize(
        "message",
        ["kv seek next: no next element", "No More Elements", "seek: no next element in table"],
    )
    def test_end_phrases(self, message):
        assert is_end_of_cursor(message)

    @pytest.mark.parametrize("message", ["", "kv seek next: seek not performed", "pod does not exist"])
    def test_other_messages(self, message):
        assert not is_end_of_cursor(message)


class TestSeekAgainstService:

    @pytest.mark.asyncio
    async def test_range_from_start_key(self, seeded_client):
        stream = await seeded_client.kv_seek("alice", "pod", "table", "bcd")
        pairs = await stream.collect()

        assert [key for key, _ in pairs] == ["bcd", "cde", "def"]
        assert [value for _, value in pairs] == ['"B"', '"C"', '"D"']
        assert stream.items_yielded == 3

    @pytest.mark.asyncio
    async def test_end_key_bounds_range(self, seeded_client):
        stream = await seeded_client.kv_seek("alice", "pod", "table", "abc", end_key="cde")
        keys = [key async for key, _ in stream]

        assert keys == ["abc", "bcd", "cde"]

    @pytest.mark.asyncio
    async def test_limit_stops_without_extra_request(self, seeded_client, fake_service):
        stream = await seeded_client.kv_seek("alice", "pod", "table", "abc", limit=2)
        before = len(fake_service.requests)
        pairs = await stream.collect()

        assert [key for key, _ in pairs] == ["abc", "bcd"]
        assert len(fake_service.requests) - before == 2
        assert stream.size_hint() == (0, 2)

    @pytest.mark.asyncio
    async def test_empty_range(self, seeded_client):
        stream = await seeded_client.kv_seek("alice", "pod", "table", "zzz")
        assert await stream.collect() == []

    @pytest.mark.asyncio
    async def test_setup_rejection_is_domain_error(self, seeded_client):
        with pytest.raises(KeyValueError, match="table does not exist"):
            await seeded_client.kv_seek("alice", "pod", "missing", "a")

    @pytest.mark.asyncio
    async def test_context_manager_closes_stream(self, seeded_client):
        async with await seeded_client.kv_seek("alice", "pod", "table", "abc") as stream:
            first = await stream.__anext__()

        assert first[0] == "abc"
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_stream_is_single_pass(self, seeded_client):
        stream = await seeded_client.kv_seek("alice", "pod", "table", "cde")
        assert len(await stream.collect()) == 2
        assert await stream.collect() == []


class TestSeekTermination:

    @pytest.mark.asyncio
    async def test_no_content_ends_stream(self):
        transport, stream = _scripted_seek(ok({"keys": ["a"], "values": "1"}), Success(body=b"", status=204))

        assert await stream.collect() == [("a", "1")]
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_empty_keys_end_stream(self):
        _, stream = _scripted_seek(ok({"keys": [], "values": ""}))
        assert await stream.collect() == []

    @pytest.mark.asyncio
    async def test_unexpected_rejection_ends_with_warning(self, caplog):
        _, stream = _scripted_seek(
            ok({"keys": ["a"], "values": "1"}),
            RemoteFailure(status=400, message="kv seek next: seek not performed", code=400),
        )

        with caplog.at_level(logging.WARNING, logger="fairos.seek"):
            pairs = await stream.collect()

        assert pairs == [("a", "1")]
        assert any("unexpected rejection" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_strict_raises_rejection(self):
        _, stream = _scripted_seek(
            RemoteFailure(status=400, message="kv seek next: seek not performed", code=400),
            strict=True,
        )

        with pytest.raises(KeyValueError) as exc_info:
            await stream.collect()
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_strict_still_ends_on_end_phrase(self):
        _, stream = _scripted_seek(
            RemoteFailure(status=400, message="kv seek next: no next element", code=400),
            strict=True,
        )
        assert await stream.collect() == []

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        _, stream = _scripted_seek(TransportFailure("Connection error: refused"))

        with pytest.raises(TransportUnreachableError):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_missing_session_raises(self):
        transport = ScriptedTransport()
        stream = KeyValueSeek(transport, InMemorySessionStore(), "alice", "pod", "table")

        with pytest.raises(SessionNotFoundError):
            await stream.__anext__()
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_sends_cookie_and_query(self):
        transport, stream = _scripted_seek(ok({"keys": ["a"], "values": "1"}), limit=1)
        await stream.collect()

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.path == "/kv/seek/next"
        assert dict(request.query) == {"pod_name": "pod", "table_name": "table"}
        assert request.token == "t"

    @pytest.mark.asyncio
    async def test_pulls_carry_log_context(self):
        transport, stream = _scripted_seek(ok({"keys": ["a"], "values": "1"}), limit=1)
        await stream.collect()

        assert transport.log_contexts[0]["username"] == "alice"
        assert transport.log_contexts[0]["pod"] == "pod"
        assert get_log_context()["username"] == ""

    @pytest.mark.asyncio
    async def test_zero_limit_issues_no_request(self):
        transport, stream = _scripted_seek(limit=0)
        assert await stream.collect() == []
        assert transport.requests == []

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            _scripted_seek(limit=-1)

    @pytest.mark.asyncio
    async def test_concurrent_pull_rejected(self):
        gate = asyncio.Event()

        class SlowTransport(ScriptedTransport):
            async def execute(self, request):
                await gate.wait()
                return await super().execute(request)

        transport = SlowTransport(ok({"keys": ["a"], "values": "1"}))
        stream = KeyValueSeek(transport, InMemorySessionStore({"alice": "t"}), "alice", "pod", "table")

        first = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            await stream.__anext__()
        gate.set()
        assert await first == ("a", "1")

"""
Lazy range scan over a key-value store.

The service keeps the cursor: POST /kv/seek positions it and every
GET /kv/seek/next returns the next pair. KeyValueSeek wraps the "next"
calls in an async iterator so callers can write:

    async with await client.kv_seek(user, pod, "table", "bcd") as pairs:
        async for key, value in pairs:
            ...

The stream is single-pass and cannot be restarted. It issues exactly one
"next" request per pull and must not be polled from two tasks at once; the
underlying async generator rejects a concurrent pull with RuntimeError.

Termination:
    - 204 No Content, or a rejection carrying the service's end-of-cursor
      message, ends the stream
    - a success body with no keys ends the stream
    - after `limit` pairs the stream stops without another request
    - any other rejection ends the stream with a WARNING log, or is raised
      when strict=True
    - transport failures always raise
"""

import logging
from typing import AsyncIterator, Optional

from fairos_core.errors import (
    RemoteRejectedError,
    SessionNotFoundError,
    TransportUnreachableError,
    map_remote_error,
)
from fairos_core.http import RemoteFailure, Request, Transport, TransportFailure
from fairos_core.http.transport import decode_model
from fairos_core.logging import log_context, log_with_context
from fairos_core.types import SessionStore

from fairos.schemas import KvEntryResponse

logger = logging.getLogger(__name__)

SEEK_PATH = "/kv/seek"
SEEK_NEXT_PATH = "/kv/seek/next"

# Rejection messages the service uses when the cursor is exhausted
END_OF_CURSOR_PHRASES = (
    "no next element",
    "no more elements",
)


def is_end_of_cursor(message: str) -> bool:
    lowered = (message or "").lower()
    return any(phrase in lowered for phrase in END_OF_CURSOR_PHRASES)


class KeyValueSeek:
    """
    Async iterator of (key, value) pairs from a positioned seek cursor.

    Created by KeyValueOperations.kv_seek() after the cursor has been set
    up server-side; constructing it directly issues no request.

    Args:
        transport: Transport used for the "next" calls
        session_store: Store holding the username's session token
        username: Account owning the cursor
        pod: Pod containing the store
        store: Key-value store (table) name
        limit: Maximum number of pairs to yield (None = until exhausted)
        strict: Raise unexpected rejections instead of ending the stream
    """

    def __init__(
        self,
        transport: Transport,
        session_store: SessionStore,
        username: str,
        pod: str,
        store: str,
        limit: Optional[int] = None,
        strict: bool = False,
    ):
        if limit is not None and limit < 0:
            raise ValueError(f"Seek limit must be non-negative, got {limit}")
        self._transport = transport
        self._session_store = session_store
        self.username = username
        self.pod = pod
        self.store = store
        self.limit = limit
        self.strict = strict
        self.items_yielded = 0
        self._iterator = self._generate()

    def __aiter__(self) -> "KeyValueSeek":
        return self

    async def __anext__(self) -> tuple[str, str]:
        with log_context(username=self.username, pod=self.pod):
            return await self._iterator.__anext__()

    async def __aenter__(self) -> "KeyValueSeek":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the stream. Further pulls raise StopAsyncIteration."""
        await self._iterator.aclose()

    def size_hint(self) -> tuple[int, Optional[int]]:
        """(lower, upper) bound on the number of pairs; upper is None when unbounded."""
        return 0, self.limit

    async def collect(self) -> list[tuple[str, str]]:
        """Drain the stream into a list."""
        return [pair async for pair in self]

    async def _generate(self) -> AsyncIterator[tuple[str, str]]:
        while self.limit is None or self.items_yielded < self.limit:
            pair = await self._fetch_next()
            if pair is None:
                break
            self.items_yielded += 1
            yield pair

        log_with_context(
            logger,
            logging.DEBUG,
            "Seek stream finished",
            pod=self.pod,
            table=self.store,
            limit=self.limit,
            items_yielded=self.items_yielded,
        )

    async def _fetch_next(self) -> Optional[tuple[str, str]]:
        token = self._session_store.cookie(self.username)
        if token is None:
            raise SessionNotFoundError(self.username)

        request = Request.build(
            "GET",
            SEEK_NEXT_PATH,
            query={"pod_name": self.pod, "table_name": self.store},
            token=token,
        )
        outcome = await self._transport.execute(request)

        if isinstance(outcome, TransportFailure):
            raise TransportUnreachableError(
                outcome.message,
                cause=outcome.cause if isinstance(outcome.cause, Exception) else None,
                context={"api_endpoint": SEEK_NEXT_PATH, "table": self.store},
            ) from outcome.cause

        if isinstance(outcome, RemoteFailure):
            return self._handle_rejection(outcome)

        if outcome.status == 204:
            return None

        entry = decode_model(KvEntryResponse, outcome.body, SEEK_NEXT_PATH)
        if not entry.keys:
            return None
        return entry.keys[0], entry.values

    def _handle_rejection(self, failure: RemoteFailure) -> None:
        if is_end_of_cursor(failure.message):
            return None

        error = map_remote_error(
            "kv",
            RemoteRejectedError(
                failure.message,
                code=failure.code,
                status=failure.status,
                context={"api_endpoint": SEEK_NEXT_PATH, "table": self.store},
            ),
        )
        if self.strict:
            raise error

        log_with_context(
            logger,
            logging.WARNING,
            "Seek stream ended by unexpected rejection",
            pod=self.pod,
            table=self.store,
            http_status=failure.status,
            error_code=failure.code,
            error_message=failure.message,
            items_yielded=self.items_yielded,
        )
        return None


__all__ = [
    "END_OF_CURSOR_PHRASES",
    "KeyValueSeek",
    "SEEK_NEXT_PATH",
    "SEEK_PATH",
    "is_end_of_cursor",
]

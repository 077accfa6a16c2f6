"""FairOS client assembling every operation group over one Transport."""

import logging
from typing import Optional

from fairos_core.http import Transport
from fairos_core.http.transport import (
    DEFAULT_BASE_URL,
    DEFAULT_COOKIE_NAME,
    DEFAULT_TIMEOUT_SECONDS,
    IDLE_TIMEOUT_SECONDS,
    MAX_IDLE_PER_HOST,
)
from fairos_core.types import SessionStore

from fairos.config import ClientConfig
from fairos.doc import DocumentOperations
from fairos.filesystem import FileSystemOperations
from fairos.kv import KeyValueOperations
from fairos.pod import PodOperations
from fairos.user import UserOperations

logger = logging.getLogger(__name__)


class FairOSClient(
    UserOperations,
    PodOperations,
    FileSystemOperations,
    KeyValueOperations,
    DocumentOperations,
):
    """
    Async client for a FairOS-dfs server.

    Holds one pooled HTTP session and one session store. Sessions are keyed
    by username, so one client can act for several users; calls that change
    a user's session (signup, login, import, logout, delete_user) must not
    run concurrently for the same username.

    Example:
        async with FairOSClient("http://localhost:9090/v1") as client:
            await client.login("alice", "secret")
            await client.create_pod("alice", "photos", "secret")
            name = await client.upload_file("alice", "photos", "/", "cat.jpg")

    Args:
        base_url: Service root including the API version
        cookie_name: Session cookie name
        session_store: Token store (default: in-memory, private to this client)
        transport: Pre-built Transport (overrides the connection arguments)
        timeout_seconds: Total timeout per request
        max_idle_per_host: Connection pool limit per host
        idle_timeout_seconds: Keep-alive timeout for idle connections
        verify_ssl: Verify TLS certificates
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        session_store: Optional[SessionStore] = None,
        transport: Optional[Transport] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_idle_per_host: int = MAX_IDLE_PER_HOST,
        idle_timeout_seconds: int = IDLE_TIMEOUT_SECONDS,
        verify_ssl: bool = True,
    ):
        if transport is None:
            transport = Transport(
                base_url=base_url,
                cookie_name=cookie_name,
                timeout_seconds=timeout_seconds,
                max_idle_per_host=max_idle_per_host,
                idle_timeout_seconds=idle_timeout_seconds,
                verify_ssl=verify_ssl,
            )
        super().__init__(transport, session_store)

        logger.info(
            "FairOSClient initialized",
            extra={"base_url": self.transport.base_url, "cookie_name": self.transport.cookie_name},
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        session_store: Optional[SessionStore] = None,
    ) -> "FairOSClient":
        return cls(
            base_url=config.base_url,
            cookie_name=config.cookie_name,
            session_store=session_store,
            timeout_seconds=config.timeout_seconds,
            max_idle_per_host=config.max_idle_per_host,
            idle_timeout_seconds=config.idle_timeout_seconds,
            verify_ssl=config.verify_ssl,
        )

    async def __aenter__(self) -> "FairOSClient":
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    @property
    def base_url(self) -> str:
        return self.transport.base_url


__all__ = ["FairOSClient"]

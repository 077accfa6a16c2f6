"""
Shared plumbing for the FairOS operation groups.

BaseClient owns the Transport and the session store. The operation mixins
(user, pod, filesystem, kv, doc) call the helpers below, which look up the
caller's session token, run one HTTP exchange and translate rejections
into the domain's error classes.
"""

import logging
from typing import Any, ContextManager, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from fairos_core.errors import FairOSError, SessionNotFoundError, map_remote_error
from fairos_core.http import MessageResponse, MultipartBody, Transport
from fairos_core.logging import log_context
from fairos_core.session import InMemorySessionStore
from fairos_core.types import SessionStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseClient:
    """
    Transport and session state shared by every operation group.

    Args:
        transport: Configured Transport
        session_store: Per-username token store (default: a fresh in-memory store)
    """

    def __init__(self, transport: Transport, session_store: Optional[SessionStore] = None):
        self.transport = transport
        self.sessions: SessionStore = (
            session_store if session_store is not None else InMemorySessionStore()
        )

    # -------------------------------------------------------------------------
    # Session store
    # -------------------------------------------------------------------------

    def cookie(self, username: str) -> Optional[str]:
        return self.sessions.cookie(username)

    def set_cookie(self, username: str, token: str) -> None:
        self.sessions.set_cookie(username, token)

    def remove_cookie(self, username: str) -> None:
        self.sessions.remove_cookie(username)

    def require_token(self, username: str) -> str:
        """
        Session token for username.

        Raises:
            SessionNotFoundError: No session is stored for username
        """
        token = self.sessions.cookie(username)
        if token is None:
            raise SessionNotFoundError(username)
        return token

    def _token_for(self, username: Optional[str]) -> Optional[str]:
        return None if username is None else self.require_token(username)

    # -------------------------------------------------------------------------
    # Request helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _request_scope(
        username: Optional[str],
        pod: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ContextManager[None]:
        """Log context for one call. Falls back to user_name/pod_name in params."""
        params = params or {}
        if username is None and isinstance(params.get("user_name"), str):
            username = params["user_name"]
        if pod is None and isinstance(params.get("pod_name"), str):
            pod = params["pod_name"]
        return log_context(username=username, pod=pod)

    async def _get(
        self,
        domain: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        username: Optional[str] = None,
        model: Type[ModelT] = MessageResponse,
    ) -> ModelT:
        """GET with domain error mapping. username=None sends no session cookie."""
        token = self._token_for(username)
        with self._request_scope(username, params=query):
            try:
                return await self.transport.get(path, query=query, token=token, model=model)
            except FairOSError as e:
                _raise_mapped(domain, e)

    async def _post(
        self,
        domain: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        username: Optional[str] = None,
        model: Type[ModelT] = MessageResponse,
    ) -> tuple[ModelT, Optional[str]]:
        """POST JSON with domain error mapping. Returns (decoded body, refreshed token)."""
        token = self._token_for(username)
        with self._request_scope(username, params=body):
            try:
                return await self.transport.post(path, json_body=body, token=token, model=model)
            except FairOSError as e:
                _raise_mapped(domain, e)

    async def _delete(
        self,
        domain: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        username: Optional[str] = None,
        model: Type[ModelT] = MessageResponse,
    ) -> ModelT:
        token = self._token_for(username)
        with self._request_scope(username, params=body):
            try:
                return await self.transport.delete(path, json_body=body, token=token, model=model)
            except FairOSError as e:
                _raise_mapped(domain, e)

    async def _upload(
        self,
        domain: str,
        path: str,
        multipart: MultipartBody,
        username: str,
        model: Type[ModelT] = MessageResponse,
        headers: Optional[Mapping[str, str]] = None,
        pod: Optional[str] = None,
    ) -> ModelT:
        token = self.require_token(username)
        with self._request_scope(username, pod):
            logger.debug(
                "Uploading multipart body",
                extra={"api_endpoint": path, "bytes_sent": len(multipart)},
            )
            try:
                return await self.transport.post_multipart(
                    path, multipart, token=token, model=model, headers=headers
                )
            except FairOSError as e:
                _raise_mapped(domain, e)

    async def _download(
        self,
        domain: str,
        path: str,
        multipart: MultipartBody,
        username: str,
        pod: Optional[str] = None,
    ) -> bytes:
        token = self.require_token(username)
        with self._request_scope(username, pod):
            try:
                return await self.transport.download_multipart(path, multipart, token=token)
            except FairOSError as e:
                _raise_mapped(domain, e)


def _raise_mapped(domain: str, error: FairOSError) -> None:
    mapped = map_remote_error(domain, error)
    if mapped is error:
        raise error
    raise mapped from error


__all__ = ["BaseClient"]

"""
Async HTTP transport for the FairOS REST API using aiohttp.

One pooled, keep-alive ClientSession per Transport. Every exchange goes
through execute(), which never raises for network or remote failures and
instead returns a classified outcome (Success, TransportFailure,
RemoteFailure). The get/post/delete helpers turn those outcomes into typed
exceptions and decode success bodies with pydantic models.

Query strings are assembled verbatim: key=value pairs joined by '&' with
no percent-encoding. Callers pre-encode values (see fairos.expr). The URL
is handed to aiohttp as already-encoded so it is not rewritten on the way
out; the server contract depends on this.
"""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError
from yarl import URL

from fairos_core.errors.exceptions import (
    DecodeFailedError,
    RemoteRejectedError,
    TransportUnreachableError,
)
from fairos_core.http.models import (
    MessageResponse,
    Outcome,
    RemoteFailure,
    Request,
    ResponseMode,
    Success,
    TransportFailure,
)
from fairos_core.http.multipart import MultipartBody
from fairos_core.logging.context import get_log_context

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:9090/v1"
DEFAULT_COOKIE_NAME = "fairOS-dfs"
DEFAULT_TIMEOUT_SECONDS = 60
MAX_IDLE_PER_HOST = 20
IDLE_TIMEOUT_SECONDS = 6000
SLOW_REQUEST_SECONDS = 2.0
COMPRESSION_HEADER = "fairOS-dfs-Compression"

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_status_ok(status: int) -> bool:
    return 200 <= status < 300


def make_query_string(query: Sequence[tuple[str, str]]) -> str:
    """Join pairs as key=value with '&'. Values are NOT percent-encoded."""
    return "&".join(f"{key}={value}" for key, value in query)


def extract_session_cookie(headers: Mapping[str, str], cookie_name: str) -> Optional[str]:
    """
    Find the session token in Set-Cookie response headers.

    Only the leading name=value pair of each header is considered; cookie
    attributes (Path, Expires, ...) are ignored.

    Args:
        headers: Response headers (multi-valued mapping from aiohttp)
        cookie_name: Name of the session cookie

    Returns:
        Token value, or None if no Set-Cookie header carries a non-empty
        session cookie (a clearing header such as "name=; Max-Age=0" is not a token)
    """
    if hasattr(headers, "getall"):
        raw_cookies = headers.getall("Set-Cookie", [])
    else:
        raw_cookies = [headers["Set-Cookie"]] if "Set-Cookie" in headers else []

    for raw in raw_cookies:
        name, sep, value = raw.split(";", 1)[0].partition("=")
        if sep and name.strip() == cookie_name and value.strip():
            return value.strip()
    return None


def decode_error_body(status: int, body: bytes) -> RemoteFailure:
    """
    Decode a non-2xx body as the {message, code} envelope.

    Bodies that are not the envelope (proxies, HTML error pages) keep the
    status and use the truncated body text as the message.
    """
    try:
        envelope = MessageResponse.model_validate_json(body)
        return RemoteFailure(status=status, message=envelope.message, code=envelope.code)
    except ValidationError:
        text = body.decode("utf-8", errors="replace").strip()
        if len(text) > 500:
            text = text[:500] + "..."
        return RemoteFailure(status=status, message=text or f"HTTP {status}", code=None)


def decode_model(model: Type[ModelT], body: bytes, endpoint: str = "") -> ModelT:
    """
    Validate a success body against its expected model.

    Raises:
        DecodeFailedError: If the body is not valid JSON or does not match the model
    """
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        preview = body[:500].decode("utf-8", errors="replace")
        raise DecodeFailedError(
            f"Response from {endpoint or 'service'} did not match {model.__name__}",
            cause=e,
            context={"api_endpoint": endpoint, "response_body": preview},
        ) from e


class Transport:
    """Async executor for FairOS HTTP calls with cookie-based session auth."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_idle_per_host: int = MAX_IDLE_PER_HOST,
        idle_timeout_seconds: int = IDLE_TIMEOUT_SECONDS,
        verify_ssl: bool = True,
    ):
        self.base_url = base_url.rstrip("/") if base_url else ""

        if not self.base_url:
            raise ValueError("Transport requires 'base_url'")

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Transport base_url must start with http:// or https://, got: {self.base_url!r}"
            )

        if not cookie_name:
            raise ValueError("Transport requires 'cookie_name'")

        self.cookie_name = cookie_name
        self.timeout_seconds = timeout_seconds
        self.max_idle_per_host = max_idle_per_host
        self.idle_timeout_seconds = idle_timeout_seconds
        self.verify_ssl = verify_ssl

        self._session: aiohttp.ClientSession | None = None
        self._closed = False

        logger.debug(
            "Transport initialized",
            extra={
                "base_url": self.base_url,
                "timeout_seconds": self.timeout_seconds,
                "max_idle_per_host": self.max_idle_per_host,
                "idle_timeout_seconds": self.idle_timeout_seconds,
            },
        )

    async def __aenter__(self) -> "Transport":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> None:
        if self._closed:
            raise RuntimeError("Transport is closed, cannot create new session")
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit_per_host=self.max_idle_per_host,
                keepalive_timeout=self.idle_timeout_seconds,
                ssl=self.verify_ssl,
            )
            # Sessions are tracked per username by the client, never by a shared jar
            self._session = aiohttp.ClientSession(
                connector=connector,
                cookie_jar=aiohttp.DummyCookieJar(),
            )

    async def close(self) -> None:
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def _get_context_ids() -> dict[str, str]:
        """Non-empty log context values (username, pod, ...) for log enrichment."""
        return {k: v for k, v in get_log_context().items() if v}

    def make_url(self, path: str, query: Sequence[tuple[str, str]] = ()) -> URL:
        """Base URL + path + raw query string, marked as already encoded."""
        query_string = make_query_string(query)
        raw = f"{self.base_url}{path}"
        if query_string:
            raw = f"{raw}?{query_string}"
        return URL(raw, encoded=True)

    def build_headers(self, request: Request) -> dict[str, str]:
        headers: dict[str, str] = {}
        if request.mode is ResponseMode.JSON:
            headers["Accept"] = "application/json"
        if request.content_type:
            headers["Content-Type"] = request.content_type
        if request.token is not None:
            headers["Cookie"] = f"{self.cookie_name}={request.token}"
        headers.update(dict(request.headers))
        return headers

    async def execute(self, request: Request) -> Outcome:
        """
        Perform one exchange and classify the result.

        Never raises for network failures or non-2xx statuses.

        Returns:
            Success with raw body (and refreshed session token for POST),
            TransportFailure if the service could not be reached, or
            RemoteFailure with the decoded {message, code} envelope
        """
        await self._ensure_session()

        url = self.make_url(request.path, request.query)
        headers = self.build_headers(request)
        ctx = self._get_context_ids()

        logger.debug(
            "API request starting",
            extra={
                **ctx,
                "api_endpoint": request.path,
                "api_method": request.method,
                "api_url": str(url),
                "has_session": request.token is not None,
                "bytes_sent": len(request.body) if request.body else 0,
            },
        )

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        try:
            if self._session is None:
                raise RuntimeError("HTTP session not initialized - call _ensure_session() first")
            async with self._session.request(
                request.method,
                url,
                data=request.body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                body = await response.read()
                duration = loop.time() - start_time

                if not is_status_ok(response.status):
                    failure = decode_error_body(response.status, body)
                    logger.warning(
                        "API request rejected",
                        extra={
                            **ctx,
                            "api_endpoint": request.path,
                            "api_method": request.method,
                            "api_url": str(url),
                            "http_status": response.status,
                            "error_message": failure.message,
                            "error_code": failure.code,
                            "duration_seconds": round(duration, 3),
                        },
                    )
                    return failure

                # Only POST responses may refresh the session
                token = None
                if request.method == "POST":
                    token = extract_session_cookie(response.headers, self.cookie_name)

                slow = duration > SLOW_REQUEST_SECONDS
                logger.log(
                    logging.INFO if slow else logging.DEBUG,
                    "Slow API request" if slow else "API request succeeded",
                    extra={
                        **ctx,
                        "api_endpoint": request.path,
                        "api_method": request.method,
                        "http_status": response.status,
                        "bytes_received": len(body),
                        "session_refreshed": token is not None,
                        "duration_seconds": round(duration, 3),
                    },
                )

                return Success(
                    body=body,
                    status=response.status,
                    session_token=token,
                    content_type=response.headers.get("Content-Type"),
                )

        except asyncio.TimeoutError as e:
            duration = loop.time() - start_time
            logger.warning(
                "API request timeout",
                extra={
                    **ctx,
                    "api_endpoint": request.path,
                    "api_method": request.method,
                    "api_url": str(url),
                    "timeout_seconds": self.timeout_seconds,
                    "duration_seconds": round(duration, 3),
                    "error_category": "transient",
                },
            )
            return TransportFailure(
                f"Timeout after {self.timeout_seconds}s: {request.path}", cause=e
            )

        except aiohttp.ClientError as e:
            duration = loop.time() - start_time
            logger.error(
                "API connection error",
                exc_info=True,
                extra={
                    **ctx,
                    "api_endpoint": request.path,
                    "api_method": request.method,
                    "api_url": str(url),
                    "duration_seconds": round(duration, 3),
                    "error_category": "transient",
                },
            )
            return TransportFailure(f"Connection error: {e}", cause=e)

    async def send(
        self,
        request: Request,
        model: Optional[Type[ModelT]] = None,
    ) -> tuple[Any, Optional[str]]:
        """
        Execute a request and raise on failure.

        Returns:
            (decoded body, refreshed session token). The body is the model
            instance in JSON mode (None if model is None) or raw bytes in
            BINARY mode.

        Raises:
            TransportUnreachableError: Service could not be reached
            RemoteRejectedError: Non-2xx status
            DecodeFailedError: Success body did not match model
        """
        outcome = await self.execute(request)

        if isinstance(outcome, TransportFailure):
            raise TransportUnreachableError(
                outcome.message,
                cause=outcome.cause if isinstance(outcome.cause, Exception) else None,
                context={"api_endpoint": request.path, "api_method": request.method},
            ) from outcome.cause

        if isinstance(outcome, RemoteFailure):
            raise RemoteRejectedError(
                outcome.message,
                code=outcome.code,
                status=outcome.status,
                context={"api_endpoint": request.path, "api_method": request.method},
            )

        if request.mode is ResponseMode.BINARY:
            return outcome.body, outcome.session_token

        if model is None:
            return None, outcome.session_token

        return decode_model(model, outcome.body, request.path), outcome.session_token

    async def get(
        self,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        token: Optional[str] = None,
        model: Optional[Type[ModelT]] = None,
    ) -> Any:
        result, _ = await self.send(Request.build("GET", path, query=query, token=token), model)
        return result

    async def post(
        self,
        path: str,
        json_body: Optional[Mapping[str, Any]] = None,
        token: Optional[str] = None,
        model: Optional[Type[ModelT]] = None,
    ) -> tuple[Any, Optional[str]]:
        """POST a JSON body. Returns (decoded body, refreshed session token)."""
        body = json.dumps(json_body).encode("utf-8") if json_body is not None else b""
        request = Request.build(
            "POST",
            path,
            body=body,
            content_type="application/json",
            token=token,
        )
        return await self.send(request, model)

    async def delete(
        self,
        path: str,
        json_body: Optional[Mapping[str, Any]] = None,
        token: Optional[str] = None,
        model: Optional[Type[ModelT]] = None,
    ) -> Any:
        body = json.dumps(json_body).encode("utf-8") if json_body is not None else b""
        request = Request.build(
            "DELETE",
            path,
            body=body,
            content_type="application/json",
            token=token,
        )
        result, _ = await self.send(request, model)
        return result

    async def post_multipart(
        self,
        path: str,
        multipart: MultipartBody,
        token: Optional[str] = None,
        model: Optional[Type[ModelT]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """POST an encoded multipart body and decode the JSON response."""
        request = Request.build(
            "POST",
            path,
            body=multipart.body,
            content_type=multipart.content_type,
            token=token,
            headers=headers,
        )
        result, _ = await self.send(request, model)
        return result

    async def download_multipart(
        self,
        path: str,
        multipart: MultipartBody,
        token: Optional[str] = None,
    ) -> bytes:
        """POST a multipart request and return the raw binary response body."""
        request = Request.build(
            "POST",
            path,
            body=multipart.body,
            content_type=multipart.content_type,
            token=token,
            mode=ResponseMode.BINARY,
        )
        result, _ = await self.send(request)
        return result


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_COOKIE_NAME",
    "COMPRESSION_HEADER",
    "Transport",
    "decode_error_body",
    "decode_model",
    "extract_session_cookie",
    "is_status_ok",
    "make_query_string",
]

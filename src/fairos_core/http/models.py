"""
Data models for transport operations.

Defines the input/output models for the Transport interface:
- Request: what to send (immutable, built per call)
- Success / TransportFailure / RemoteFailure: classified outcome of one exchange
- MessageResponse: the service's {message, code} envelope
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from pydantic import BaseModel


class ResponseMode(Enum):
    """
    How a successful response body is consumed.

    JSON: body is validated against an expected response model
    BINARY: body is returned untouched as bytes (file download)
    """

    JSON = "json"
    BINARY = "binary"


class MessageResponse(BaseModel):
    """Generic envelope: every error body and many success bodies."""

    message: str
    code: int = 0


@dataclass(frozen=True)
class Request:
    """
    One HTTP exchange against the service.

    Attributes:
        method: GET, POST or DELETE
        path: Path appended to the base URL (e.g. "/kv/seek/next")
        query: Ordered key/value pairs; values must already be encoded
        body: Raw request body (JSON or multipart bytes)
        content_type: Content-Type of body (None when there is no body)
        token: Session token sent as the session cookie (None = unauthenticated)
        headers: Extra request headers
        mode: How the success body is consumed
    """

    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    body: Optional[bytes] = None
    content_type: Optional[str] = None
    token: Optional[str] = None
    headers: tuple[tuple[str, str], ...] = ()
    mode: ResponseMode = ResponseMode.JSON

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        content_type: Optional[str] = None,
        token: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        mode: ResponseMode = ResponseMode.JSON,
    ) -> "Request":
        """Build a Request from plain mappings, preserving their order."""
        method = method.upper()
        if method not in ("GET", "POST", "DELETE"):
            raise ValueError(f"Unsupported HTTP method: {method}")
        return cls(
            method=method,
            path=path,
            query=tuple((str(k), str(v)) for k, v in (query or {}).items()),
            body=body,
            content_type=content_type,
            token=token,
            headers=tuple((headers or {}).items()),
            mode=mode,
        )


@dataclass(frozen=True)
class Success:
    """2xx response with its raw body and any refreshed session token."""

    body: bytes
    status: int = 200
    session_token: Optional[str] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class TransportFailure:
    """The service could not be reached (connect, DNS, timeout)."""

    message: str
    cause: Optional[BaseException] = field(default=None, compare=False)


@dataclass(frozen=True)
class RemoteFailure:
    """The service answered with a non-2xx status."""

    status: int
    message: str
    code: Optional[int] = None


Outcome = Union[Success, TransportFailure, RemoteFailure]


__all__ = [
    "ResponseMode",
    "MessageResponse",
    "Request",
    "Success",
    "TransportFailure",
    "RemoteFailure",
    "Outcome",
]

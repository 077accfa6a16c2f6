"""
HTTP transport layer.

Components:
    - Transport: pooled aiohttp executor with cookie session auth
    - Request / Outcome models
    - Multipart/form-data codec for binary transfer
"""

from fairos_core.http.models import (
    MessageResponse,
    Outcome,
    RemoteFailure,
    Request,
    ResponseMode,
    Success,
    TransportFailure,
)
from fairos_core.http.multipart import (
    FilePart,
    MultipartBody,
    StreamPart,
    encode_multipart,
    generate_boundary,
)
from fairos_core.http.transport import (
    COMPRESSION_HEADER,
    DEFAULT_BASE_URL,
    DEFAULT_COOKIE_NAME,
    Transport,
    make_query_string,
)

__all__ = [
    # Transport
    "Transport",
    "DEFAULT_BASE_URL",
    "DEFAULT_COOKIE_NAME",
    "COMPRESSION_HEADER",
    "make_query_string",
    # Models
    "ResponseMode",
    "MessageResponse",
    "Request",
    "Success",
    "TransportFailure",
    "RemoteFailure",
    "Outcome",
    # Multipart
    "FilePart",
    "StreamPart",
    "MultipartBody",
    "encode_multipart",
    "generate_boundary",
]

"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Optional, Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed on retry
                   (e.g., connection refused, timeouts, 5xx responses)
        AUTH: Session missing or rejected by the service (401)
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., 4xx rejections, malformed response bodies)
        UNKNOWN: Unclassified errors, may retry conservatively
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class SessionStore(Protocol):
    """
    Protocol for per-username session token storage.

    The client owns exactly one store. Implementations are not required to
    be safe for concurrent mutation; session-changing calls for the same
    username are expected to be serialized by the caller.
    """

    def cookie(self, username: str) -> Optional[str]:
        """
        Get the session token for a username.

        Args:
            username: Account name the token was issued for

        Returns:
            Session token, or None if no session is stored
        """
        ...

    def set_cookie(self, username: str, token: str) -> None:
        """Store a session token, replacing any previous one."""
        ...

    def remove_cookie(self, username: str) -> None:
        """Forget the session token for a username (no-op if absent)."""
        ...


__all__ = [
    "ErrorCategory",
    "SessionStore",
]

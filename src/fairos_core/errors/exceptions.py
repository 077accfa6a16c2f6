"""
Unified exception hierarchy for the FairOS client.

Provides typed exceptions with retry classification so callers can tell
"could not reach the server" apart from "the server rejected the request"
and from "the response did not have the expected shape".
"""

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from fairos_core.types import ErrorCategory


class FairOSError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Transport Errors (Transient)
# =============================================================================


class TransientError(FairOSError):
    """Base class for transient/retriable errors."""

    category = ErrorCategory.TRANSIENT


class TransportUnreachableError(TransientError):
    """Could not connect to, resolve, or hear back from the service."""

    pass


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(FairOSError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class DecodeFailedError(PermanentError):
    """Success response body did not match the expected shape (a contract defect)."""

    pass


class UnsupportedExpressionError(PermanentError):
    """Expression node the query compiler cannot express (And, Or, Map values)."""

    pass


class SessionNotFoundError(FairOSError):
    """No session token is stored for the username."""

    category = ErrorCategory.AUTH

    def __init__(self, username: str):
        super().__init__(f"No session for user '{username}'", context={"username": username})
        self.username = username


# =============================================================================
# Remote Rejections
# =============================================================================


class RemoteRejectedError(FairOSError):
    """
    Service answered with a non-2xx status and a {message, code} envelope.

    Category follows the HTTP status (5xx transient, 401 auth, other 4xx
    permanent).
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        status: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.code = code
        self.status = status
        if status is not None:
            self.category = classify_http_status(status)


# =============================================================================
# Domain-Specific Errors
# =============================================================================


class UserError(RemoteRejectedError):
    """User operation rejected by the service."""

    pass


class UsernameAlreadyExistsError(UserError):
    pass


class InvalidUsernameError(UserError):
    pass


class InvalidPasswordError(UserError):
    pass


class PodError(RemoteRejectedError):
    """Pod operation rejected by the service."""

    pass


class FileSystemError(RemoteRejectedError):
    """Directory or file operation rejected by the service."""

    pass


class KeyValueError(RemoteRejectedError):
    """Key-value store operation rejected by the service."""

    pass


class DocumentError(RemoteRejectedError):
    """Document database operation rejected by the service."""

    pass


# =============================================================================
# Error Classification Utilities
# =============================================================================


def is_retryable_error(exc: Exception) -> bool:
    """
    Check if exception should be retried.

    Retryable errors include:
    - Transport failures (connection refused, DNS, timeout)
    - 5xx rejections
    - Unknown errors (conservative retry)

    Non-retryable:
    - 4xx rejections, including domain errors such as invalid password
    - Decode failures and unsupported expressions (defects)
    - Missing sessions
    """
    if isinstance(exc, FairOSError):
        return exc.is_retryable

    category = classify_exception(exc)
    return category in (
        ErrorCategory.TRANSIENT,
        ErrorCategory.UNKNOWN,
    )


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT  # Rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Client errors, won't fix with retry

    if status_code >= 500:
        return ErrorCategory.TRANSIENT  # Server errors, may recover

    return ErrorCategory.UNKNOWN


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    # Already classified
    if isinstance(exc, FairOSError):
        return exc.category

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "connection aborted",
        "name resolution",
        "dns",
        "socket",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    default_class: type = FairOSError,
    context: dict | None = None,
) -> FairOSError:
    """Wrap a generic exception in appropriate FairOSError subclass."""
    if isinstance(exc, FairOSError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)
    context = context or {}
    context.setdefault("error_type", type(exc).__name__)

    if category == ErrorCategory.TRANSIENT:
        return TransportUnreachableError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.PERMANENT:
        return PermanentError(str(exc), cause=exc, context=context)

    return default_class(str(exc), cause=exc, context=context)

"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- FairOSError hierarchy for typed exceptions
- Classification utilities for retry decisions
- Remote message classifier mapping rejections to domain errors
"""

from fairos_core.errors.classifiers import (
    # Constants
    DOMAIN_ERRORS,
    MESSAGE_MAPPINGS,
    # Functions
    classify_remote_message,
    map_remote_error,
)
from fairos_core.errors.exceptions import (
    DecodeFailedError,
    DocumentError,
    # Enums
    ErrorCategory,
    # Base classes
    FairOSError,
    FileSystemError,
    InvalidPasswordError,
    InvalidUsernameError,
    KeyValueError,
    PermanentError,
    PodError,
    RemoteRejectedError,
    SessionNotFoundError,
    TransientError,
    TransportUnreachableError,
    UnsupportedExpressionError,
    UserError,
    UsernameAlreadyExistsError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    is_retryable_error,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "FairOSError",
    "TransientError",
    "PermanentError",
    # Transport / protocol errors
    "TransportUnreachableError",
    "RemoteRejectedError",
    "DecodeFailedError",
    "UnsupportedExpressionError",
    "SessionNotFoundError",
    # Domain errors
    "UserError",
    "UsernameAlreadyExistsError",
    "InvalidUsernameError",
    "InvalidPasswordError",
    "PodError",
    "FileSystemError",
    "KeyValueError",
    "DocumentError",
    # Classification utilities
    "is_retryable_error",
    "classify_http_status",
    "classify_exception",
    "wrap_exception",
    # Remote message classifiers
    "DOMAIN_ERRORS",
    "MESSAGE_MAPPINGS",
    "classify_remote_message",
    "map_remote_error",
]

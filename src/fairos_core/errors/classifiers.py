"""
Remote rejection classification for FairOS domains.

The service reports failures as an English message inside a
{message, code} envelope. Specific domain errors are recovered by matching
known phrases; anything unmatched collapses to the generic error for the
domain. Matching on message text breaks silently if the service rewords a
message, so every phrase lives in the table below and nowhere else.
"""

from fairos_core.errors.exceptions import (
    DocumentError,
    FairOSError,
    FileSystemError,
    InvalidPasswordError,
    InvalidUsernameError,
    KeyValueError,
    PodError,
    RemoteRejectedError,
    UserError,
    UsernameAlreadyExistsError,
)

# Generic error per domain
DOMAIN_ERRORS: dict[str, type[RemoteRejectedError]] = {
    "user": UserError,
    "pod": PodError,
    "filesystem": FileSystemError,
    "kv": KeyValueError,
    "document": DocumentError,
}

# Known message phrases per domain (matched case-insensitively as substrings)
MESSAGE_MAPPINGS: dict[str, dict[str, type[RemoteRejectedError]]] = {
    "user": {
        "user signup: user name already present": UsernameAlreadyExistsError,
        "user login: invalid user name": InvalidUsernameError,
        "user login: invalid password": InvalidPasswordError,
    },
    "pod": {},
    "filesystem": {},
    "kv": {},
    "document": {},
}


def classify_remote_message(domain: str, message: str) -> type[RemoteRejectedError]:
    """
    Pick the exception class for a rejection message within a domain.

    Args:
        domain: One of DOMAIN_ERRORS keys ("user", "pod", "filesystem", "kv", "document")
        message: Message string from the service's error envelope

    Returns:
        Most specific RemoteRejectedError subclass for the message

    Raises:
        ValueError: If domain is not known
    """
    if domain not in DOMAIN_ERRORS:
        raise ValueError(f"Unknown error domain: {domain!r}")

    lowered = (message or "").lower()
    for phrase, error_class in MESSAGE_MAPPINGS.get(domain, {}).items():
        if phrase in lowered:
            return error_class

    return DOMAIN_ERRORS[domain]


def map_remote_error(domain: str, error: FairOSError) -> FairOSError:
    """
    Translate a transport-level error into the domain taxonomy.

    RemoteRejectedError becomes the matching domain error, keeping message,
    code and status. Transport failures, decode failures and errors that are
    already domain errors are returned unchanged.
    """
    if not isinstance(error, RemoteRejectedError):
        return error
    if type(error) is not RemoteRejectedError:
        return error

    error_class = classify_remote_message(domain, error.message)
    context = {**error.context, "domain": domain}
    return error_class(
        error.message,
        code=error.code,
        status=error.status,
        cause=error.cause,
        context=context,
    )


__all__ = [
    "DOMAIN_ERRORS",
    "MESSAGE_MAPPINGS",
    "classify_remote_message",
    "map_remote_error",
]

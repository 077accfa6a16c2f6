"""Logging utility functions."""

import logging
from typing import Any

# Attribute names every LogRecord already carries; passing them in extra= raises KeyError
_RESERVED_LOG_KEYS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

MAX_ERROR_MESSAGE_LENGTH = 500


def _safe_extra(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in _RESERVED_LOG_KEYS}


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields (api_endpoint, pod, table, ...). Names that
                  clash with LogRecord attributes are dropped. exc_info is
                  passed through to the logger.

    Example:
        log_with_context(
            logger, logging.INFO, "Upload complete",
            api_endpoint="/file/upload",
            bytes_sent=len(body),
        )
    """
    exc_info = kwargs.pop("exc_info", None)
    logger.log(level, msg, exc_info=exc_info, extra=_safe_extra(kwargs))


def log_exception(
    logger: logging.Logger,
    exc: Exception,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log an exception with its classification.

    FairOSError subclasses contribute error_category; remote rejections also
    contribute the service's error_code. The exception text is truncated to
    MAX_ERROR_MESSAGE_LENGTH characters.
    """
    category = getattr(exc, "category", None)
    if category is not None and kwargs.get("error_category") is None:
        kwargs["error_category"] = getattr(category, "value", str(category))

    code = getattr(exc, "code", None)
    if code is not None:
        kwargs.setdefault("error_code", code)

    text = str(exc)
    if len(text) > MAX_ERROR_MESSAGE_LENGTH:
        text = text[:MAX_ERROR_MESSAGE_LENGTH] + "..."
    kwargs["error_message"] = text

    logger.log(
        level,
        msg,
        exc_info=exc if include_traceback else None,
        extra=_safe_extra(kwargs),
    )

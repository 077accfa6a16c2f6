"""Context variables for structured logging."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, Optional

_username: ContextVar[str] = ContextVar("username", default="")
_pod: ContextVar[str] = ContextVar("pod", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def set_log_context(
    username: Optional[str] = None,
    pod: Optional[str] = None,
    operation: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> None:
    if username is not None:
        _username.set(username)
    if pod is not None:
        _pod.set(pod)
    if operation is not None:
        _operation.set(operation)
    if trace_id is not None:
        _trace_id.set(trace_id)


def get_log_context() -> Dict[str, str]:
    return {
        "username": _username.get(),
        "pod": _pod.get(),
        "operation": _operation.get(),
        "trace_id": _trace_id.get(),
    }


def clear_log_context() -> None:
    _username.set("")
    _pod.set("")
    _operation.set("")
    _trace_id.set("")


@contextmanager
def log_context(
    username: Optional[str] = None,
    pod: Optional[str] = None,
    operation: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> Iterator[None]:
    """
    Set the given context values for the duration of a block.

    None leaves a value as it is. Previous values are restored on exit,
    also when the block raises.

    Example:
        with log_context(username="alice", pod="photos"):
            await transport.get("/pod/stat", ...)
    """
    values = {
        _username: username,
        _pod: pod,
        _operation: operation,
        _trace_id: trace_id,
    }
    tokens = [(var, var.set(value)) for var, value in values.items() if value is not None]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)

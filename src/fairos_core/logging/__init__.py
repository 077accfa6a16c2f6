"""
Structured logging module.

Provides JSON logging with context propagation (username, pod, operation).
"""

from fairos_core.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)
from fairos_core.logging.formatters import ConsoleFormatter, JSONFormatter
from fairos_core.logging.setup import get_logger, setup_logging
from fairos_core.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "log_context",
    # Utilities
    "log_with_context",
    "log_exception",
]

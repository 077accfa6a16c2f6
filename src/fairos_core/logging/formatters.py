"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any

from fairos_core.logging.context import get_log_context
from fairos_core.utils.json_serializers import json_serializer


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Sanitizes URLs to remove session tokens and passwords before logging.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Correlation
        "trace_id",
        "duration_ms",
        "duration_seconds",
        # HTTP
        "http_status",
        "http_method",
        "http_url",
        "api_endpoint",
        "api_method",
        "api_url",
        "content_type",
        "bytes_sent",
        "bytes_received",
        "has_session",
        "session_refreshed",
        # Errors
        "error_category",
        "error_message",
        "error_code",
        "error",
        "error_type",
        "is_retryable",
        "response_body",
        # Transport configuration
        "base_url",
        "timeout_seconds",
        "max_idle_per_host",
        "idle_timeout_seconds",
        # Seek stream
        "table",
        "limit",
        "items_yielded",
        # Multipart
        "part_count",
        "boundary",
        # Identifiers
        "domain",
        "username",
        "pod",
        "file_name",
    ]

    # Type mapping for numeric fields so they are never serialized as strings
    NUMERIC_FIELDS = {
        "duration_ms": float,
        "duration_seconds": float,
        "timeout_seconds": float,
        "http_status": int,
        "error_code": int,
        "bytes_sent": int,
        "bytes_received": int,
        "max_idle_per_host": int,
        "idle_timeout_seconds": int,
        "limit": int,
        "items_yielded": int,
        "part_count": int,
    }

    # Fields that contain URLs and should be sanitized
    URL_FIELDS = ["url", "http_url", "api_url", "base_url"]

    # Pattern to match sensitive query parameters
    SENSITIVE_PARAMS_PATTERN = re.compile(
        r"([?&])(token|password|cookie|mnemonic|sharing_ref|auth)=[^&]*",
        re.IGNORECASE,
    )

    def _sanitize_url(self, url: str) -> str:
        return self.SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", url)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.URL_FIELDS and isinstance(value, str):
            return self._sanitize_url(value)
        return value

    def _coerce(self, field: str, value: Any) -> tuple[bool, Any]:
        """Apply the declared numeric type. Returns (keep, value); unparseable numbers are dropped."""
        converter = self.NUMERIC_FIELDS.get(field)
        if converter is None:
            return True, value
        try:
            return True, converter(value)
        except (ValueError, TypeError):
            return False, None

    def _record_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        """Known extra fields present on the record, typed then sanitized."""
        found: dict[str, Any] = {}
        for name in self.EXTRA_FIELDS:
            raw = record.__dict__.get(name)
            if raw is None:
                continue
            keep, value = self._coerce(name, raw)
            if keep:
                found[name] = self._sanitize_value(name, value)
        return found

    @staticmethod
    def _exception_entry(record: logging.LogRecord, formatted: str) -> dict[str, Any]:
        exc_type, exc_value, _ = record.exc_info
        return {
            "type": getattr(exc_type, "__name__", None),
            "message": None if exc_value is None else str(exc_value),
            "stacktrace": formatted,
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line."""
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Context first so explicit extras on the record win
        entry.update({k: v for k, v in get_log_context().items() if v})

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            entry["file"] = f"{record.filename}:{record.lineno}"

        entry.update(self._record_fields(record))

        if record.exc_info:
            entry["exception"] = self._exception_entry(record, self.formatException(record.exc_info))

        return json.dumps(entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    One-line console output: time, level, who/where, endpoint, message.

        2026-01-05 10:12:03 - INFO - [alice@photos] [/file/upload] File uploaded

    Levels are colored only when stdout is a TTY.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno) if self._use_colors else None
        return f"{color}{record.levelname}{self.RESET}" if color else record.levelname

    @staticmethod
    def _scope(context: dict[str, Any]) -> str:
        """[user@pod], [user] or [@pod]; empty when neither is set."""
        username, pod = context.get("username"), context.get("pod")
        if not (username or pod):
            return ""
        return f"[{username or ''}{'@' + pod if pod else ''}]"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output with optional color coding."""
        context = get_log_context()
        trace_id = getattr(record, "trace_id", None) or context.get("trace_id")
        endpoint = getattr(record, "api_endpoint", None)

        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            self._level(record),
        ]
        tags = [
            self._scope(context),
            f"[{trace_id[:8]}]" if trace_id else "",
            f"[{endpoint}]" if endpoint else "",
        ]
        tagged = " ".join(tag for tag in tags if tag)
        message = f"{tagged} {record.getMessage()}" if tagged else record.getMessage()
        return " - ".join(parts + [message])

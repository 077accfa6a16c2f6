"""
Core library: service-agnostic infrastructure for the FairOS client.

Modules:
    errors   - Error classification and exception hierarchy
    logging  - Structured JSON logging with context variables
    http     - Async transport, request/outcome models, multipart codec
    session  - Per-username session token storage
    utils    - JSON serialization helpers

Design Principles:
    - No knowledge of FairOS endpoints or payload shapes
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory, SessionStore

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "SessionStore",
]

"""Structured audit log and diagnostic logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from .helpers import get_logger, setup_base_logger

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "get_logger",
    "sanitize_arguments",
    "setup_base_logger",
    "utc_timestamp",
]

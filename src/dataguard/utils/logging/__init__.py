"""JSONL logging utilities."""

from dataguard.utils.logging.iso_formatter import ISO8601Formatter
from dataguard.utils.logging.logger_setup import setup_jsonl_logger
from dataguard.utils.logging.logging_helpers import serialize_audit_event

__all__ = [
    "ISO8601Formatter",
    "serialize_audit_event",
    "setup_jsonl_logger",
]

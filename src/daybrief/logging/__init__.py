"""Logging utilities for daybrief."""

from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger
from daybrief.logging.sink import (
    FileRecordSink,
    MemoryRecordSink,
    NullRecordSink,
    RecordSink,
    render_exchange,
    safe_record,
)

__all__ = [
    "LogLevel",
    "LoggerProtocol",
    "StdOutLogger",
    "RecordSink",
    "FileRecordSink",
    "MemoryRecordSink",
    "NullRecordSink",
    "render_exchange",
    "safe_record",
]

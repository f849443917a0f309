"""Minimal leveled logger used across daybrief."""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Protocol, TextIO, runtime_checkable


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


@runtime_checkable
class LoggerProtocol(Protocol):
    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None: ...


class StdOutLogger:
    """Print messages at or above ``min_level``; warnings and errors go to stderr."""

    def __init__(self, min_level: LogLevel = LogLevel.INFO, stream: TextIO | None = None) -> None:
        self.min_level = min_level
        self._stream = stream

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        if level < self.min_level:
            return
        stream = self._stream
        if stream is None:
            stream = sys.stderr if level >= LogLevel.WARNING else sys.stdout
        print(message, file=stream, flush=True)

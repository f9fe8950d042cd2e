"""
Structured logging for the record registry.

Every line is one registry decision: an operation that committed, an
operation that was rejected, or an event sink that failed. Lines carry
record keys (digests), never the identifiers callers supplied.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels, ordered like the stdlib ``logging`` levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        return getattr(logging, self.name)


class StructuredLogger:
    """
    Writes one JSON object (or one human-readable line) per log call.

    Example:
        logger = StructuredLogger("record_registry", level="debug")
        logger.info("record_registered", "Record registered", key="9f86d0...", caller="alice")

        # {"level": "info", "event": "record_registered", "message": "Record registered",
        #  "timestamp": 1718000000.0, "logger_name": "record_registry",
        #  "thread_name": "MainThread", "key": "9f86d0...", "caller": "alice"}

    ``bind`` returns a child logger whose fields appear on every line,
    e.g. ``logger.bind(registry="primary")``.
    """

    def __init__(
        self,
        name: str = "record_registry",
        level: LogLevel | str = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ):
        self.name = name
        self._level = LogLevel(level)
        # None means stderr at write time, so a redirected stderr is honored
        self._output = output
        self._json_format = json_format
        self._fields: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def level(self) -> LogLevel:
        return self._level

    def bind(self, **fields: Any) -> "StructuredLogger":
        child = StructuredLogger(self.name, self._level, self._output, self._json_format)
        child._fields = {**self._fields, **fields}
        child._lock = self._lock
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.numeric >= self._level.numeric

    def debug(self, event: str, message: str = "", **data: Any) -> None:
        self._write(LogLevel.DEBUG, event, message, data)

    def info(self, event: str, message: str = "", **data: Any) -> None:
        self._write(LogLevel.INFO, event, message, data)

    def warning(self, event: str, message: str = "", **data: Any) -> None:
        self._write(LogLevel.WARNING, event, message, data)

    def error(self, event: str, message: str = "", **data: Any) -> None:
        self._write(LogLevel.ERROR, event, message, data)

    def critical(self, event: str, message: str = "", **data: Any) -> None:
        self._write(LogLevel.CRITICAL, event, message, data)

    # Registry events

    def operation_rejected(self, operation: str, error: Exception, **extra: Any) -> None:
        """A registry operation raised a typed error and changed nothing."""
        kind = getattr(error, "kind", None)
        self.warning(
            "operation_rejected",
            str(error),
            operation=operation,
            error_kind=kind.value if kind is not None else type(error).__name__,
            **extra,
        )

    def sink_failed(self, sink: Any, error: Exception, **extra: Any) -> None:
        """An event sink raised while receiving a committed event."""
        self.error(
            "event_sink_failed",
            str(error),
            sink=repr(sink),
            error_type=type(error).__name__,
            **extra,
        )

    # Output

    def _write(self, level: LogLevel, event: str, message: str, data: dict[str, Any]) -> None:
        if not self.is_enabled_for(level):
            return

        entry: dict[str, Any] = {
            "level": level.value,
            "event": event,
            "message": message,
            "timestamp": time.time(),
            "logger_name": self.name,
            "thread_name": threading.current_thread().name,
        }
        fields = {**self._fields, **data}

        if self._json_format:
            line = json.dumps({**entry, **fields}, default=str)
        else:
            line = self._human_line(entry, fields)

        with self._lock:
            print(line, file=self._output or sys.stderr)

    @staticmethod
    def _human_line(entry: dict[str, Any], fields: dict[str, Any]) -> str:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(entry["timestamp"]))
        line = f"[{stamp}] [{entry['level'].upper()}] [{entry['event']}]"
        if entry["message"]:
            line += f" {entry['message']}"
        if fields:
            line += " (" + " ".join(f"{k}={v}" for k, v in fields.items()) + ")"
        return line

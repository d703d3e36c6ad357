"""
DirSync logging.

Two layers live here: structured diagnostic logging through structlog, and
the run log, a line-oriented audit trail of every action a sync run takes.
"""

from __future__ import annotations

import logging
import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from rich.console import Console
from structlog.types import EventDict, WrappedLogger

from dirsync.core.errors import LogSinkError

if TYPE_CHECKING:
    from dirsync.core.config import LoggingConfig


_configured = False


def add_timestamp(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now().isoformat()
    return event_dict


def add_log_level(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add log level to event dict."""
    event_dict["level"] = method_name.upper()
    return event_dict


def setup_logging(config: LoggingConfig) -> None:
    """Configure structured diagnostic logging for DirSync."""
    global _configured

    if _configured:
        return

    handlers: list[logging.Handler] = []

    if config.console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        handlers.append(console_handler)
    else:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, config.level),
        handlers=handlers,
        format="%(message)s",
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        add_timestamp,
        add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.json_format:
        renderers: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or "dirsync")


class LogSink(ABC):
    """Destination for formatted run log lines."""

    @abstractmethod
    def write(self, level: str, line: str) -> None:
        """Write one complete line."""

    def close(self) -> None:
        """Release any underlying resources."""


class FileLogSink(LogSink):
    """Append-only file sink. Each line is flushed as soon as it is written."""

    def __init__(self, path: Path) -> None:
        self.path = path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
            self._handle: TextIO | None = os.fdopen(fd, "a", encoding="utf-8")
        except OSError as exc:
            raise LogSinkError(path, exc) from exc

    def write(self, level: str, line: str) -> None:
        if self._handle is None:
            raise LogSinkError(self.path, ValueError("log file is closed"))
        try:
            self._handle.write(line + "\n")
            self._handle.flush()
        except OSError as exc:
            raise LogSinkError(self.path, exc) from exc

    def close(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.close()
        except OSError as exc:
            raise LogSinkError(self.path, exc) from exc
        finally:
            self._handle = None


class ConsoleLogSink(LogSink):
    """Live console stream rendered with rich."""

    STYLES = {"INFO": None, "ERROR": "bold red"}

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def write(self, level: str, line: str) -> None:
        # Markup stays off: "[INFO]" would otherwise be parsed as a style tag.
        self.console.print(
            line, style=self.STYLES.get(level), markup=False, highlight=False, soft_wrap=True
        )


class MemoryLogSink(LogSink):
    """Keeps lines in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, level: str, line: str) -> None:
        self.lines.append(line)


@dataclass
class LogEntry:
    timestamp: datetime
    level: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)


class RunLogger:
    """
    Logger owned by a single sync run.

    Every event is rendered as ``[LEVEL] message`` and written to all sinks
    in order, and mirrored to the structlog diagnostic logger at debug level.
    """

    def __init__(
        self,
        sinks: list[LogSink],
        logger: structlog.stdlib.BoundLogger | None = None,
        log_file: Path | None = None,
    ) -> None:
        self.sinks = sinks
        self.logger = logger or get_logger("dirsync.run")
        self.log_file = log_file
        self.entries: list[LogEntry] = []
        self._closed = False

    def log(self, level: str, message: str, **context: Any) -> None:
        """Write an event to every sink."""
        self.entries.append(
            LogEntry(timestamp=datetime.now(), level=level, message=message, context=context)
        )
        line = f"[{level}] {message}"
        for sink in self.sinks:
            sink.write(level, line)

        self.logger.debug(message, severity=level, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log("INFO", message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.log("ERROR", message, **context)

    @property
    def error_count(self) -> int:
        return sum(1 for entry in self.entries if entry.level == "ERROR")

    def messages(self, level: str | None = None) -> list[str]:
        """Messages logged so far, optionally filtered by level."""
        return [e.message for e in self.entries if level is None or e.level == level]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for sink in self.sinks:
            sink.close()

    def __enter__(self) -> RunLogger:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def open_run_logger(
    log_file: Path | None,
    console: Console | None = None,
    *,
    console_enabled: bool = True,
) -> RunLogger:
    """Build the standard run logger writing to a file and the console."""
    sinks: list[LogSink] = []
    if log_file is not None:
        sinks.append(FileLogSink(log_file))
    if console_enabled:
        sinks.append(ConsoleLogSink(console))
    return RunLogger(sinks, log_file=log_file)

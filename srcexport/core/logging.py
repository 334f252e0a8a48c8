#!/usr/bin/env python3
"""Structured logging and export event reporting for srcexport.

This module provides:
- A structured logger with key-value context (console and rotating file output)
- The closed set of export event kinds emitted by the engine
- The logging port the engine reports through (``ExportLog``) and two sinks:
  one backed by the structured logger, one recording events in memory

The engine never reaches for a process-wide logger; a port is handed to the
exporter for the duration of one export.

Example:
    >>> logger = Logger(level=LogLevel.DEBUG)
    >>> log = LoggerExportLog(logger)
    >>> log.emit(ExportEvent.COPY, "/src/Program.cs")
"""

import logging
import logging.handlers
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50


class ExportEvent(Enum):
    """Kinds of events emitted during an export."""

    CONFIGURATION = "configuration"
    DIRECTORY_CREATED = "directory_created"
    INCLUDE = "include"
    EXCLUDE = "exclude"
    COPY = "copy"
    VERIFY = "verify"
    DIAGNOSTIC = "diagnostic"
    SUMMARY = "summary"


# Level each event is reported at by LoggerExportLog
EVENT_LEVELS: Dict[ExportEvent, LogLevel] = {
    ExportEvent.CONFIGURATION: LogLevel.INFO,
    ExportEvent.DIRECTORY_CREATED: LogLevel.INFO,
    ExportEvent.INCLUDE: LogLevel.DEBUG,
    ExportEvent.EXCLUDE: LogLevel.DEBUG,
    ExportEvent.COPY: LogLevel.INFO,
    ExportEvent.VERIFY: LogLevel.DEBUG,
    ExportEvent.DIAGNOSTIC: LogLevel.WARNING,
    ExportEvent.SUMMARY: LogLevel.INFO,
}


class Logger:
    """Named logger appending key=value context to every message.

    Context pushed with ``add_context`` is kept per thread and stacks, so
    nested blocks see the union of their keys.
    """

    # Thread-local storage for context
    _context_stack = threading.local()

    def __init__(
        self,
        name: str = "srcexport",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output
            handlers: Optional list of logging handlers
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        # Prevent propagation to root logger
        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        """Create default console handler with formatting.

        Returns:
            Configured console handler
        """
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create rotating file handler.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Add a new output handler."""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Remove an output handler."""
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or string)
        """
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        self.logger.setLevel(level)

    def get_level(self) -> LogLevel:
        """Get current log level."""
        return LogLevel(self.logger.level)

    def _get_context(self) -> Dict[str, Any]:
        """Get current thread-local context merged from all levels."""
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        context = {}
        for ctx in self._context_stack.stack:
            context.update(ctx)
        return context

    def _format_message(self, msg: str, context: Dict[str, Any]) -> str:
        """Format message with context.

        Args:
            msg: Log message
            context: Context dictionary

        Returns:
            Formatted message with context
        """
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs):
        """Context manager to add temporary context.

        Example:
            >>> with logger.add_context(source="/src"):
            ...     logger.info("Exporting")
        """
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]

        self._context_stack.stack.append(kwargs)
        try:
            yield
        finally:
            self._context_stack.stack.pop()

    def log(self, level: LogLevel, msg: str, **context) -> None:
        """Log a message at an arbitrary level.

        Args:
            level: Log level
            msg: Log message
            **context: Additional context key-value pairs
        """
        if self.logger.isEnabledFor(level):
            combined_context = self._get_context()
            combined_context.update(context)
            formatted_msg = self._format_message(msg, combined_context)
            self.logger.log(level, formatted_msg, extra={"context": combined_context})

    def debug(self, msg: str, **context) -> None:
        """Log debug message."""
        self.log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        """Log info message."""
        self.log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        """Log warning message."""
        self.log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        """Log error message."""
        self.log(LogLevel.ERROR, msg, **context)



class ExportLog(ABC):
    """Port through which the export engine reports what it does."""

    @abstractmethod
    def emit(self, event: ExportEvent, value: Any) -> None:
        """Report a single event.

        Args:
            event: Event kind
            value: Event payload (usually a path, a count or a message)
        """


class LoggerExportLog(ExportLog):
    """Export log that writes events to a structured ``Logger``."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger if logger is not None else Logger()

    def emit(self, event: ExportEvent, value: Any) -> None:
        level = EVENT_LEVELS[event]
        if event is ExportEvent.CONFIGURATION and isinstance(value, (list, tuple)):
            for line in value:
                self.logger.log(level, str(line), event=event.value)
            return
        self.logger.log(level, str(value), event=event.value)


class RecordingExportLog(ExportLog):
    """Export log that keeps every event in memory."""

    def __init__(self):
        self.events: List[Tuple[ExportEvent, Any]] = []

    def emit(self, event: ExportEvent, value: Any) -> None:
        self.events.append((event, value))

    def values(self, event: ExportEvent) -> List[Any]:
        """Return the payloads of every recorded event of one kind."""
        return [value for kind, value in self.events if kind is event]

    def clear(self) -> None:
        """Forget recorded events."""
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)

"""
Logging and error handling framework for precession.

This module provides:
- Structured logging configuration
- The precession exception hierarchy
- Context-aware logging utilities
- Performance logging
"""

import functools
import json
import logging
import logging.config
import sys
import time
import traceback
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogContext(str, Enum):
    """Log context categories for structured logging."""

    DEFINITION = "definition"
    RENDER = "render"
    TMUX = "tmux"
    CONFIG = "config"
    CLI = "cli"


class PrecessionError(Exception):
    """Base exception class for all precession errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)


class MalformedDefinition(PrecessionError):
    """A session definition could not be decoded into the session tree."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.path = path


class DefinitionNotFound(PrecessionError):
    """A session definition file could not be located or read."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.path = path


class ControlOperationFailed(PrecessionError):
    """tmux rejected a control operation or could not be run at all."""

    def __init__(
        self,
        message: str,
        operation: str,
        command: Sequence[str] | None = None,
        stderr: str | None = None,
        returncode: int | None = None,
    ):
        super().__init__(
            message,
            context={
                "operation": operation,
                "command": list(command or []),
                "returncode": returncode,
            },
        )
        self.operation = operation
        self.command = list(command or [])
        self.stderr = stderr
        self.returncode = returncode


class ConfigurationError(PrecessionError):
    """Errors related to configuration and setup."""

    pass


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "context"):
            log_data["context"] = record.context

        if hasattr(record, "session_name"):
            log_data["session_name"] = record.session_name

        # Add all other extra fields from the record
        # Exclude standard LogRecord attributes and our own fields
        standard_fields = {
            "name",
            "msg",
            "args",
            "levelname",
            "levelno",
            "pathname",
            "filename",
            "module",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "created",
            "msecs",
            "relativeCreated",
            "thread",
            "threadName",
            "processName",
            "process",
            "taskName",
            "getMessage",
            "context",
            "session_name",
        }

        for key, value in record.__dict__.items():
            if key not in standard_fields and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


class ContextualLogger:
    """Logger with context management for structured logging."""

    def __init__(self, name: str, context: LogContext):
        self.logger = logging.getLogger(name)
        self.context = context.value
        self.session_name: str | None = None

    def set_session_name(self, session_name: str | None) -> None:
        """Set the session name for all subsequent log messages."""
        self.session_name = session_name

    def _log(
        self, level: int, message: str, extra_context: dict[str, Any] | None = None
    ) -> None:
        """Internal logging method with context injection."""
        extra: dict[str, Any] = {
            "context": self.context,
        }

        if self.session_name:
            extra["session_name"] = self.session_name

        if extra_context:
            extra.update(extra_context)

        self.logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message with context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message with context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, exception: Exception | None = None, **kwargs) -> None:
        """Log error message with context and optional exception."""
        if exception:
            self.logger.error(
                message,
                exc_info=exception,
                extra={
                    "context": self.context,
                    "session_name": self.session_name,
                    **kwargs,
                },
            )
        else:
            self._log(logging.ERROR, message, kwargs)


def get_logger(name: str, context: LogContext) -> ContextualLogger:
    """Get a contextual logger instance."""
    return ContextualLogger(name, context)


def setup_logging(
    log_level: str | LogLevel = LogLevel.WARNING,
    log_file: Path | None = None,
    enable_structured: bool = False,
    enable_console: bool = True,
) -> None:
    """
    Setup logging configuration.

    Console output goes to stderr so it never mixes with command output.

    Args:
        log_level: Minimum log level to capture
        log_file: Optional file path for log output
        enable_structured: Use JSON structured logging format
        enable_console: Enable console output
    """
    if isinstance(log_level, LogLevel):
        log_level = log_level.value

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = []

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        if enable_structured:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(
                logging.Formatter("%(levelname)s %(name)s: %(message)s")
            )
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        if enable_structured:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                )
            )
        handlers.append(file_handler)

    root_logger = logging.getLogger()

    # Clear existing handlers first
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    # libtmux logs every command it runs at DEBUG
    logging.getLogger("libtmux").setLevel(logging.WARNING)


def log_performance(log_context: LogContext = LogContext.RENDER):
    """Decorator to log function performance metrics."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__, log_context)

            start_time = time.time()
            logger.debug(
                f"Performance tracking started for {func.__name__}",
                function=func.__name__,
            )

            try:
                result = func(*args, **kwargs)
                execution_time = time.time() - start_time

                logger.info(
                    f"Performance: {func.__name__} completed",
                    function=func.__name__,
                    execution_time=execution_time,
                    status="success",
                )

                return result

            except Exception as e:
                execution_time = time.time() - start_time

                logger.warning(
                    f"Performance: {func.__name__} failed",
                    function=func.__name__,
                    execution_time=execution_time,
                    status="error",
                    error=str(e),
                )

                raise

        return wrapper

    return decorator

"""
Logging and error handling framework for maria-migration.

This module provides:
- Structured logging configuration
- Custom exception classes
- Context-aware logging utilities
- Performance and audit logging
"""

import functools
import json
import logging
import sys
import time
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
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

    MIGRATOR = "migrator"
    DATABASE = "database"
    CLI = "cli"
    CONFIG = "config"


class MariaMigrationException(Exception):
    """Base exception class for all maria-migration errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now(UTC)


class ConfigurationError(MariaMigrationException):
    """Errors related to configuration and setup."""

    pass


class MigrationError(MariaMigrationException):
    """Errors raised by migrator operations."""

    pass


class StatementError(MigrationError):
    """A SQL statement failed in the database driver.

    The driver exception is chained as ``__cause__``.
    """

    def __init__(self, statement: str, cause: Exception):
        super().__init__(
            f"Statement failed: {cause}",
            context={"statement": statement},
        )
        self.statement = statement


class InvalidVersionStateError(MigrationError):
    """The version table does not hold exactly one row."""

    def __init__(self, table: str, row_count: int):
        super().__init__(
            f"Row count of version table {table} was {row_count}, expected exactly 1",
            context={"table": table, "row_count": row_count},
        )
        self.row_count = row_count


class InvalidVersionError(MigrationError):
    """A version number that cannot be stored."""

    pass


class InvalidIdentifierError(MigrationError, ValueError):
    """A table or column name rejected by identifier validation."""

    pass


class UnsupportedOperationError(MigrationError):
    """The database dialect cannot express the requested operation."""

    pass


class ClearDatabaseError(MigrationError):
    """Tables survived every pass of a database clear."""

    def __init__(self, remaining_tables: list[str], passes: int):
        super().__init__(
            f"Database still has {len(remaining_tables)} table(s) after "
            f"{passes} clear passes: {', '.join(remaining_tables)}",
            context={"remaining_tables": remaining_tables, "passes": passes},
        )
        self.remaining_tables = remaining_tables
        self.passes = passes


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

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
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "context"):
            log_data["context"] = record.context

        # Everything passed through ``extra`` that is not a LogRecord attribute
        for key, value in record.__dict__.items():
            if key not in self.standard_fields and not key.startswith("_"):
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

    def _log(
        self,
        level: int,
        message: str,
        extra_context: dict[str, Any] | None = None,
        exception: Exception | None = None,
    ) -> None:
        """Internal logging method with context injection."""
        extra = {"context": self.context}
        if extra_context:
            extra.update(extra_context)

        self.logger.log(level, message, exc_info=exception, extra=extra)

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
        self._log(logging.ERROR, message, kwargs, exception)


def get_logger(name: str, context: LogContext) -> ContextualLogger:
    """Get a contextual logger instance."""
    return ContextualLogger(name, context)


def setup_logging(
    log_level: str | LogLevel = LogLevel.INFO,
    log_file: Path | None = None,
    enable_structured: bool = True,
    enable_console: bool = True,
) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Minimum log level to capture
        log_file: Optional file path for log output
        enable_structured: Use JSON structured logging format
        enable_console: Enable console output (stderr, stdout is for command output)
    """
    if isinstance(log_level, LogLevel):
        log_level = log_level.value

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    def make_formatter() -> logging.Formatter:
        if enable_structured:
            return StructuredFormatter()
        return logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: list[logging.Handler] = []

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(make_formatter())
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(make_formatter())
        handlers.append(file_handler)

    root_logger = logging.getLogger()

    # Clear existing handlers first
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    # SQLAlchemy echoes every statement at INFO otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_performance(log_context: LogContext = LogContext.MIGRATOR):
    """Decorator to log function performance metrics."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__, log_context)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"Performance: {func.__name__} failed",
                    function=func.__name__,
                    execution_time=time.time() - start_time,
                    status="error",
                    error=str(e),
                )
                raise

            logger.info(
                f"Performance: {func.__name__} completed",
                function=func.__name__,
                execution_time=time.time() - start_time,
                status="success",
            )
            return result

        return wrapper

    return decorator


def audit_log(action: str, log_context: LogContext = LogContext.MIGRATOR):
    """Decorator for audit logging of destructive operations."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(f"{func.__module__}.audit", log_context)

            logger.info(
                f"Audit: {action} started", action=action, function=func.__name__
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Audit: {action} failed",
                    action=action,
                    function=func.__name__,
                    status="error",
                    error=str(e),
                )
                raise

            logger.info(
                f"Audit: {action} completed successfully",
                action=action,
                function=func.__name__,
                status="success",
            )
            return result

        return wrapper

    return decorator

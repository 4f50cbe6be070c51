"""Logging setup for MCP Xray.

Every record carries a ``context`` attribute rendered as ``key=value`` pairs
(``operation``, ``trace_id``, the project or test key being worked on), so
the log of one composite operation can be followed across its remote calls.
"""

import logging
import os
import sys
import threading
import time
import types
import uuid
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, cast

DEFAULT_LOGGER_NAME = "mcp-xray"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIRECTORY = "logs"
NO_CONTEXT = "no-context"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

# Marks handlers owned by setup_logger
_HANDLER_MARKER = "_mcp_xray_handler"


def _render_context(values: Mapping[str, Any]) -> str:
    if not values:
        return NO_CONTEXT
    return ",".join(f"{name}={value}" for name, value in values.items())


class ContextualLogger(logging.Logger):
    """Logger that stamps each record with the calling thread's context.

    Steps and bucket queries run on pool threads, which start without
    context of their own.
    """

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        self._local = threading.local()

    def _get_context(self) -> dict[str, Any]:
        return getattr(self._local, "values", {})

    def _log(
        self,
        level: int,
        msg: object,
        args: tuple[object, ...] | Mapping[str, object],
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
    ) -> None:
        record_extra = dict(extra or {})
        record_extra.setdefault("context", _render_context(self._get_context()))
        super()._log(level, msg, args, exc_info, record_extra, stack_info, stacklevel + 1)

    def set_context(self, **values: Any) -> None:
        """Add entries to this thread's context."""
        self._local.values = {**self._get_context(), **values}

    def clear_context(self) -> None:
        self._local.values = {}

    def restore_context(self, values: dict[str, Any]) -> None:
        """Replace this thread's context, e.g. with a saved snapshot."""
        self._local.values = dict(values)


class _ContextFilter(logging.Filter):
    """Gives records from plain loggers an empty ``context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = NO_CONTEXT
        return True


class LoggingContextManager:
    """Scope of one logical operation.

    On entry the operation name and a short trace id join the logger's
    context and the start is logged at INFO. On exit the duration is logged,
    at DEBUG on success or at ERROR on failure, and the previous context is
    restored. Exceptions always propagate.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.trace_id = str(context.pop("trace_id", None) or uuid.uuid4().hex[:8])
        self.context = {**context, "operation": operation, "trace_id": self.trace_id}
        self.started = time.monotonic()
        self._saved: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContextManager":
        if isinstance(self.logger, ContextualLogger):
            self._saved = dict(self.logger._get_context())
            self.logger.set_context(**self.context)
        self.started = time.monotonic()
        self.logger.info(f"Operation started: {self.operation}")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        elapsed = time.monotonic() - self.started
        if exc_type is None:
            self.logger.debug(f"Operation completed: {self.operation} in {elapsed:.3f}s")
        else:
            self.logger.error(
                f"Operation failed: {self.operation} after {elapsed:.3f}s - {exc_val}"
            )
        if isinstance(self.logger, ContextualLogger):
            self.logger.restore_context(self._saved)


def _owned_handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(_ContextFilter())
    setattr(handler, _HANDLER_MARKER, True)
    return handler


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    log_to_file: bool = False,
    log_dir: str | None = None,
    log_format: str | None = None,
) -> ContextualLogger:
    """
    Configure the named logger for the server.

    Console output goes to stderr because the stdio transport owns stdout.
    Calling this again replaces the handlers it installed earlier.

    Args:
        name: Logger name
        level: Level name such as DEBUG; LOG_LEVEL or INFO when omitted
        log_to_file: Also write to ``<log_dir>/<name>.log`` with rotation
        log_dir: Directory of the log file; LOG_DIR or ``logs`` when omitted
        log_format: Record format; LOG_FORMAT or DEFAULT_FORMAT when omitted

    Returns:
        The configured logger
    """
    logging.setLoggerClass(ContextualLogger)
    logger = logging.getLogger(name)

    level_name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARKER, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format or os.getenv("LOG_FORMAT") or DEFAULT_FORMAT)
    logger.addHandler(_owned_handler(logging.StreamHandler(sys.stderr), formatter))

    if log_to_file:
        directory = Path(log_dir or os.getenv("LOG_DIR") or DEFAULT_LOG_DIRECTORY)
        directory.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            directory / f"{name}.log", maxBytes=MAX_LOG_SIZE, backupCount=LOG_BACKUP_COUNT
        )
        logger.addHandler(_owned_handler(rotating, formatter))

    logger.propagate = False
    return cast(ContextualLogger, logger)


def log_operation(
    logger: logging.Logger, operation: str, **context: Any
) -> LoggingContextManager:
    """
    Track one operation, e.g. ``with log_operation(logger, "new_test", project="DEMO"):``.

    Args:
        logger: Logger to write to; context is attached when it is a ContextualLogger
        operation: Operation name
        **context: Extra context entries; ``trace_id`` overrides the generated one

    Returns:
        The context manager for the operation
    """
    return LoggingContextManager(logger, operation, **context)

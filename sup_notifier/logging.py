"""
Logging setup for the notification server.

One root logger is configured at import time:
- console output in a human-readable form, prefixed with the current
  connection context
- a JSON error log at `LOG_FILE_PATH` for later inspection

The connection context (`connection_id`, `user_id`) lives in a ContextVar.
Every WebSocket connection is served by its own task, so fields set while
handling one connection never show up in another connection's log lines.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

from sup_notifier.constants import MAX_LOG_SIZE_BYTES
from sup_notifier.settings import app_settings

log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else was passed through `extra`
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "context", "taskName"}


def set_log_context(**kwargs: Any) -> None:
    """
    Add fields to the current connection's log context.

    The context dict is replaced, never mutated, so snapshots taken earlier
    by `get_log_context` stay unchanged.

    Example:
        >>> set_log_context(connection_id="3f2a9c1e")
        >>> set_log_context(user_id=7)
        >>> logger.info("Client registered: 7")  # carries both fields
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


def _format_context(context: dict[str, Any]) -> str:
    if not context:
        return "-"
    return " ".join(f"{key}={value}" for key, value in context.items())


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    The connection context and any `extra` fields are merged into the
    top-level object. Messages that would push a line past
    `MAX_LOG_SIZE_BYTES` are truncated.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
            **get_log_context(),
        }

        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        line = json.dumps(entry, default=str)
        if len(line) <= MAX_LOG_SIZE_BYTES:
            return line

        entry["message"] = (
            entry["message"][: MAX_LOG_SIZE_BYTES - 1000] + "... [TRUNCATED]"
        )
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter.

    INFO lines stay short; every other level also shows where the record
    was emitted.
    """

    SHORT_FMT = "%(asctime)s - [%(context)s] %(levelname)s: %(message)s"
    LONG_FMT = (
        "%(asctime)s - [%(context)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._short = logging.Formatter(self.SHORT_FMT, datefmt=DATE_FMT)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=DATE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        record.context = _format_context(get_log_context())

        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._long.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure the root logger with console and error file handlers.

    A log file that cannot be created only costs the file handler; console
    logging keeps working.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))

    # Reconfiguring must not duplicate handlers
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(HumanReadableFormatter())
    root.addHandler(console_handler)

    try:
        log_dir = os.path.dirname(app_settings.LOG_FILE_PATH)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        error_handler = logging.FileHandler(app_settings.LOG_FILE_PATH)
    except OSError as e:
        root.warning(f"Could not create file handler: {e}")
    else:
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(StructuredJSONFormatter())
        root.addHandler(error_handler)

    # Silence logging during pytest runs
    if os.path.basename(sys.argv[0]) == "pytest":
        logging.disable(logging.ERROR)

    return root


logger = setup_logging()

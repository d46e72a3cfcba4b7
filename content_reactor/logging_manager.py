"""Structured JSON logging shared by every reaction pipeline.

Each log line is one JSON object. Values bound through :func:`log_context`
(the reaction name, the record or document id, the guard key) are copied
onto every record emitted inside the block, including records from child
loggers such as ``content_reactor.services.translation``.

Logs go to stderr. Setting ``REACTOR_LOG_DIR`` additionally writes a
rotating ``reactor.log`` file inside that directory.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

ROOT_LOGGER_NAME = "content_reactor"
DEFAULT_LOG_LEVEL = logging.INFO
LOG_FILE_NAME = "reactor.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Attributes every LogRecord carries; anything else was passed through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord(ROOT_LOGGER_NAME, logging.INFO, __file__, 0, "", None, None).__dict__
) | {"message", "asctime"}

_context: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "content_reactor_log_context", default={}
)
_root: Optional[logging.Logger] = None


class ReactionLogFormatter(logging.Formatter):
    """Serialize a record as JSON with reaction fields promoted to the top level."""

    promoted_fields: tuple[str, ...] = (
        "correlation_id",
        "reaction",
        "event",
        "record_id",
        "document_id",
        "guard_key",
        "status",
        "duration_ms",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        details: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or value is None:
                continue
            if key in self.promoted_fields:
                entry[key] = value
            else:
                details[key] = value
        if details:
            entry["details"] = details
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextInjector(logging.Filter):
    """Copy the bound logging context onto each record that lacks those keys."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _build_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_dir = os.environ.get("REACTOR_LOG_DIR")
    if log_dir:
        path = Path(log_dir).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path / LOG_FILE_NAME,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = ReactionLogFormatter()
    injector = ContextInjector()
    for handler in handlers:
        handler.setFormatter(formatter)
        # Records from child loggers bypass filters on the parent logger itself.
        handler.addFilter(injector)
    return handlers


def get_logger() -> logging.Logger:
    """Return the package logger, installing its handlers on first use."""

    global _root
    if _root is None:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.propagate = False
        for handler in _build_handlers():
            root.addHandler(handler)
        _root = root
        configure_logging_level()
    return _root


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int] = None) -> int:
    """Set the package logger level; ``log_level`` wins over ``debug_enabled``."""

    if log_level is None:
        log_level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    root = get_logger()
    root.setLevel(log_level)
    for handler in root.handlers:
        handler.setLevel(log_level)
    return log_level


def get_log_context() -> Dict[str, Any]:
    return dict(_context.get())


def push_log_context(**values: Any) -> contextvars.Token[Mapping[str, Any]]:
    """Bind ``values`` (``None`` entries ignored) and return a reset token."""

    merged = dict(_context.get())
    merged.update({key: value for key, value in values.items() if value is not None})
    return _context.set(merged)


def pop_log_context(token: contextvars.Token[Mapping[str, Any]]) -> None:
    _context.reset(token)


@contextlib.contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every log record emitted inside the block."""

    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


def clear_log_context() -> None:
    _context.set({})


__all__ = [
    "ContextInjector",
    "ReactionLogFormatter",
    "clear_log_context",
    "configure_logging_level",
    "get_log_context",
    "get_logger",
    "log_context",
    "pop_log_context",
    "push_log_context",
]

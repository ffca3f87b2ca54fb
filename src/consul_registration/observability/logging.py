"""Structured logging for registration and heartbeat activity.

Module loggers are plain ``logging.getLogger(__name__)`` loggers. Applications
(and the CLI) call :func:`get_logger` once on the ``consul_registration``
logger to attach a JSON or console handler; ``CONSUL_REGISTRATION_LOG_FORMAT``
picks the format when none is passed.

:class:`LogContext` binds ``service_id`` / ``check_id`` for the current task,
so every line a heartbeat task writes names the service it belongs to.
"""

from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any

__all__ = [
    "LOG_FORMAT_CONSOLE",
    "LOG_FORMAT_ENV",
    "LOG_FORMAT_JSON",
    "ContextFilter",
    "LogContext",
    "StructuredConsoleFormatter",
    "StructuredJSONFormatter",
    "get_logger",
]

LOG_FORMAT_ENV = "CONSUL_REGISTRATION_LOG_FORMAT"
LOG_FORMAT_JSON = "json"
LOG_FORMAT_CONSOLE = "console"

CONTEXT_FIELDS = ("service_id", "check_id")
_MISSING = "-"

_fields: contextvars.ContextVar[dict[str, str]] = contextvars.ContextVar("consul_registration_log_fields", default={})

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class LogContext:
    """Binds context fields for the duration of a ``with`` block.

    ``None`` values are ignored, so nested contexts only override what they set.
    """

    def __init__(self, service_id: str | None = None, check_id: str | None = None, **extra: str | None) -> None:
        self._fields = _without_none({"service_id": service_id, "check_id": check_id, **extra})
        self._token: contextvars.Token[dict[str, str]] | None = None

    def __enter__(self) -> LogContext:
        self._token = _fields.set({**_fields.get(), **self._fields})
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._token is not None:
            _fields.reset(self._token)
            self._token = None

    @classmethod
    def clear(cls) -> None:
        _fields.set({})

    @classmethod
    def snapshot(cls) -> dict[str, str]:
        return dict(_fields.get())


def _without_none(values: dict[str, str | None]) -> dict[str, str]:
    return {key: value for key, value in values.items() if value is not None}


class ContextFilter(logging.Filter):
    """Copies the bound context onto each record; unset fields become ``-``."""

    def filter(self, record: logging.LogRecord) -> bool:
        bound = _fields.get()
        for key in CONTEXT_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, bound.get(key, _MISSING))
        for key, value in bound.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class StructuredJSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context and extras."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS and not key.startswith("_") and key not in entry:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StructuredConsoleFormatter(logging.Formatter):
    """Human-readable lines with the context fields appended."""

    default_format = "%(asctime)s %(levelname)s %(name)s %(message)s service_id=%(service_id)s check_id=%(check_id)s"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt or self.default_format, datefmt)


def get_logger(
    name: str,
    *,
    log_format: str | None = None,
    level: int | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a structured handler to ``name`` and return the logger.

    Calling it again with the same format reuses the existing handler; a
    different format replaces it. The logger stops propagating so lines are
    not written twice.

    Args:
        name: Logger name. ``consul_registration`` covers every module logger.
        log_format: ``json`` or ``console``; defaults to
            ``$CONSUL_REGISTRATION_LOG_FORMAT``, then ``json``.
        level: Level for the logger; ``INFO`` when the logger has none.
        stream: Output stream, ``sys.stderr`` by default.
    """
    kind = (log_format or os.getenv(LOG_FORMAT_ENV) or LOG_FORMAT_JSON).strip().lower()
    if kind != LOG_FORMAT_CONSOLE:
        kind = LOG_FORMAT_JSON

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)

    for existing in list(logger.handlers):
        if getattr(existing, "_log_format", kind) != kind:
            logger.removeHandler(existing)
            existing.close()
    if not any(getattr(handler, "_log_format", None) == kind for handler in logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredConsoleFormatter() if kind == LOG_FORMAT_CONSOLE else StructuredJSONFormatter())
        handler.addFilter(ContextFilter())
        handler._log_format = kind  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = False
    return logger

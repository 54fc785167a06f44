"""Logging setup for the verifier.

The CLI configures the package logger once and hands a bound logger down to
the pipeline. Nothing inside the verification core looks a logger up by name.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import MutableMapping
from typing import Any, TextIO

PACKAGE_LOGGER_NAME = "keyverify"

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys() | {"message", "asctime"},
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s%(context)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package logger."""
    if name == PACKAGE_LOGGER_NAME or name.startswith(f"{PACKAGE_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }


class TextFormatter(logging.Formatter):
    """Human-readable lines with structured context appended as key=value pairs."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__(TEXT_FORMAT)
        if use_utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        record.context = (
            " " + " ".join(f"{key}={context[key]}" for key in sorted(context)) if context else ""
        )
        try:
            return super().format(record)
        finally:
            del record.context


class JsonFormatter(logging.Formatter):
    """One JSON object per record: event name, level, logger and context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(_record_context(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges bound context into every record's ``extra``."""

    def process(
        self,
        msg: Any,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> ContextLogger:
        merged = dict(self.extra or {})
        merged.update(context)
        return ContextLogger(self.logger, merged)


def bind_logger(logger: logging.Logger | ContextLogger, **context: Any) -> ContextLogger:
    """Attach structured context (e.g. ``github=``, ``org=``) to a logger handle."""
    if isinstance(logger, ContextLogger):
        return logger.bind(**context)
    return ContextLogger(logger, dict(context))


def configure_logging(
    *,
    level: str = "INFO",
    log_format: str = "text",
    use_utc: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single stream handler on the package logger and return it."""
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(TextFormatter(use_utc=use_utc))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


LoggerLike = logging.Logger | ContextLogger

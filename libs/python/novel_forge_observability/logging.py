"""Centralised logging configuration helpers."""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("novel_forge_log_context", default={})

# Attributes every LogRecord carries; never copied into the JSON payload.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "observability_context"}


class ContextFilter(logging.Filter):
    """Attach fields bound with :func:`log_context` to each record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - inherited docstring
        context = _LOG_CONTEXT.get()
        if context:
            record.observability_context = context
        if getattr(record, "service", None) is None:
            record.service = self.service_name
        return True


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited docstring
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "observability_context", None)
        if isinstance(context, dict):
            for key, value in context.items():
                if value is not None:
                    payload.setdefault(key, value)

        # Extras passed via ``logger.info(..., extra={...})`` win over bound context.
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value if _is_json_safe(value) else repr(value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def _is_json_safe(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def setup_logging(service_name: str, level: str | int | None = None) -> None:
    """Configure JSON logging on stdout for the current process.

    ``level`` defaults to the ``NOVEL_FORGE_LOG_LEVEL`` environment variable, then
    ``INFO``. Calling again replaces the handlers, so the last call wins.
    """

    resolved_level = level or os.getenv("NOVEL_FORGE_LOG_LEVEL", "INFO")
    handlers = ["default"]
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "novel_forge_observability.logging.JsonFormatter"},
        },
        "filters": {
            "context": {
                "()": "novel_forge_observability.logging.ContextFilter",
                "service_name": service_name,
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "json",
                "filters": ["context"],
            }
        },
        "root": {"level": resolved_level, "handlers": handlers},
        "loggers": {
            "uvicorn": {"handlers": handlers, "level": resolved_level, "propagate": False},
            "uvicorn.access": {"handlers": handlers, "level": resolved_level, "propagate": False},
            "httpx": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily bind fields (stage, project_id, chapter...) to every log line."""

    updated = dict(_LOG_CONTEXT.get())
    for key, value in kwargs.items():
        if value is None:
            updated.pop(key, None)
        else:
            updated[key] = value
    token = _LOG_CONTEXT.set(updated)
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def current_log_context() -> Dict[str, Any]:
    return dict(_LOG_CONTEXT.get())

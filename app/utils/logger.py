"""Logging setup: one JSON object per line, or the plain text format for local runs."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional

from app.utils.dates import to_iso

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """Render log records as JSON lines.

    Request-scoped values are passed with ``extra={"context": {...}}`` and end
    up under the ``context`` key. Exceptions are rendered under ``error``; the
    field map of an invalid-parameter error is included so rejected requests
    can be diagnosed from the log alone.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": to_iso(datetime.fromtimestamp(record.created, tz=timezone.utc)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            error: dict[str, Any] = {
                "name": type(exc).__name__,
                "message": str(exc),
                "stack": self.formatException(record.exc_info),
            }
            fields = getattr(exc, "fields", None)
            if isinstance(fields, dict):
                error["fields"] = fields
            entry["error"] = error

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger."""

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if level_name == "DEBUG" and os.getenv("APP_ENV", "").lower() == "production":
        level_name = "INFO"

    handler = logging.StreamHandler()
    if (fmt or os.getenv("LOG_FORMAT", "json")).lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(StructuredFormatter())

    logging.basicConfig(level=level_name, handlers=[handler], force=True)


__all__ = ["StructuredFormatter", "configure_logging"]

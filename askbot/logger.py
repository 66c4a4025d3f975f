"""
Logging setup for the site assistant.

Call setup_logging() once at startup; modules grab a logger with
get_logger(__name__). LOG_JSON switches to one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from askbot.settings import settings


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)
        return json.dumps(log_data, default=str)


_initialized = False


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    global _initialized
    if _initialized:
        return

    use_json = settings.LOG_JSON if json_output is None else json_output
    handler = logging.StreamHandler(sys.stderr)
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger("askbot")
    root.setLevel((level or settings.LOG_LEVEL).upper())
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

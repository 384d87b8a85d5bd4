"""JSON logging for the scorekeeper API and its CLI scripts.

Every record is one JSON object on stdout. Fields passed via ``extra=`` (game
ids, event ids, counters) are merged into the top level so a log search can
filter on ``game_id`` directly.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

from .utils.datetime_utils import now_utc

# Attributes every LogRecord carries; anything else came from ``extra=``.
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Client libraries that log each HTTP call at INFO. The access middleware
# already logs inbound requests, and the announcer logs its own outcomes.
_CHATTY_LOGGERS = ("httpx", "openai", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self._service = service
        self._environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": now_utc().isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "service": self._service,
            "environment": self._environment,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # datetimes and enums in extras are rendered with str()
        return json.dumps(entry, ensure_ascii=False, default=str)


def _resolve_level(level: str | None, environment: str) -> int:
    """Explicit level wins; otherwise INFO in production, DEBUG elsewhere."""
    if level:
        name = level.strip().upper()
    else:
        name = "INFO" if environment.lower() == "production" else "DEBUG"
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(service: str, environment: str, log_level: str | None = None) -> None:
    """Route the root logger to stdout as JSON. Safe to call more than once."""
    level = _resolve_level(log_level or os.getenv("LOG_LEVEL"), environment)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter(service=service, environment=environment))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

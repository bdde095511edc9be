"""Observability: structured JSON logging to stderr."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

_EXTRA_KEYS = ("repository", "component_id", "rule", "gate", "snapshot", "duration_ms")


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_dict["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                log_dict[key] = val
        return json.dumps(log_dict, default=str)


def default_level() -> str:
    return os.environ.get("STRUCTLENS_LOG_LEVEL", "WARNING")


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with JSON output on stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or default_level()).upper(), logging.WARNING))

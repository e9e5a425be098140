"""
Structured Logging — JSON Output for Production

Configures the `medcheck` logger tree to emit JSON lines (or plain text
in development). Core modules log through logging.getLogger(__name__);
setup_logging() is called once by the composition root.

Usage:
    from medcheck.logging import get_logger, setup_logging
    setup_logging()
    logger = get_logger("worker")
    logger.info("Route complete", extra={"duration_ms": 42, "violations_count": 3})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


LOG_LEVEL = os.getenv("MEDCHECK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("MEDCHECK_LOG_FORMAT", "json")  # "json" or "text"

EXTRA_FIELDS = (
    "module_name", "duration_ms", "violations_count", "targets_count",
    "timeout_ms", "error", "error_type",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> logging.Logger:
    """Configure the medcheck root logger. Call once at startup."""
    root = logging.getLogger("medcheck")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)

    # The google-genai transport is chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the medcheck namespace."""
    return logging.getLogger(f"medcheck.{name}")

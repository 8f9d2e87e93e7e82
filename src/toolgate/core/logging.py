"""
Toolgate Logging — colorized for dev, JSON for production.

Features:
- Color formatter for terminals (auto-detects TTY)
- JSON structured formatter (TOOLGATE_LOG_FORMAT=json)
- Quiets httpx/httpcore request chatter from the built-in tools
- Configurable via TOOLGATE_LOG_LEVEL, TOOLGATE_LOG_COLOR, TOOLGATE_LOG_FORMAT

Structured log extra fields (pass via logger.info(..., extra={...})):
    user_id, plugin_key, field, tier, duration_ms, status

Secret values are never logged; only field names and the tier that
supplied them.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

COLORS = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[1;31m",  # Bold red
    "RESET": "\033[0m",
    "DIM": "\033[2m",
}

_STRUCTURED_FIELDS = (
    "user_id",
    "plugin_key",
    "field",
    "tier",
    "duration_ms",
    "status",
)


class ColorFormatter(logging.Formatter):
    """Colorized log formatter for terminal output."""

    def __init__(self, use_color: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        orig_levelname = record.levelname
        orig_name = record.name

        level_color = COLORS.get(record.levelname, "")
        record.levelname = f"{level_color}{record.levelname}{COLORS['RESET']}"
        record.name = f"{COLORS['DIM']}{record.name}{COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.name = orig_name


class StructuredFormatter(logging.Formatter):
    """JSON log formatter — one object per line.

    Extra fields passed via ``logger.debug("msg", extra={"plugin_key": ...})``
    land at the top level for easy querying.

    Enable with: TOOLGATE_LOG_FORMAT=json
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        for key in _STRUCTURED_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _should_use_color() -> bool:
    env_val = os.getenv("TOOLGATE_LOG_COLOR", "auto").lower()
    if env_val == "true":
        return True
    if env_val == "false":
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def setup_logging() -> None:
    """Configure root logging. Call once at startup.

    Env vars:
        TOOLGATE_LOG_LEVEL  — DEBUG / INFO / WARNING / ERROR (default: INFO)
        TOOLGATE_LOG_COLOR  — true / false / auto (default: auto)
        TOOLGATE_LOG_FORMAT — text / json (default: text)
    """
    level_name = os.getenv("TOOLGATE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    log_format = os.getenv("TOOLGATE_LOG_FORMAT", "text").lower()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = ColorFormatter(use_color=_should_use_color())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    for noisy_logger in ["httpx", "httpcore", "aiosqlite"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    logging.getLogger("toolgate").debug(
        "Logging configured (level=%s, format=%s)", level_name, log_format
    )

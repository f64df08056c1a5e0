"""
Nogres Logging — optional console setup for suites that want to watch the double.

The library itself only creates module loggers (`logging.getLogger(__name__)`)
and never touches handlers on import. Call `setup_logging()` from a
conftest.py or a debugging session to see every enqueue, match and
mismatch as it happens.

Features:
- Color formatter for dev mode (auto-detects TTY)
- JSON structured formatter for log aggregation (NOGRES_LOG_FORMAT=json)
- Configurable via NOGRES_LOG_LEVEL, NOGRES_LOG_COLOR, NOGRES_LOG_FORMAT

Structured log extra fields (pass via logger.debug(..., extra={...})):
    sql, params, outcome, pending
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from nogres.core.config import LoggingConfig
from nogres.errors import render_pattern, to_jsonable

# Level → ANSI color; only the level name is tinted
_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """One line per record: ``12:00:01 [nogres.client] DEBUG: Matched ...``."""

    def __init__(self, use_color: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        color = _LEVEL_COLORS.get(record.levelname) if self.use_color else None
        if color is None:
            return super().formatMessage(record)
        values = {**record.__dict__, "levelname": f"{color}{record.levelname}{_RESET}"}
        return self._style._fmt % values


class StructuredFormatter(logging.Formatter):
    """JSON log formatter, one object per line.

    The ``sql``/``params``/``outcome``/``pending`` extras the client logs
    with are lifted to the top level. ``sql`` is rendered like it is in
    error messages (regex patterns as ``/.../flags``) and ``params`` as
    plain JSON lists.

    Enable with: NOGRES_LOG_FORMAT=json
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if hasattr(record, "sql"):
            entry["sql"] = render_pattern(record.sql)
        if hasattr(record, "params"):
            entry["params"] = to_jsonable(record.params)
        for key in ("outcome", "pending"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=repr)


def _should_use_color(setting: str) -> bool:
    """Auto-detect color support."""
    if setting == "true":
        return True
    if setting == "false":
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def setup_logging(settings: LoggingConfig | None = None) -> None:
    """Attach a console handler to the ``nogres`` logger.

    Only the library's own logger is touched, so the host test suite's
    logging setup stays intact.

    Env vars (read when ``settings`` is omitted):
        NOGRES_LOG_LEVEL  — DEBUG / INFO / WARNING / ERROR (default: WARNING)
        NOGRES_LOG_COLOR  — true / false / auto (default: auto, TTY detection)
        NOGRES_LOG_FORMAT — text / json (default: text)
    """
    settings = settings or LoggingConfig.from_env()
    level = getattr(logging, settings.level, logging.WARNING)

    logger = logging.getLogger("nogres")
    logger.setLevel(level)

    # Remove existing handlers (avoid duplicate output on repeated setup)
    logger.handlers.clear()

    if settings.format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = ColorFormatter(use_color=_should_use_color(settings.color))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.debug(
        "Logging configured (level=%s, format=%s)", settings.level, settings.format
    )

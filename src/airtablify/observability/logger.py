"""JSON-lines logging for airtablify.

Loggers returned by :func:`get_logger` write one JSON object per line to
*stderr*::

    {"ts": "2026-01-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "airtablify.transport", "message": "Rate limited by Airtable API",
     "op": "request", "method": "GET", "path": "/appXXX/Tasks",
     "attempt": 1, "delay": 7.4}

Structured fields go in ``extra={"extra_fields": {...}}``.  They pass
through :func:`~airtablify.utils.redact.redact` before being written, so a
header mapping or request dump logged by mistake does not leak the API key.

The initial level comes from the ``AIRTABLIFY_LOG_LEVEL`` environment
variable and defaults to ``WARNING``; rate-limit and deprecation notices
are visible, per-page debug lines are not.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import warnings
from datetime import datetime, timezone
from typing import Any

from airtablify.utils.redact import redact

ENV_LOG_LEVEL = "AIRTABLIFY_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class StructuredFormatter(logging.Formatter):
    """Render a record as ``ts``/``level``/``logger``/``message`` plus its extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            for key, value in redact(extra_fields).items():
                # Reserved keys keep their meaning.
                entry.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _level_by_name(name: str) -> int | None:
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else None


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is not None:
        resolved = _level_by_name(level)
        if resolved is None:
            raise ValueError(f"Unknown log level: {level!r}")
        return resolved

    # Loggers are created at import time; a bad env value must not break it.
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        resolved = _level_by_name(env_level)
        if resolved is not None:
            return resolved
        warnings.warn(
            f"Ignoring unknown {ENV_LOG_LEVEL}={env_level!r}; using {DEFAULT_LOG_LEVEL}",
            RuntimeWarning,
            stacklevel=4,
        )
    return logging.getLevelName(DEFAULT_LOG_LEVEL)


# Names that already carry a StructuredFormatter handler.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "airtablify",
    *,
    level: int | str | None = None,
    stream: Any | None = None,
) -> logging.Logger:
    """Return the logger *name*, attaching the JSON handler on first use.

    *level* and *stream* only take effect the first time a given name is
    requested.  Without *level* the ``AIRTABLIFY_LOG_LEVEL`` environment
    variable is consulted; an unknown name there falls back to
    ``WARNING`` with a :class:`RuntimeWarning` instead of raising.
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    _configured_loggers.add(name)
    return logger

"""Logging and metrics seams.

Every module logs through :func:`get_logger`; the transport reports
request counters and timings to the :class:`MetricsHook` given in
``AirtablifyConfig.metrics``.
"""

from __future__ import annotations

from .logger import ENV_LOG_LEVEL, StructuredFormatter, get_logger
from .metrics import MetricsHook, NoopMetricsHook

__all__ = [
    "ENV_LOG_LEVEL",
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
]

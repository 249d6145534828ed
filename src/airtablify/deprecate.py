"""Warn-once bookkeeping for deprecated entry points.

A :class:`DeprecationRegistry` remembers which deprecation keys have
already been reported.  The client uses :data:`default_registry` unless
one is injected, and tests call :meth:`DeprecationRegistry.reset`.
"""

from __future__ import annotations

import threading
import warnings

from airtablify.observability import get_logger

log = get_logger("airtablify.deprecate")


class DeprecationRegistry:
    """Set of deprecation keys that have already produced a warning."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def warn_once(self, key: str, message: str) -> bool:
        """Emit *message* the first time *key* is seen.

        Returns ``True`` when a warning was emitted.
        """
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
        warnings.warn(message, DeprecationWarning, stacklevel=3)
        log.warning(message, extra={"extra_fields": {"op": "deprecation", "key": key}})
        return True

    def has_warned(self, key: str) -> bool:
        return key in self._seen

    def reset(self) -> None:
        with self._lock:
            self._seen.clear()


default_registry = DeprecationRegistry()

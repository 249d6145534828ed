"""Metrics hook protocol and no-op default implementation.

The transport emits counters and timings for every request it makes.  By
default a :class:`NoopMetricsHook` is used so there is zero overhead.
Callers can supply their own object satisfying :class:`MetricsHook` (via
``AirtablifyConfig(metrics=...)``) to route data points to StatsD,
Prometheus, Datadog or anything else.

Emitted metric names:

* ``airtablify.requests_total``        -- counter, tagged with ``status``
* ``airtablify.retries_total``         -- counter
* ``airtablify.rate_limited_total``    -- counter
* ``airtablify.request_duration_ms``   -- timing
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    Both methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

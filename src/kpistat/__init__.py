"""kpistat - Fire-and-forget KPI reporting over UDP.

Application code reports counters and gauges with one call each; a separate
collector daemon does the aggregation. Out of the box the stats go to
239.255.0.1:20000, so there is nothing to configure:

    import kpistat

    kpistat.incr("requests.total")
    kpistat.gauge("latency.ms", 137)

Call kpistat.open() to send to another collector.
"""

from __future__ import annotations

__version__ = "0.1.0"

from kpistat.emitter import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    Destination,
    Emitter,
    NotConfiguredError,
    ResolutionError,
    log_dropped,
)
from kpistat.payload import KpiKind, PayloadError

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Destination",
    "Emitter",
    "KpiKind",
    "NotConfiguredError",
    "PayloadError",
    "ResolutionError",
    "log_dropped",
    "get_emitter",
    "set_emitter",
    "open",
    "incr",
    "count",
    "scalecount",
    "gauge",
]

_emitter = Emitter.default()


def get_emitter() -> Emitter:
    """Return the process-wide emitter."""
    return _emitter


def set_emitter(emitter: Emitter) -> Emitter:
    """Replace the process-wide emitter.

    Returns:
        The emitter that was in use before.
    """
    global _emitter
    previous, _emitter = _emitter, emitter
    return previous


def open(host: str, port: int | None = None) -> Destination:
    """Send stats to another collector.

    Either the hostname or the IP address (as a string) can be given.

    Raises:
        ResolutionError: If the host cannot be resolved.
        ValueError: If the port is invalid.
    """
    return _emitter.open(host, port)


def incr(name: str) -> None:
    """Increment a KPI by 1."""
    _emitter.incr(name)


def count(name: str, amount: int) -> None:
    """Increment a KPI by a given amount."""
    _emitter.count(name, amount)


def scalecount(name: str, amount: int, scale: int) -> None:
    """Increment a KPI by a scaled amount."""
    _emitter.scalecount(name, amount, scale)


def gauge(name: str, value: int) -> None:
    """Record a gauge KPI."""
    _emitter.gauge(name, value)

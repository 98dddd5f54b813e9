"""Wire payload formatting for kpistat.

Each KPI update is a single line of space-separated ASCII text:

    c <name> <amount>            counter
    c <name> <amount> <scale>    scaled counter (scale field omitted when 1)
    g <name> <value>             gauge

These functions have no side effects so payloads can be checked without
a network.
"""

from __future__ import annotations

from enum import Enum


class KpiKind(Enum):
    """Metric kinds understood by the collector."""

    COUNTER = "c"
    GAUGE = "g"


class PayloadError(ValueError):
    """Raised when a KPI update cannot be expressed on the wire."""


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise PayloadError(f"KPI name must be a non-empty string, got {name!r}")
    if any(ch.isspace() for ch in name):
        raise PayloadError(f"KPI name must not contain whitespace: {name!r}")


def _check_int(field: str, value: int) -> None:
    # bool is an int subclass but "True" is not a number on the wire
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"KPI {field} must be an integer, got {value!r}")


def _line(kind: KpiKind, name: str, *fields: int) -> str:
    return " ".join([kind.value, name, *(str(f) for f in fields)])


def format_counter(name: str, amount: int) -> str:
    """Format a counter increment.

    Args:
        name: The KPI name.
        amount: Signed amount to add to the counter.

    Returns:
        The payload text, e.g. ``"c requests.total 42"``.

    Raises:
        PayloadError: If the name or amount is invalid.
    """
    _check_name(name)
    _check_int("amount", amount)
    return _line(KpiKind.COUNTER, name, amount)


def format_scaled_counter(name: str, amount: int, scale: int) -> str:
    """Format a counter increment that stands for ``scale`` skipped samples.

    The scale is passed through as-is; the collector decides what it means.
    A scale of 1 stands for no skipped samples, so the payload is the same
    as a plain counter.

    Raises:
        PayloadError: If the name, amount or scale is invalid.
    """
    _check_name(name)
    _check_int("amount", amount)
    _check_int("scale", scale)
    if scale == 1:
        return _line(KpiKind.COUNTER, name, amount)
    return _line(KpiKind.COUNTER, name, amount, scale)


def format_gauge(name: str, value: int) -> str:
    """Format an instantaneous gauge sample."""
    _check_name(name)
    _check_int("value", value)
    return _line(KpiKind.GAUGE, name, value)


def encode(payload: str) -> bytes:
    """Encode a payload for transmission."""
    return payload.encode("utf-8")

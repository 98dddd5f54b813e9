"""Fire-and-forget KPI emitter.

The emitter owns a destination (collector address and port) and a single
outbound UDP socket. Every update is formatted as a short text line and sent
as one datagram. Failures on the send path are dropped so that reporting
stats can never break or stall the application doing the reporting.
"""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from typing import Callable

from kpistat.payload import (
    encode,
    format_counter,
    format_gauge,
    format_scaled_counter,
)

logger = logging.getLogger(__name__)

DEFAULT_HOST = "239.255.0.1"
DEFAULT_PORT = 20000

# Called with (payload or None, exception) for every dropped update
ErrorHook = Callable[[str | None, BaseException], None]


class ResolutionError(Exception):
    """Raised when a collector host cannot be resolved."""

    def __init__(self, host: str, reason: str | None = None):
        self.host = host
        message = f"Cannot resolve stat collector host '{host}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotConfiguredError(Exception):
    """Reported to the error hook when the emitter has no destination or socket."""


def check_port(port: int) -> int:
    """Validate a UDP port number.

    Raises:
        ValueError: If the port is not an integer in 1..65535.
    """
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ValueError(f"Invalid collector port: {port!r}")
    return port


@dataclass(frozen=True)
class Destination:
    """Where stat datagrams are sent.

    Attributes:
        host: The host name or literal address as given by the caller.
        address: The resolved IPv4 address.
        port: The collector's UDP port.
    """

    host: str
    address: str
    port: int

    @property
    def sockaddr(self) -> tuple[str, int]:
        return (self.address, self.port)

    @classmethod
    def resolve(cls, host: str, port: int) -> Destination:
        """Resolve a host name or literal IP into a Destination.

        Args:
            host: Host name or IPv4 address string.
            port: UDP port of the collector.

        Returns:
            A fully populated Destination.

        Raises:
            ResolutionError: If the host does not resolve to an IPv4 address.
        """
        if not isinstance(host, str) or not host:
            raise ResolutionError(str(host), "empty host")

        try:
            infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
        except (OSError, UnicodeError, ValueError) as e:
            raise ResolutionError(host, str(e)) from e

        if not infos:
            raise ResolutionError(host, "no IPv4 address")

        address = infos[0][4][0]
        return cls(host=host, address=address, port=port)

    def __str__(self) -> str:
        if self.host == self.address:
            return f"{self.address}:{self.port}"
        return f"{self.host} ({self.address}):{self.port}"


def open_transport() -> socket.socket | None:
    """Open an unbound, non-blocking UDP socket.

    Returns:
        The socket, or None if one could not be created.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as e:
        logger.debug(f"Stat transport unavailable: {e}")
        return None

    sock.setblocking(False)
    return sock


def log_dropped(payload: str | None, error: BaseException) -> None:
    """Error hook that logs dropped updates at DEBUG level."""
    logger.debug(f"Dropped stat update {payload!r}: {error}")


class Emitter:
    """Sends KPI updates to a stats collector.

    Each emitter can be in a degraded state where the destination, the
    transport or both are missing; updates are then dropped quietly.
    Reconfiguration swaps the whole Destination in one assignment so a
    concurrent send sees either the old or the new one.
    """

    def __init__(
        self,
        destination: Destination | None = None,
        transport: socket.socket | None = None,
        on_error: ErrorHook | None = None,
    ):
        """Initialize the emitter.

        Args:
            destination: Where to send updates. None leaves the emitter
                         degraded until open() succeeds.
            transport: Socket used for sending. None leaves the emitter
                       degraded for its whole life.
            on_error: Optional hook told about every dropped update.
        """
        self._destination = destination
        self._transport = transport
        self._lock = threading.Lock()
        self.on_error = on_error

    @classmethod
    def default(cls, on_error: ErrorHook | None = None) -> Emitter:
        """Create an emitter pointed at the default collector.

        Never raises. Whatever cannot be set up is left unset.
        """
        destination = None
        try:
            destination = Destination.resolve(DEFAULT_HOST, DEFAULT_PORT)
        except ResolutionError as e:
            logger.debug(f"Default stat destination unavailable: {e}")

        return cls(destination, open_transport(), on_error)

    @property
    def destination(self) -> Destination | None:
        return self._destination

    @property
    def is_degraded(self) -> bool:
        return self._destination is None or self._transport is None

    def open(self, host: str, port: int | None = None) -> Destination:
        """Point the emitter at another collector.

        Args:
            host: Host name or IP address of the collector.
            port: New collector port. If None the current port is kept
                  (or the default port when there is no destination yet).

        Returns:
            The newly installed Destination.

        Raises:
            ResolutionError: If the host cannot be resolved. The previous
                             destination stays in effect.
            ValueError: If the port is invalid.
        """
        if port is not None:
            check_port(port)

        with self._lock:
            if port is None:
                current = self._destination
                port = current.port if current is not None else DEFAULT_PORT

            destination = Destination.resolve(host, port)
            self._destination = destination

        logger.info(f"Sending stats to {destination}")
        return destination

    def close(self) -> None:
        """Close the transport. Further updates are dropped."""
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()

    def incr(self, name: str) -> None:
        """Increment a counter by 1."""
        self._emit(format_counter, name, 1)

    def count(self, name: str, amount: int) -> None:
        """Increment a counter by ``amount``."""
        self._emit(format_counter, name, amount)

    def scalecount(self, name: str, amount: int, scale: int) -> None:
        """Increment a counter by ``amount`` standing in for ``scale`` samples.

        Meant for call sites that only report every Nth event: reporting
        every 100 items means a scale of 100.
        """
        self._emit(format_scaled_counter, name, amount, scale)

    def gauge(self, name: str, value: int) -> None:
        """Record an instantaneous value (e.g. a latency)."""
        self._emit(format_gauge, name, value)

    def _emit(self, build: Callable[..., str], *args) -> None:
        """Format and send one update, dropping any failure."""
        payload = None
        try:
            payload = build(*args)
            destination = self._destination
            transport = self._transport
            if destination is None:
                raise NotConfiguredError("No stat destination configured")
            if transport is None:
                raise NotConfiguredError("No stat transport available")
            transport.sendto(encode(payload), destination.sockaddr)
        except Exception as e:
            self._drop(payload, e)

    def _drop(self, payload: str | None, error: Exception) -> None:
        hook = self.on_error
        if hook is None:
            return
        try:
            hook(payload, error)
        except Exception:
            pass

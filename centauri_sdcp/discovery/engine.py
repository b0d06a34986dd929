"""
UDP broadcast discovery of SDCP printers.

A single JSON probe is broadcast, then every advertisement that arrives
before the timeout is collected. Printers are keyed by the address their
datagram came from, never by the address they claim in the payload.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any

from centauri_sdcp.const import (
    DEFAULT_BROADCAST_ADDRESS,
    DISCOVERY_PORT,
    DISCOVERY_TIMEOUT,
)
from centauri_sdcp.sdcp.const import DEBUG, LOGGER
from centauri_sdcp.sdcp.events import EventBus, EventCallback, EventChannel
from centauri_sdcp.sdcp.exceptions import SDCPDiscoveryFailedError
from centauri_sdcp.sdcp.models.printer import DiscoveredPrinter

INADDR_ANY = "0.0.0.0"  # noqa: S104


def discovery_message() -> bytes:
    """Return the probe frame broadcast to find printers."""
    return json.dumps(
        {
            "type": "discovery",
            "timestamp": int(time.time() * 1000),
            "protocol": "SDCP",
            "version": "3.0.0",
        }
    ).encode()


class DiscoveryProtocol(asyncio.DatagramProtocol):
    """
    Collects printer advertisements for one discovery run.

    Datagrams arriving after the run is closed are ignored.
    """

    def __init__(self, events: EventBus, logger: Any = LOGGER) -> None:
        """Initialize an empty result set."""
        self.events = events
        self.logger = logger
        self.transport: asyncio.DatagramTransport | None = None
        self.printers: dict[str, DiscoveredPrinter] = {}
        self.closed = False
        self.error: Exception | None = None

    def connection_made(self, transport: asyncio.DatagramTransport) -> None:
        """Handle UDP transport ready event."""
        self.transport = transport

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        """Record an advertisement unless its sender was already seen."""
        if self.closed:
            return
        ip_address = addr[0]
        if ip_address in self.printers:
            self.logger.debug("Skipping duplicate response from %s", ip_address)
            return
        try:
            printer = DiscoveredPrinter.from_datagram(data, ip_address)
        except (UnicodeDecodeError, json.JSONDecodeError):
            self.logger.debug("Unparseable discovery response from %s", ip_address)
            return
        if printer is None:
            if DEBUG:
                self.logger.debug("Ignoring non-printer datagram from %s", addr)
            return

        self.printers[ip_address] = printer
        self.logger.info("Discovered: %s (%s)", printer.name, printer.ip_address)
        self.events.emit(EventChannel.DISCOVERED, printer)

    def error_received(self, exc: Exception) -> None:
        """Keep the first socket error so the run can fail on it."""
        self.logger.warning("UDP discovery error: %s", exc)
        if self.error is None:
            self.error = exc


class DiscoveryEngine:
    """Broadcasts a discovery probe and gathers the printers that answer."""

    def __init__(self, logger: Any = LOGGER) -> None:
        """Initialize the engine with its own event bus."""
        self.logger = logger
        self.events = EventBus(logger)
        self._discovering = False

    @property
    def is_discovering(self) -> bool:
        return self._discovering

    def on(self, channel: EventChannel, callback: EventCallback) -> None:
        self.events.subscribe(channel, callback)

    def off(self, channel: EventChannel, callback: EventCallback) -> None:
        self.events.unsubscribe(channel, callback)

    async def discover(
        self,
        broadcast_address: str = DEFAULT_BROADCAST_ADDRESS,
        port: int = DISCOVERY_PORT,
        timeout: float = DISCOVERY_TIMEOUT,
    ) -> list[DiscoveredPrinter]:
        """
        Broadcast a probe and collect advertisements for the full timeout.

        Arguments:
            broadcast_address: The address the probe is sent to.
            port: The discovery port printers listen on.
            timeout: Seconds to listen for answers.

        Returns:
            One printer per distinct sender address, in arrival order.

        Raises:
            SDCPDiscoveryFailedError: If the socket cannot be opened, the
                probe cannot be sent, or a run is already in progress.

        """
        if self._discovering:
            msg = "Discovery already in progress"
            raise SDCPDiscoveryFailedError(msg)
        self._discovering = True
        try:
            printers = await self._run(broadcast_address, port, timeout)
        finally:
            self._discovering = False

        if printers:
            self.logger.debug("Discovered %s printer(s).", len(printers))
        else:
            self.logger.warning("No printers found during discovery.")
        self.events.emit(EventChannel.COMPLETE, printers)
        return printers

    async def _run(
        self, broadcast_address: str, port: int, timeout: float
    ) -> list[DiscoveredPrinter]:
        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: DiscoveryProtocol(self.events, self.logger),
                local_addr=(INADDR_ANY, 0),
                allow_broadcast=True,
            )
        except OSError as e:
            msg = f"Could not open discovery socket: {e}"
            raise SDCPDiscoveryFailedError(msg) from e

        try:
            # Datagram transports report send failures through error_received
            transport.sendto(discovery_message(), (broadcast_address, port))
            await asyncio.sleep(0)
            if protocol.error is not None:
                msg = f"Could not send discovery probe to {broadcast_address}:{port}: {protocol.error}"  # noqa: E501
                raise SDCPDiscoveryFailedError(msg) from protocol.error
            self.logger.info(
                "Discovery broadcast sent to %s:%s", broadcast_address, port
            )
            await asyncio.sleep(timeout)
        finally:
            protocol.closed = True
            transport.close()

        return list(protocol.printers.values())

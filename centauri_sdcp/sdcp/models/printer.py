"""SDCP session and discovered printer models."""

from __future__ import annotations

import json
import time
import uuid
from typing import Any

from centauri_sdcp.const import (
    DEFAULT_BRAND,
    DEFAULT_FIRMWARE_VERSION,
    DEFAULT_MACHINE_NAME,
    DEFAULT_MAINBOARD_ID,
    DEFAULT_PRINTER_NAME,
    DEFAULT_PROTOCOL_VERSION,
    VIDEO_ENDPOINT,
    VIDEO_PORT,
    WEBSOCKET_PATHS,
    WEBSOCKET_PORT,
)

from .enums import ConnectionState

ADVERTISEMENT_KEYS = ("Name", "MachineName", "MainboardID")


class Session:
    """
    One logical connection to a printer.

    Attributes:
        ip_address (str): The printer address.
        websocket_port (int): The SDCP control port.
        video_port (int): The port serving the camera stream.
        mainboard_id (str): The printer's mainboard id, empty until the first
            attributes message.
        state (ConnectionState): The connection state.
        reconnect_attempts (int): Consecutive automatic reconnect attempts.

    """

    def __init__(
        self,
        ip_address: str,
        websocket_port: int = WEBSOCKET_PORT,
        video_port: int = VIDEO_PORT,
    ) -> None:
        """Initialize a disconnected session for a printer address."""
        self.ip_address = ip_address
        self.websocket_port = websocket_port
        self.video_port = video_port
        self.mainboard_id: str = ""
        self.state = ConnectionState.DISCONNECTED
        self.reconnect_attempts = 0

    def latch_mainboard_id(self, mainboard_id: str | None) -> bool:
        """
        Record the mainboard id the first time one is seen.

        Returns:
            True if the id was stored by this call.

        """
        if self.mainboard_id or not mainboard_id:
            return False
        self.mainboard_id = str(mainboard_id)
        return True

    @property
    def websocket_urls(self) -> list[str]:
        """Candidate websocket endpoints, in the order they are tried."""
        return [
            f"ws://{self.ip_address}:{self.websocket_port}{path}"
            for path in WEBSOCKET_PATHS
        ]

    @property
    def http_url(self) -> str:
        return f"http://{self.ip_address}:{self.websocket_port}"

    @property
    def video_url(self) -> str:
        return f"http://{self.ip_address}:{self.video_port}/{VIDEO_ENDPOINT}"

    def __repr__(self) -> str:
        return (
            f"Session(ip={self.ip_address!r}, port={self.websocket_port}, "
            f"mainboard_id={self.mainboard_id!r}, state={self.state.value})"
        )


class DiscoveredPrinter:
    """
    A printer advertisement received during discovery.

    The address is the one the datagram was observed to come from. Any
    MainboardIP inside the payload is ignored.

    Example usage:

    >>> printer = DiscoveredPrinter.from_datagram(
    ...     b'{"Data": {"Name": "My Printer", "MainboardID": "ABCDEF"}}',
    ...     "192.168.1.100",
    ... )
    >>> printer.name, printer.brand, printer.ip_address
    ('My Printer', 'Elegoo', '192.168.1.100')

    """

    def __init__(self, data: dict[str, Any], ip_address: str) -> None:
        """Initialize from a decoded advertisement, filling in defaults."""
        self.id = str(uuid.uuid4())
        self.name: str = data.get("Name") or DEFAULT_PRINTER_NAME
        self.model: str = data.get("MachineName") or DEFAULT_MACHINE_NAME
        self.brand: str = data.get("BrandName") or DEFAULT_BRAND
        self.mainboard_id: str = data.get("MainboardID") or DEFAULT_MAINBOARD_ID
        self.ip_address = ip_address
        self.protocol: str = data.get("ProtocolVersion") or DEFAULT_PROTOCOL_VERSION
        self.firmware: str = data.get("FirmwareVersion") or DEFAULT_FIRMWARE_VERSION
        self.timestamp = time.time()

    @staticmethod
    def extract_advertisement(payload: Any) -> dict[str, Any] | None:
        """
        Find the advertised fields in a decoded payload.

        Printers put them at the top level, under Data, or under
        Data.Attributes. Returns None when none of Name, MachineName or
        MainboardID is present.
        """
        if not isinstance(payload, dict):
            return None
        data = payload.get("Data", payload)
        if not isinstance(data, dict):
            data = payload
        attrs = data.get("Attributes", data)
        if not isinstance(attrs, dict):
            attrs = data
        for candidate in (attrs, data, payload):
            if any(candidate.get(key) for key in ADVERTISEMENT_KEYS):
                return candidate
        return None

    @classmethod
    def from_datagram(cls, raw: bytes, ip_address: str) -> DiscoveredPrinter | None:
        """
        Build a printer from a raw discovery response.

        Raises:
            UnicodeDecodeError: If the datagram is not UTF-8.
            json.JSONDecodeError: If the datagram is not JSON.

        """
        payload = json.loads(raw.decode("utf-8"))
        advertisement = cls.extract_advertisement(payload)
        if advertisement is None:
            return None
        return cls(advertisement, ip_address)

    def to_dict(self) -> dict[str, Any]:
        """Return the printer in the shape connection forms consume."""
        return {
            "id": self.id,
            "data": {
                "Name": self.name,
                "MachineName": self.model,
                "BrandName": self.brand,
                "MainboardIP": self.ip_address,
                "MainboardID": self.mainboard_id,
                "ProtocolVersion": self.protocol,
                "FirmwareVersion": self.firmware,
            },
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return (
            f"DiscoveredPrinter(name={self.name!r}, model={self.model!r}, "
            f"id={self.mainboard_id!r}, ip={self.ip_address!r})"
        )

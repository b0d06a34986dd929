"""Asyncio client for SDCP 3D printers."""

from .discovery import DiscoveryEngine
from .sdcp import (
    EventBus,
    EventChannel,
    SDCPCommandTimeoutError,
    SDCPConfigurationError,
    SDCPConnectionFailedError,
    SDCPDiscoveryFailedError,
    SDCPError,
    SDCPNotConnectedError,
    SDCPUnsupportedCommandError,
    SDCPUploadFailedError,
)
from .websocket import SDCPClient

__all__ = [
    "DiscoveryEngine",
    "EventBus",
    "EventChannel",
    "SDCPClient",
    "SDCPCommandTimeoutError",
    "SDCPConfigurationError",
    "SDCPConnectionFailedError",
    "SDCPDiscoveryFailedError",
    "SDCPError",
    "SDCPNotConnectedError",
    "SDCPUnsupportedCommandError",
    "SDCPUploadFailedError",
]

"""SDCP protocol definitions."""

from .commands import CommandSetVersion, get_command_set
from .const import DEBUG, LOGGER
from .events import EventBus, EventChannel
from .exceptions import (
    SDCPCommandTimeoutError,
    SDCPConfigurationError,
    SDCPConnectionFailedError,
    SDCPDiscoveryFailedError,
    SDCPError,
    SDCPNotConnectedError,
    SDCPUnsupportedCommandError,
    SDCPUploadFailedError,
)

__all__ = [
    "DEBUG",
    "LOGGER",
    "CommandSetVersion",
    "EventBus",
    "EventChannel",
    "SDCPCommandTimeoutError",
    "SDCPConfigurationError",
    "SDCPConnectionFailedError",
    "SDCPDiscoveryFailedError",
    "SDCPError",
    "SDCPNotConnectedError",
    "SDCPUnsupportedCommandError",
    "SDCPUploadFailedError",
    "get_command_set",
]

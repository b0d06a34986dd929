"""Custom exceptions for the SDCP client."""

from __future__ import annotations

from typing import Any


class SDCPError(Exception):
    """Base class for other exceptions"""


class SDCPConfigurationError(SDCPError):
    """Exception raised when the client configuration is invalid."""


class SDCPConnectionFailedError(SDCPError):
    """Exception raised when no websocket endpoint accepted the handshake."""


class SDCPNotConnectedError(SDCPError):
    """Exception to indicate that the printer is not connected."""


class SDCPCommandTimeoutError(SDCPError):
    """Exception raised when a command gets no correlated response in time."""

    def __init__(self, cmd: int, request_id: str, timeout: float) -> None:
        """Store the command code and request id that timed out."""
        super().__init__(
            f"No response to cmd {cmd} (RequestID={request_id}) within {timeout}s"
        )
        self.cmd = cmd
        self.request_id = request_id
        self.timeout = timeout


class SDCPUnsupportedCommandError(SDCPError):
    """Exception raised when the active command set has no code for an operation."""


class SDCPUploadFailedError(SDCPError):
    """Exception raised when the printer rejects an upload chunk."""

    def __init__(
        self, offset: int, reason: str, response: dict[str, Any] | None = None
    ) -> None:
        """Store the offset of the rejected chunk and the acknowledgement body."""
        super().__init__(f"Upload failed at offset {offset}: {reason}")
        self.offset = offset
        self.response = response


class SDCPDiscoveryFailedError(SDCPError):
    """Exception raised when the discovery socket cannot be opened or used."""

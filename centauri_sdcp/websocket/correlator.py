"""Correlation of SDCP commands with their responses."""

from __future__ import annotations

import asyncio
import json
import secrets
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from centauri_sdcp.const import COMMAND_TIMEOUT
from centauri_sdcp.sdcp.const import LOGGER, SDCP_FROM_WEB_PC, SDCP_NAMESPACE
from centauri_sdcp.sdcp.events import EventBus, EventChannel
from centauri_sdcp.sdcp.exceptions import (
    SDCPCommandTimeoutError,
    SDCPNotConnectedError,
)

if TYPE_CHECKING:
    from centauri_sdcp.sdcp.models.printer import Session

    from .session import TransportSession


@dataclass
class PendingCommand:
    """A waiter for the response to one command."""

    request_id: str
    cmd: int
    future: asyncio.Future
    deadline: float


def build_envelope(
    cmd: int,
    data: dict[str, Any] | None,
    request_id: str,
    mainboard_id: str,
    message_id: str | None = None,
) -> dict[str, Any]:
    """Build the outbound SDCP request envelope for a command."""
    return {
        "Id": message_id or secrets.token_hex(16),
        "Data": {
            "Cmd": cmd,
            "Data": data or {},
            "RequestID": request_id,
            "MainboardID": mainboard_id,
            "TimeStamp": int(time.time()),
            "From": SDCP_FROM_WEB_PC,
        },
        "Topic": f"{SDCP_NAMESPACE}/request/{mainboard_id}",
    }


class CommandCorrelator:
    """
    Turns fire-and-forget sends into awaitable calls.

    Every command registers a PendingCommand keyed by its RequestID before
    the frame is sent. A response resolves the one waiter whose key is a
    prefix of the echoed RequestID, because firmware has been seen to append
    characters to the identifiers it echoes back.

    The pending table is only touched from the event loop and never across
    an await, so inserts, lookups and removals cannot interleave.
    """

    def __init__(
        self,
        transport: TransportSession,
        session: Session,
        events: EventBus,
        logger: Any = LOGGER,
        timeout: float = COMMAND_TIMEOUT,
    ) -> None:
        """Initialize the correlator and subscribe it to response events."""
        self.transport = transport
        self.session = session
        self.events = events
        self.logger = logger
        self.timeout = timeout
        self._pending: dict[str, PendingCommand] = {}
        events.subscribe(EventChannel.RESPONSE, self.handle_response)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    async def send_command(
        self,
        cmd: int,
        data: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Send a command and wait for its correlated response.

        Arguments:
            cmd: The numeric command code.
            data: The command payload.
            timeout: Seconds to wait for the response, defaults to the
                correlator timeout.

        Returns:
            The full response message.

        Raises:
            SDCPNotConnectedError: If the printer is not connected.
            SDCPCommandTimeoutError: If no response arrives in time.

        """
        timeout = self.timeout if timeout is None else timeout
        request_id = secrets.token_hex(16)
        envelope = build_envelope(cmd, data, request_id, self.session.mainboard_id)

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._pending[request_id] = PendingCommand(
            request_id=request_id,
            cmd=cmd,
            future=future,
            deadline=loop.time() + timeout,
        )
        try:
            await self.transport.send(json.dumps(envelope))
            return await asyncio.wait_for(future, timeout=timeout)
        except TimeoutError as e:
            self.logger.debug(
                "Timed out waiting for response to cmd %s (RequestID=%s)",
                cmd,
                request_id,
            )
            raise SDCPCommandTimeoutError(cmd, request_id, timeout) from e
        finally:
            self._pending.pop(request_id, None)

    def handle_response(self, message: Any) -> bool:
        """
        Resolve the waiter a response belongs to.

        Returns:
            True if a waiter was resolved.

        """
        if not isinstance(message, dict):
            return False
        data = message.get("Data")
        if not isinstance(data, dict):
            return False
        response_id = data.get("RequestID")
        if not isinstance(response_id, str) or not response_id:
            return False

        # Longest key wins should two pending ids ever prefix the same echo
        matches = [key for key in self._pending if response_id.startswith(key)]
        if not matches:
            self.logger.debug("No waiter found for RequestID=%s", response_id)
            return False
        pending = self._pending.pop(max(matches, key=len))
        if pending.future.done():
            return False
        pending.future.set_result(message)
        return True

    def cancel_all(self, reason: str = "Connection closed") -> None:
        """Fail every waiter, used when the session is torn down."""
        for pending in self._pending.values():
            if not pending.future.done():
                pending.future.set_exception(SDCPNotConnectedError(reason))
        self._pending.clear()

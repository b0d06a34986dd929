"""Websocket transport session for SDCP."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

import aiohttp
from aiohttp import ClientWebSocketResponse
from aiohttp.client import ClientWSTimeout

from centauri_sdcp.const import (
    CONNECT_TIMEOUT,
    HEARTBEAT_INTERVAL,
    MAX_RECONNECT_ATTEMPTS,
    PING_MESSAGE,
    RECONNECT_DELAY,
)
from centauri_sdcp.sdcp.const import DEBUG, LOGGER
from centauri_sdcp.sdcp.events import EventBus, EventChannel
from centauri_sdcp.sdcp.exceptions import (
    SDCPConnectionFailedError,
    SDCPNotConnectedError,
)
from centauri_sdcp.sdcp.models.enums import ConnectionState
from centauri_sdcp.sdcp.models.printer import Session

logging.getLogger("websocket").setLevel(logging.CRITICAL)


class TransportSession:
    """
    Owns the websocket to one printer.

    Tries the candidate endpoint paths in order, keeps the link alive with a
    text heartbeat and reconnects a bounded number of times when the printer
    drops the connection. Every timer is a task owned by this object and is
    cancelled on disconnect.
    """

    def __init__(
        self,
        session: Session,
        http_session: aiohttp.ClientSession,
        events: EventBus,
        on_message: Callable[[str], Any],
        logger: Any = LOGGER,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        max_reconnect_attempts: int = MAX_RECONNECT_ATTEMPTS,
        reconnect_delay: float = RECONNECT_DELAY,
    ) -> None:
        """
        Initialize a transport session.

        Arguments:
            session: The session record this transport drives.
            http_session: The aiohttp client session used to open websockets.
            events: Bus the connected/disconnected events are emitted on.
            on_message: Called with every inbound text frame, in arrival order.
            logger: The logger to use.
            connect_timeout: Seconds allowed for each endpoint handshake.
            heartbeat_interval: Seconds between liveness probes.
            max_reconnect_attempts: Reconnect ceiling after an unexpected close.
            reconnect_delay: Seconds to wait before each reconnect attempt.

        """
        self.session = session
        self.events = events
        self.logger = logger
        self.connect_timeout = connect_timeout
        self.heartbeat_interval = heartbeat_interval
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self._http_session = http_session
        self._on_message = on_message
        self._websocket: ClientWebSocketResponse | None = None
        self._connected_url: str | None = None
        self._listener_task: asyncio.Task | None = None
        self._heartbeat_task: asyncio.Task | None = None
        self._reconnect_task: asyncio.Task | None = None
        self._explicit_close = False

    @property
    def state(self) -> ConnectionState:
        return self.session.state

    @property
    def is_connected(self) -> bool:
        """Return true if the websocket is open."""
        return (
            self.session.state == ConnectionState.CONNECTED
            and self._websocket is not None
            and not self._websocket.closed
        )

    @property
    def connected_url(self) -> str | None:
        return self._connected_url

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    async def connect(
        self,
        ip_address: str | None = None,
        websocket_port: int | None = None,
        video_port: int | None = None,
    ) -> str:
        """
        Open the websocket, trying each candidate endpoint in order.

        Arguments left as None keep the session's last known values.

        Returns:
            The URL of the endpoint that accepted the handshake.

        Raises:
            SDCPConnectionFailedError: If no candidate endpoint accepted.

        """
        target_changed = (
            (ip_address is not None and ip_address != self.session.ip_address)
            or (
                websocket_port is not None
                and websocket_port != self.session.websocket_port
            )
            or (video_port is not None and video_port != self.session.video_port)
        )
        if self.is_connected and not target_changed:
            self.logger.debug("Already connected to %s", self._connected_url)
            return self._connected_url or ""
        if self.is_connected:
            await self.disconnect()

        await self._cancel_reconnect()
        self._explicit_close = False
        if ip_address is not None:
            self.session.ip_address = ip_address
        if websocket_port is not None:
            self.session.websocket_port = websocket_port
        if video_port is not None:
            self.session.video_port = video_port
        self.session.reconnect_attempts = 0
        return await self._open()

    async def disconnect(self) -> None:
        """Close the connection and suppress any automatic reconnect."""
        self.logger.info("Closing connection to printer")
        self._explicit_close = True
        await self._cancel_reconnect()
        await self._stop_heartbeat()
        if self._listener_task and self._listener_task is not asyncio.current_task():
            self._listener_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._listener_task
        self._listener_task = None
        if self._websocket and not self._websocket.closed:
            await self._websocket.close()
        self._websocket = None
        self._connected_url = None
        self.session.state = ConnectionState.DISCONNECTED
        self.events.emit(EventChannel.DISCONNECTED)

    async def send(self, message: str) -> None:
        """
        Send a text frame to the printer.

        Raises:
            SDCPNotConnectedError: If the websocket is not open.

        """
        if not self.is_connected or self._websocket is None:
            msg = "Printer not connected, cannot send message."
            raise SDCPNotConnectedError(msg)
        if DEBUG:
            self.logger.debug("printer << %s", message)
        await self._websocket.send_str(message)

    async def _open(self) -> str:
        self.session.state = ConnectionState.CONNECTING
        for url in self.session.websocket_urls:
            self.logger.debug("Attempting to connect to %s", url)
            try:
                websocket = await asyncio.wait_for(
                    self._http_session.ws_connect(url, timeout=ClientWSTimeout()),
                    timeout=self.connect_timeout,
                )
            except (TimeoutError, aiohttp.ClientError, OSError) as e:
                self.logger.debug("Websocket endpoint %s refused: %s", url, e)
                continue
            await self._on_open(websocket, url)
            return url

        self.session.state = ConnectionState.DISCONNECTED
        msg = f"Failed to connect to any websocket endpoint on {self.session.ip_address}"
        raise SDCPConnectionFailedError(msg)

    async def _on_open(self, websocket: ClientWebSocketResponse, url: str) -> None:
        self._websocket = websocket
        self._connected_url = url
        self.session.state = ConnectionState.CONNECTED
        self.session.reconnect_attempts = 0
        self.logger.info("Connected to printer at %s", url)
        try:
            await websocket.send_str(PING_MESSAGE)
        except (ConnectionResetError, aiohttp.ClientError):
            self.logger.debug("Failed to send initial ping", exc_info=DEBUG)
        self._heartbeat_task = asyncio.create_task(self._heartbeat())
        self._listener_task = asyncio.create_task(self._ws_listener(websocket))
        self.events.emit(EventChannel.CONNECTED, url)

    async def _heartbeat(self) -> None:
        """Send a liveness probe every heartbeat interval while connected."""
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            if not self.is_connected or self._websocket is None:
                continue
            try:
                await self._websocket.send_str(PING_MESSAGE)
            except (ConnectionResetError, aiohttp.ClientError) as e:
                self.logger.debug("Heartbeat failed: %s", e)

    async def _stop_heartbeat(self) -> None:
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None

    async def _ws_listener(self, websocket: ClientWebSocketResponse) -> None:
        """Hand every inbound frame to the dispatcher until the socket closes."""
        try:
            async for msg in websocket:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._on_message(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    try:
                        self._on_message(msg.data.decode("utf-8"))
                    except UnicodeDecodeError:
                        self.logger.debug("Dropping undecodable binary frame")
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self.logger.debug(
                        "WebSocket connection error: %s", websocket.exception()
                    )
                    break
        except asyncio.CancelledError:
            self.logger.debug("WebSocket listener cancelled.")
            raise
        except (aiohttp.ClientError, OSError) as e:
            self.logger.debug("WebSocket listener exception: %s", e)
        self.logger.info("WebSocket listener stopped.")
        await self._on_unexpected_close(websocket)

    async def _on_unexpected_close(self, websocket: ClientWebSocketResponse) -> None:
        # A listener for a socket that has since been replaced must not touch
        # the current connection
        if self._explicit_close or websocket is not self._websocket:
            return
        self.logger.info("Connection to printer lost")
        await self._stop_heartbeat()
        if self._websocket and not self._websocket.closed:
            await self._websocket.close()
        self._websocket = None
        self._connected_url = None
        self._listener_task = None
        self.session.state = ConnectionState.DISCONNECTED
        self.events.emit(EventChannel.DISCONNECTED)
        self._reconnect_task = asyncio.create_task(self._reconnect())

    async def _reconnect(self) -> None:
        """Retry the last known target until the attempt ceiling is reached."""
        while self.session.reconnect_attempts < self.max_reconnect_attempts:
            self.session.reconnect_attempts += 1
            self.logger.info(
                "Attempting to reconnect (%s/%s)...",
                self.session.reconnect_attempts,
                self.max_reconnect_attempts,
            )
            await asyncio.sleep(self.reconnect_delay)
            if self._explicit_close:
                return
            try:
                await self._open()
            except SDCPConnectionFailedError:
                self.logger.debug(
                    "Reconnect attempt %s failed", self.session.reconnect_attempts
                )
            else:
                return
        self.logger.warning(
            "Giving up on %s after %s reconnect attempts",
            self.session.ip_address,
            self.max_reconnect_attempts,
        )

    async def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

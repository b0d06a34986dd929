"""SDCP Websocket Client."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import aiohttp

from centauri_sdcp.config import validate_config
from centauri_sdcp.const import (
    CONF_COMMAND_SET,
    CONF_COMMAND_TIMEOUT,
    CONF_HEARTBEAT_INTERVAL,
    CONF_IP,
    CONF_MAX_RECONNECT_ATTEMPTS,
    CONF_RECONNECT_DELAY,
    CONF_VIDEO_PORT,
    CONF_WEBSOCKET_PORT,
)
from centauri_sdcp.sdcp.commands import Command, CommandSet, get_command_set
from centauri_sdcp.sdcp.const import LOGGER
from centauri_sdcp.sdcp.events import EventBus, EventCallback, EventChannel
from centauri_sdcp.sdcp.models.enums import Axis, ConnectionState, Fan, VideoStatus
from centauri_sdcp.sdcp.models.printer import Session
from centauri_sdcp.sdcp.models.video import Video
from centauri_sdcp.transfer.uploader import ChunkedUploader, ProgressCallback

from .correlator import CommandCorrelator
from .dispatcher import MessageDispatcher
from .session import TransportSession


class SDCPClient:
    """
    Client for controlling one printer over SDCP.

    Uses the SDCP Protocol (https://github.com/cbd-tech/SDCP-Smart-Device-Control-Protocol-V3.0.0).
    Every printer operation is a command code plus a payload taken from the
    configured command set and sent through send_command.
    """  # noqa: E501

    def __init__(
        self,
        config: Mapping[str, Any],
        session: aiohttp.ClientSession,
        logger: Any = LOGGER,
    ) -> None:
        """
        Initialize an SDCPClient.

        Arguments:
            config: The printer config, see centauri_sdcp.config.CONFIG_SCHEMA.
            session: The aiohttp client session.
            logger: The logger to use.

        Raises:
            SDCPConfigurationError: If the config is invalid.

        """
        self.config: MappingProxyType[str, Any] = validate_config(config)
        self.logger = logger
        self.session = Session(
            self.config[CONF_IP],
            self.config[CONF_WEBSOCKET_PORT],
            self.config[CONF_VIDEO_PORT],
        )
        self.commands: CommandSet = get_command_set(self.config[CONF_COMMAND_SET])
        self.events = EventBus(logger)
        self.dispatcher = MessageDispatcher(self.session, self.events, logger)
        self.transport = TransportSession(
            self.session,
            session,
            self.events,
            self.dispatcher.dispatch,
            logger,
            heartbeat_interval=self.config[CONF_HEARTBEAT_INTERVAL],
            max_reconnect_attempts=self.config[CONF_MAX_RECONNECT_ATTEMPTS],
            reconnect_delay=self.config[CONF_RECONNECT_DELAY],
        )
        self.correlator = CommandCorrelator(
            self.transport,
            self.session,
            self.events,
            logger,
            timeout=self.config[CONF_COMMAND_TIMEOUT],
        )
        self.uploader = ChunkedUploader(self.session, session, logger)

    @property
    def is_connected(self) -> bool:
        """Return true if the client is connected to the printer."""
        return self.transport.is_connected

    @property
    def state(self) -> ConnectionState:
        return self.session.state

    @property
    def mainboard_id(self) -> str:
        return self.session.mainboard_id

    def on(self, channel: EventChannel, callback: EventCallback) -> None:
        """Subscribe a callback to an event channel."""
        self.events.subscribe(channel, callback)

    def off(self, channel: EventChannel, callback: EventCallback) -> None:
        """Unsubscribe a callback from an event channel."""
        self.events.unsubscribe(channel, callback)

    async def connect(
        self,
        ip_address: str | None = None,
        websocket_port: int | None = None,
        video_port: int | None = None,
    ) -> str:
        """
        Connect to the printer, defaulting to the configured address and ports.

        Returns:
            The websocket URL that accepted the connection.

        Raises:
            SDCPConnectionFailedError: If no websocket endpoint accepted.

        """
        self.logger.info(
            "Connecting to printer at %s", ip_address or self.session.ip_address
        )
        return await self.transport.connect(ip_address, websocket_port, video_port)

    async def disconnect(self) -> None:
        """Disconnect from the printer and fail any command still waiting."""
        await self.transport.disconnect()
        self.correlator.cancel_all("Disconnected from printer")

    async def close(self) -> None:
        """Disconnect and drop every subscriber."""
        await self.disconnect()
        self.events.clear()

    async def send_command(
        self, cmd: int, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Send any command code and wait for the printer's response.

        Raises:
            SDCPNotConnectedError: If the printer is not connected.
            SDCPCommandTimeoutError: If no response arrives in time.

        """
        return await self.correlator.send_command(cmd, data)

    async def _run(self, command: Command) -> dict[str, Any]:
        return await self.send_command(command.cmd, command.data)

    async def get_printer_status(self) -> dict[str, Any]:
        """Ask the printer to push a fresh status message."""
        return await self._run(self.commands.request_status())

    async def get_printer_attributes(self) -> dict[str, Any]:
        """Ask the printer to push its attributes, which carry the MainboardID."""
        return await self._run(self.commands.request_attributes())

    async def start_print(
        self,
        filename: str,
        start_layer: int = 0,
        *,
        calibration: bool = False,
        platform_type: int = 0,
        time_lapse: bool = False,
    ) -> dict[str, Any]:
        """
        Start printing a file stored on the printer.

        Arguments:
            filename: The file to print, as listed by get_file_list.
            start_layer: The layer to start from.
            calibration: Run bed leveling before printing.
            platform_type: Build plate type, 0 for plate A.
            time_lapse: Record a time-lapse of the print.

        """
        return await self._run(
            self.commands.start_print(
                filename,
                start_layer,
                calibration=calibration,
                platform_type=platform_type,
                time_lapse=time_lapse,
            )
        )

    async def print_pause(self) -> dict[str, Any]:
        """Pause the current print."""
        return await self._run(self.commands.pause_print())

    async def print_stop(self) -> dict[str, Any]:
        """Stop the current print."""
        return await self._run(self.commands.stop_print())

    async def print_resume(self) -> dict[str, Any]:
        """Resume/continue the current print."""
        return await self._run(self.commands.continue_print())

    async def stop_material_feeding(self) -> dict[str, Any]:
        return await self._run(self.commands.stop_material_feeding())

    async def skip_preheating(self) -> dict[str, Any]:
        return await self._run(self.commands.skip_preheating())

    async def rename_printer(self, name: str) -> dict[str, Any]:
        return await self._run(self.commands.change_printer_name(name))

    async def set_print_speed(self, percentage: int) -> dict[str, Any]:
        """
        Set the print speed.

        percentage: 0 to 160
        """
        return await self._run(self.commands.set_print_speed(percentage))

    async def set_temperature(
        self, nozzle: int | None = None, bed: int | None = None
    ) -> dict[str, Any] | None:
        """
        Set target nozzle and/or bed temperatures.

        Returns the response to the last command sent, or None if neither
        target was given.
        """
        response = None
        for command in self.commands.set_temperature(nozzle, bed):
            response = await self._run(command)
        return response

    async def set_target_nozzle_temp(self, temperature: int) -> dict[str, Any] | None:
        """Set the target nozzle temperature."""
        return await self.set_temperature(nozzle=temperature)

    async def set_target_bed_temp(self, temperature: int) -> dict[str, Any] | None:
        """Set the target bed temperature."""
        return await self.set_temperature(bed=temperature)

    async def set_fan_speed(self, fans: Mapping[Fan | str, int]) -> dict[str, Any]:
        """
        Set one or more fan speeds.

        fans: fan to percentage (0 to 100)
        """
        speeds = {Fan(fan).value: pct for fan, pct in fans.items()}
        return await self._run(self.commands.set_fan_speed(speeds))

    async def set_lighting(
        self,
        *,
        enabled: bool,
        rgb: tuple[int, int, int] | None = None,
        brightness: int = 100,
    ) -> dict[str, Any]:
        """Switch the light and optionally set its RGB colour."""
        return await self._run(
            self.commands.set_lighting(enabled=enabled, rgb=rgb, brightness=brightness)
        )

    async def get_file_list(self, path: str = "/local/") -> dict[str, Any]:
        return await self._run(self.commands.retrieve_file_list(path))

    async def delete_files(
        self, files: list[str], folders: list[str] | None = None
    ) -> dict[str, Any]:
        return await self._run(self.commands.delete_files(files, folders))

    async def move_axis(self, axis: Axis | str, distance: float) -> dict[str, Any]:
        """Jog an axis by distance millimetres."""
        return await self._run(self.commands.move_axis(Axis(axis).value, distance))

    async def home_axis(self, axis: Axis | str = Axis.XYZ) -> dict[str, Any]:
        return await self._run(self.commands.home_axis(Axis(axis).value))

    async def enable_video_stream(self) -> Video:
        """
        Enable the camera stream and publish its URL on the video_url channel.

        Falls back to the session's video port when the response carries no
        URL. Nothing is published if the printer refuses the stream.
        """
        response = await self._run(self.commands.set_video_stream(enable=True))
        data = response.get("Data", {})
        video = Video(data.get("Data") if isinstance(data, dict) else None)
        if video.status != VideoStatus.SUCCESS:
            self.logger.warning("Printer refused video stream: %s", video.status)
            return video
        if not video.video_url:
            video.video_url = self.session.video_url
        self.events.emit(EventChannel.VIDEO_URL, video.video_url)
        return video

    async def disable_video_stream(self) -> dict[str, Any]:
        response = await self._run(self.commands.set_video_stream(enable=False))
        self.events.emit(EventChannel.VIDEO_URL, None)
        return response

    async def get_history_tasks(self) -> dict[str, Any]:
        return await self._run(self.commands.retrieve_historical_tasks())

    async def get_task_details(self, task_ids: list[str]) -> dict[str, Any]:
        return await self._run(self.commands.retrieve_task_details(task_ids))

    async def set_time_lapse(self, *, enable: bool) -> dict[str, Any]:
        return await self._run(self.commands.set_time_lapse(enable=enable))

    async def terminate_file_transfer(self, uuid: str, filename: str) -> dict[str, Any]:
        """Tell the printer to abandon a partially uploaded file."""
        return await self._run(self.commands.terminate_file_transfer(uuid, filename))

    async def send_gcode(self, gcode: str) -> dict[str, Any]:
        """
        Send a raw G-code line.

        Raises:
            SDCPUnsupportedCommandError: If the command set has no G-code command.

        """
        return await self._run(self.commands.send_gcode(gcode))

    async def upload_file(
        self,
        filename: str,
        data: bytes,
        on_progress: ProgressCallback | None = None,
        *,
        uuid: str | None = None,
        offset: int = 0,
    ) -> dict[str, Any] | None:
        """
        Upload a file to the printer in 1 MiB chunks.

        Raises:
            SDCPUploadFailedError: If the printer rejects a chunk.

        """
        return await self.uploader.upload_file(
            filename, data, on_progress, uuid=uuid, offset=offset
        )

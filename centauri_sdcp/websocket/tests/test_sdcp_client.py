"""Tests for the SDCPClient."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from centauri_sdcp.const import CONF_COMMAND_SET, CONF_IP
from centauri_sdcp.sdcp.events import EventChannel
from centauri_sdcp.sdcp.exceptions import (
    SDCPConfigurationError,
    SDCPNotConnectedError,
    SDCPUnsupportedCommandError,
)
from centauri_sdcp.sdcp.models.enums import Axis, Fan, VideoStatus
from centauri_sdcp.websocket.client import SDCPClient

PRINTER_IP = "10.0.0.5"
MAINBOARD_ID = "3c4c1a910147017000002c0000000000"


def ack(data: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"Data": {"Cmd": 0, "Data": data or {"Ack": 0}, "RequestID": "r"}}


@pytest.fixture
def client(mock_client_session: MagicMock) -> SDCPClient:
    """Create a client whose correlator is mocked."""
    client = SDCPClient({CONF_IP: PRINTER_IP}, mock_client_session, Mock())
    client.correlator.send_command = AsyncMock(return_value=ack())
    return client


@pytest.fixture
def legacy_client(mock_client_session: MagicMock) -> SDCPClient:
    """Create a legacy firmware client whose correlator is mocked."""
    client = SDCPClient(
        {CONF_IP: PRINTER_IP, CONF_COMMAND_SET: "legacy"}, mock_client_session, Mock()
    )
    client.correlator.send_command = AsyncMock(return_value=ack())
    return client


def sent(client: SDCPClient) -> list[tuple[int, dict[str, Any]]]:
    return [call.args for call in client.correlator.send_command.call_args_list]


class TestSDCPClient:
    """Test cases for the SDCPClient operations."""

    def test_invalid_config(self, mock_client_session: MagicMock) -> None:
        """Test construction fails on a config without an address."""
        with pytest.raises(SDCPConfigurationError):
            SDCPClient({}, mock_client_session)

    def test_initial_state(self, client: SDCPClient) -> None:
        """Test a new client is disconnected and has no mainboard id."""
        assert not client.is_connected
        assert client.mainboard_id == ""
        assert client.session.http_url == f"http://{PRINTER_IP}:3030"

    @pytest.mark.anyio
    async def test_print_controls(self, client: SDCPClient) -> None:
        """Test each print control sends its command code."""
        await client.get_printer_status()
        await client.get_printer_attributes()
        await client.print_pause()
        await client.print_stop()
        await client.print_resume()

        assert [cmd for cmd, _ in sent(client)] == [0, 1, 129, 130, 131]

    @pytest.mark.anyio
    async def test_start_print(self, client: SDCPClient) -> None:
        """Test start print carries the filename and options."""
        await client.start_print("cube.gcode", calibration=True)

        cmd, data = sent(client)[0]
        assert cmd == 128
        assert data["Filename"] == "cube.gcode"
        assert data["StartLayer"] == 0
        assert data["Calibration_switch"] == 1

    @pytest.mark.anyio
    async def test_control_device(self, client: SDCPClient) -> None:
        """Test speed, temperature and fans share one control command."""
        await client.set_print_speed(200)
        await client.set_temperature(nozzle=215, bed=60)
        await client.set_fan_speed({Fan.MODEL_FAN: 80, "BoxFan": 120})

        assert sent(client) == [
            (403, {"PrintSpeedPct": 160}),
            (403, {"TempTargetNozzle": 215, "TempTargetHotbed": 60}),
            (403, {"TargetFanSpeed": {"ModelFan": 80, "BoxFan": 100}}),
        ]

    @pytest.mark.anyio
    async def test_set_temperature_without_targets(self, client: SDCPClient) -> None:
        """Test nothing is sent when no temperature is given."""
        assert await client.set_temperature() is None
        client.correlator.send_command.assert_not_called()

    @pytest.mark.anyio
    async def test_axes_and_files(self, client: SDCPClient) -> None:
        """Test axis and file operations."""
        await client.move_axis(Axis.Z, 10)
        await client.home_axis()
        await client.get_file_list()
        await client.delete_files(["a.gcode"])

        codes = [cmd for cmd, _ in sent(client)]
        assert codes == [401, 402, 258, 259]
        assert sent(client)[0][1] == {"Axis": "Z", "Step": 10}
        assert sent(client)[1][1] == {"Axis": "XYZ"}

    @pytest.mark.anyio
    async def test_legacy_command_set(self, legacy_client: SDCPClient) -> None:
        """Test legacy firmware gets its own command codes."""
        await legacy_client.set_print_speed(50)
        await legacy_client.set_temperature(nozzle=200, bed=55)
        await legacy_client.home_axis("Z")

        assert [cmd for cmd, _ in sent(legacy_client)] == [256, 257, 258, 513]

    @pytest.mark.anyio
    async def test_send_gcode(
        self, client: SDCPClient, legacy_client: SDCPClient
    ) -> None:
        """Test G-code is only available on command sets that define it."""
        await client.send_gcode("G28")
        assert sent(client) == [(256, {"Gcode": "G28"})]

        with pytest.raises(SDCPUnsupportedCommandError):
            await legacy_client.send_gcode("G28")

    @pytest.mark.anyio
    async def test_enable_video_publishes_url(self, client: SDCPClient) -> None:
        """Test a successful enable publishes the printer's stream URL."""
        url = f"http://{PRINTER_IP}:3031/video"
        client.correlator.send_command.return_value = ack(
            {"Ack": 0, "VideoUrl": url}
        )
        on_url = Mock()
        client.on(EventChannel.VIDEO_URL, on_url)

        video = await client.enable_video_stream()

        assert sent(client) == [(386, {"Enable": 1})]
        assert video.status == VideoStatus.SUCCESS
        on_url.assert_called_once_with(url)

    @pytest.mark.anyio
    async def test_enable_video_falls_back_to_session_url(
        self, client: SDCPClient
    ) -> None:
        """Test a response without a URL uses the video port."""
        on_url = Mock()
        client.on(EventChannel.VIDEO_URL, on_url)

        video = await client.enable_video_stream()

        assert video.video_url == f"http://{PRINTER_IP}:3031/video"
        on_url.assert_called_once_with(video.video_url)

    @pytest.mark.anyio
    async def test_enable_video_refused(self, client: SDCPClient) -> None:
        """Test nothing is published when the printer refuses the stream."""
        client.correlator.send_command.return_value = ack({"Ack": 1})
        on_url = Mock()
        client.on(EventChannel.VIDEO_URL, on_url)

        video = await client.enable_video_stream()

        assert video.status == VideoStatus.EXCEEDED_MAX_STREAMS
        on_url.assert_not_called()

    @pytest.mark.anyio
    async def test_disable_video(self, client: SDCPClient) -> None:
        """Test disabling the stream clears the published URL."""
        on_url = Mock()
        client.on(EventChannel.VIDEO_URL, on_url)

        await client.disable_video_stream()

        assert sent(client) == [(386, {"Enable": 0})]
        on_url.assert_called_once_with(None)

    @pytest.mark.anyio
    async def test_upload_delegates(self, client: SDCPClient) -> None:
        """Test uploads go through the chunked uploader."""
        client.uploader.upload_file = AsyncMock(return_value={"Code": 0})
        progress = Mock()

        result = await client.upload_file("a.gcode", b"data", progress, offset=2)

        assert result == {"Code": 0}
        client.uploader.upload_file.assert_awaited_once_with(
            "a.gcode", b"data", progress, uuid=None, offset=2
        )
        client.correlator.send_command.assert_not_called()


class TestSDCPClientOverWebsocket:
    """Test the client wired to a fake printer websocket."""

    @pytest.mark.anyio
    async def test_attributes_then_command(
        self,
        mock_client_session: MagicMock,
        fake_websocket_factory,
        wait_for,
    ) -> None:
        """Test the mainboard id is learned and a command round-trips."""
        websocket = fake_websocket_factory()
        mock_client_session.ws_connect.return_value = websocket
        client = SDCPClient({CONF_IP: PRINTER_IP}, mock_client_session, Mock())
        attributes = Mock()
        client.on(EventChannel.ATTRIBUTES, attributes)

        await client.connect()
        websocket.feed(
            {
                "Attributes": {"Name": "Centauri", "MainboardID": MAINBOARD_ID},
                "Topic": f"sdcp/attributes/{MAINBOARD_ID}",
            }
        )
        await wait_for(lambda: client.mainboard_id == MAINBOARD_ID)

        task = asyncio.create_task(client.get_printer_status())
        await wait_for(lambda: len(websocket.sent_commands()) == 1)
        request = websocket.sent_commands()[0]
        assert request["Data"]["MainboardID"] == MAINBOARD_ID
        assert request["Topic"] == f"sdcp/request/{MAINBOARD_ID}"

        websocket.feed(
            {
                "Data": {
                    "Cmd": 0,
                    "Data": {"Ack": 0},
                    "RequestID": request["Data"]["RequestID"],
                },
                "Topic": f"sdcp/response/{MAINBOARD_ID}",
            }
        )
        result = await task

        assert result["Data"]["Data"] == {"Ack": 0}
        attributes.assert_called_once()
        await client.close()

    @pytest.mark.anyio
    async def test_disconnect_fails_waiters(
        self,
        mock_client_session: MagicMock,
        fake_websocket_factory,
        wait_for,
    ) -> None:
        """Test a command still waiting fails when the client disconnects."""
        websocket = fake_websocket_factory()
        mock_client_session.ws_connect.return_value = websocket
        client = SDCPClient({CONF_IP: PRINTER_IP}, mock_client_session, Mock())
        await client.connect()

        task = asyncio.create_task(client.print_pause())
        await wait_for(lambda: client.correlator.pending_count == 1)
        await client.disconnect()

        with pytest.raises(SDCPNotConnectedError):
            await task
        assert not client.is_connected

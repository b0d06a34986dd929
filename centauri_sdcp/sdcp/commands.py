"""
Versioned SDCP command tables.

Firmware revisions disagree on which numeric code drives which operation and
on the payload each code expects. The direct V3 firmware multiplexes speed,
temperature, fan and lighting targets onto one "control device" code, while
the older proxy firmware gives each its own code. Each table below maps the
logical operations onto one firmware's codes. The tables are never merged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, NamedTuple

from .const import (
    CMD_BATCH_DELETE_FILES,
    CMD_CHANGE_PRINTER_NAME,
    CMD_CONTINUE_PRINT,
    CMD_CONTROL_DEVICE,
    CMD_PAUSE_PRINT,
    CMD_REQUEST_ATTRIBUTES,
    CMD_REQUEST_STATUS_REFRESH,
    CMD_RETRIEVE_FILE_LIST,
    CMD_RETRIEVE_HISTORICAL_TASKS,
    CMD_RETRIEVE_TASK_DETAILS,
    CMD_SEND_GCODE,
    CMD_SET_TIME_LAPSE_PHOTOGRAPHY,
    CMD_SET_VIDEO_STREAM,
    CMD_SKIP_PREHEATING,
    CMD_START_PRINT,
    CMD_STOP_MATERIAL_FEEDING,
    CMD_STOP_PRINT,
    CMD_TERMINATE_FILE_TRANSFER,
    CMD_XYZ_HOME_CONTROL,
    CMD_XYZ_MOVE_CONTROL,
)
from .exceptions import SDCPUnsupportedCommandError

# Legacy (proxy firmware) codes
LEGACY_CMD_CHANGE_PRINTER_NAME = 134
LEGACY_CMD_SET_PRINT_SPEED = 256
LEGACY_CMD_SET_NOZZLE_TEMP = 257
LEGACY_CMD_SET_BED_TEMP = 258
LEGACY_CMD_SET_FAN_SPEED = 259
LEGACY_CMD_SET_LIGHTING = 260
LEGACY_CMD_RETRIEVE_FILE_LIST = 385
LEGACY_CMD_DELETE_FILES = 386
LEGACY_CMD_HOME_AXIS = 513
LEGACY_CMD_MOVE_AXIS = 514
LEGACY_CMD_ENABLE_VIDEO = 768
LEGACY_CMD_DISABLE_VIDEO = 769
LEGACY_CMD_RETRIEVE_HISTORICAL_TASKS = 896
LEGACY_CMD_RETRIEVE_TASK_DETAILS = 897
LEGACY_CMD_ENABLE_TIME_LAPSE = 1024
LEGACY_CMD_DISABLE_TIME_LAPSE = 1025
LEGACY_CMD_TERMINATE_FILE_TRANSFER = 1280

MAX_PRINT_SPEED_PCT = 160
MAX_NOZZLE_TEMP = 320
MAX_BED_TEMP = 110


class CommandSetVersion(Enum):
    """
    Firmware families with their own command code table.

    Attributes:
        V3: Direct SDCP V3 firmware (Centauri Carbon and current resin printers).
        LEGACY: Older firmware reached through the vendor proxy.

    """

    V3 = "v3"
    LEGACY = "legacy"


class Command(NamedTuple):
    """A numeric command code and the payload that goes with it."""

    cmd: int
    data: dict[str, Any]


def _clamp(value: float, upper: int) -> int:
    return max(0, min(upper, int(value)))


class CommandSet(ABC):
    """
    Operations whose codes and payloads are identical on every firmware.

    Subclasses supply the operations that differ between firmware families.
    """

    version: CommandSetVersion

    def request_status(self) -> Command:
        return Command(CMD_REQUEST_STATUS_REFRESH, {})

    def request_attributes(self) -> Command:
        return Command(CMD_REQUEST_ATTRIBUTES, {})

    def start_print(
        self,
        filename: str,
        start_layer: int = 0,
        *,
        calibration: bool = False,
        platform_type: int = 0,
        time_lapse: bool = False,
    ) -> Command:
        """Start printing a file already stored on the printer."""
        return Command(
            CMD_START_PRINT,
            {
                "Filename": filename,
                "StartLayer": start_layer,
                "Calibration_switch": int(calibration),
                "PrintPlatformType": platform_type,
                "Tlp_Switch": int(time_lapse),
            },
        )

    def pause_print(self) -> Command:
        return Command(CMD_PAUSE_PRINT, {})

    def stop_print(self) -> Command:
        return Command(CMD_STOP_PRINT, {})

    def continue_print(self) -> Command:
        return Command(CMD_CONTINUE_PRINT, {})

    def stop_material_feeding(self) -> Command:
        return Command(CMD_STOP_MATERIAL_FEEDING, {})

    def skip_preheating(self) -> Command:
        return Command(CMD_SKIP_PREHEATING, {})

    def send_gcode(self, gcode: str) -> Command:
        msg = f"{self.version.value} firmware does not accept raw G-code"
        raise SDCPUnsupportedCommandError(msg)

    @abstractmethod
    def change_printer_name(self, name: str) -> Command:
        ...

    @abstractmethod
    def set_print_speed(self, percentage: int) -> Command:
        ...

    @abstractmethod
    def set_temperature(
        self, nozzle: int | None = None, bed: int | None = None
    ) -> list[Command]:
        ...

    @abstractmethod
    def set_fan_speed(self, fans: dict[str, int]) -> Command:
        ...

    @abstractmethod
    def set_lighting(
        self,
        *,
        enabled: bool,
        rgb: tuple[int, int, int] | None = None,
        brightness: int = 100,
    ) -> Command:
        ...

    @abstractmethod
    def retrieve_file_list(self, path: str = "/local/") -> Command:
        ...

    @abstractmethod
    def delete_files(
        self, files: list[str], folders: list[str] | None = None
    ) -> Command:
        ...

    @abstractmethod
    def move_axis(self, axis: str, distance: float) -> Command:
        ...

    @abstractmethod
    def home_axis(self, axis: str) -> Command:
        ...

    @abstractmethod
    def set_video_stream(self, *, enable: bool) -> Command:
        ...

    @abstractmethod
    def retrieve_historical_tasks(self) -> Command:
        ...

    @abstractmethod
    def retrieve_task_details(self, task_ids: list[str]) -> Command:
        ...

    @abstractmethod
    def set_time_lapse(self, *, enable: bool) -> Command:
        ...

    @abstractmethod
    def terminate_file_transfer(self, uuid: str, filename: str) -> Command:
        ...


class V3CommandSet(CommandSet):
    """
    Command table for direct SDCP V3 firmware.

    Speed, temperature, fan and lighting targets all travel on
    CMD_CONTROL_DEVICE with a differently shaped payload.
    """

    version = CommandSetVersion.V3

    def send_gcode(self, gcode: str) -> Command:
        return Command(CMD_SEND_GCODE, {"Gcode": gcode})

    def change_printer_name(self, name: str) -> Command:
        return Command(CMD_CHANGE_PRINTER_NAME, {"Name": name})

    def set_print_speed(self, percentage: int) -> Command:
        """Percentage is clamped to 0..160."""
        pct = _clamp(percentage, MAX_PRINT_SPEED_PCT)
        return Command(CMD_CONTROL_DEVICE, {"PrintSpeedPct": pct})

    def set_temperature(
        self, nozzle: int | None = None, bed: int | None = None
    ) -> list[Command]:
        data: dict[str, Any] = {}
        if nozzle is not None:
            data["TempTargetNozzle"] = _clamp(nozzle, MAX_NOZZLE_TEMP)
        if bed is not None:
            data["TempTargetHotbed"] = _clamp(bed, MAX_BED_TEMP)
        if not data:
            return []
        return [Command(CMD_CONTROL_DEVICE, data)]

    def set_fan_speed(self, fans: dict[str, int]) -> Command:
        speeds = {name: _clamp(pct, 100) for name, pct in fans.items()}
        return Command(CMD_CONTROL_DEVICE, {"TargetFanSpeed": speeds})

    def set_lighting(
        self,
        *,
        enabled: bool,
        rgb: tuple[int, int, int] | None = None,
        brightness: int = 100,
    ) -> Command:
        data: dict[str, Any] = {"LightStatus": {"SecondLight": int(enabled)}}
        if rgb is not None:
            data["RgbLight"] = list(rgb)
        return Command(CMD_CONTROL_DEVICE, data)

    def retrieve_file_list(self, path: str = "/local/") -> Command:
        return Command(CMD_RETRIEVE_FILE_LIST, {"Url": path})

    def delete_files(
        self, files: list[str], folders: list[str] | None = None
    ) -> Command:
        return Command(
            CMD_BATCH_DELETE_FILES,
            {"FileList": list(files), "FolderList": list(folders or [])},
        )

    def move_axis(self, axis: str, distance: float) -> Command:
        return Command(CMD_XYZ_MOVE_CONTROL, {"Axis": axis, "Step": distance})

    def home_axis(self, axis: str) -> Command:
        return Command(CMD_XYZ_HOME_CONTROL, {"Axis": axis})

    def set_video_stream(self, *, enable: bool) -> Command:
        return Command(CMD_SET_VIDEO_STREAM, {"Enable": int(enable)})

    def retrieve_historical_tasks(self) -> Command:
        return Command(CMD_RETRIEVE_HISTORICAL_TASKS, {})

    def retrieve_task_details(self, task_ids: list[str]) -> Command:
        return Command(CMD_RETRIEVE_TASK_DETAILS, {"Id": list(task_ids)})

    def set_time_lapse(self, *, enable: bool) -> Command:
        return Command(CMD_SET_TIME_LAPSE_PHOTOGRAPHY, {"Enable": int(enable)})

    def terminate_file_transfer(self, uuid: str, filename: str) -> Command:
        return Command(
            CMD_TERMINATE_FILE_TRANSFER, {"Uuid": uuid, "FileName": filename}
        )


class LegacyCommandSet(CommandSet):
    """Command table for the older proxy firmware, one code per concern."""

    version = CommandSetVersion.LEGACY

    def change_printer_name(self, name: str) -> Command:
        return Command(LEGACY_CMD_CHANGE_PRINTER_NAME, {"Name": name})

    def set_print_speed(self, percentage: int) -> Command:
        pct = _clamp(percentage, MAX_PRINT_SPEED_PCT)
        return Command(LEGACY_CMD_SET_PRINT_SPEED, {"PrintSpeed": pct})

    def set_temperature(
        self, nozzle: int | None = None, bed: int | None = None
    ) -> list[Command]:
        commands = []
        if nozzle is not None:
            commands.append(
                Command(
                    LEGACY_CMD_SET_NOZZLE_TEMP,
                    {"TempOfNozzle": _clamp(nozzle, MAX_NOZZLE_TEMP)},
                )
            )
        if bed is not None:
            commands.append(
                Command(
                    LEGACY_CMD_SET_BED_TEMP,
                    {"TempOfHotbed": _clamp(bed, MAX_BED_TEMP)},
                )
            )
        return commands

    def set_fan_speed(self, fans: dict[str, int]) -> Command:
        # This firmware expects every fan in each request
        data = {"ModelFan": 0, "ModeFan": 0, "AuxiliaryFan": 0, "BoxFan": 0}
        data.update({name: _clamp(pct, 100) for name, pct in fans.items()})
        return Command(LEGACY_CMD_SET_FAN_SPEED, data)

    def set_lighting(
        self,
        *,
        enabled: bool,
        rgb: tuple[int, int, int] | None = None,
        brightness: int = 100,
    ) -> Command:
        return Command(
            LEGACY_CMD_SET_LIGHTING,
            {
                "SecondLight": int(enabled),
                "RgbLight": list(rgb or (255, 255, 255)),
                "Brightness": _clamp(brightness, 100),
            },
        )

    def retrieve_file_list(self, path: str = "/local/") -> Command:
        return Command(LEGACY_CMD_RETRIEVE_FILE_LIST, {"Path": path})

    def delete_files(
        self, files: list[str], folders: list[str] | None = None
    ) -> Command:
        # Folders are addressed like files on this firmware
        return Command(LEGACY_CMD_DELETE_FILES, {"Files": [*files, *(folders or [])]})

    def move_axis(self, axis: str, distance: float) -> Command:
        return Command(LEGACY_CMD_MOVE_AXIS, {"Axis": axis, "Distance": distance})

    def home_axis(self, axis: str) -> Command:
        return Command(LEGACY_CMD_HOME_AXIS, {"Axis": axis})

    def set_video_stream(self, *, enable: bool) -> Command:
        if enable:
            return Command(LEGACY_CMD_ENABLE_VIDEO, {})
        return Command(LEGACY_CMD_DISABLE_VIDEO, {})

    def retrieve_historical_tasks(self) -> Command:
        return Command(LEGACY_CMD_RETRIEVE_HISTORICAL_TASKS, {})

    def retrieve_task_details(self, task_ids: list[str]) -> Command:
        # Only one task per request on this firmware
        if not task_ids:
            msg = "At least one task id is required"
            raise ValueError(msg)
        return Command(LEGACY_CMD_RETRIEVE_TASK_DETAILS, {"TaskId": task_ids[0]})

    def set_time_lapse(self, *, enable: bool) -> Command:
        if enable:
            return Command(LEGACY_CMD_ENABLE_TIME_LAPSE, {})
        return Command(LEGACY_CMD_DISABLE_TIME_LAPSE, {})

    def terminate_file_transfer(self, uuid: str, filename: str) -> Command:
        return Command(
            LEGACY_CMD_TERMINATE_FILE_TRANSFER, {"UUID": uuid, "Filename": filename}
        )


COMMAND_SETS: dict[CommandSetVersion, type[CommandSet]] = {
    CommandSetVersion.V3: V3CommandSet,
    CommandSetVersion.LEGACY: LegacyCommandSet,
}


def get_command_set(version: CommandSetVersion | str) -> CommandSet:
    """
    Return the command table for a firmware family.

    Arguments:
        version: A CommandSetVersion or its string value ("v3", "legacy").

    Raises:
        ValueError: If the version is not a known firmware family.

    """
    return COMMAND_SETS[CommandSetVersion(version)]()

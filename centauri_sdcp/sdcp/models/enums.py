"""SDCP enums."""

from enum import Enum


class ConnectionState(Enum):
    """Lifecycle of a transport session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class MachineStatus(Enum):
    """
    Represents the different status states of an SDCP machine.

    Example:
        >>> MachineStatus.from_int(1)
        <MachineStatus.PRINTING: 1>
        >>> MachineStatus.PRINTING.label
        'Printing'

    """

    IDLE = 0
    PRINTING = 1
    FILE_TRANSFERRING = 2
    CALIBRATING = 3
    DEVICES_TESTING = 4

    @classmethod
    def from_int(cls, status_int: int) -> "MachineStatus | None":
        """Return the member for an integer, or None if it is not a known status."""
        try:
            return cls(status_int)
        except ValueError:
            return None

    @classmethod
    def from_list(cls, status_list: list[int]) -> "MachineStatus | None":
        """
        Convert the CurrentStatus list of a status message to a member.

        Returns None if the list is empty, holds more than one element, or the
        element is not a known status.
        """
        if not status_list or len(status_list) != 1:
            return None
        return cls.from_int(status_list[0])

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class PrintStatus(Enum):
    """
    Represents the different status states of a print job.

    Example:
        >>> PrintStatus.from_int(10).label
        'File Checking'

    """

    IDLE = 0
    HOMING = 1
    DROPPING = 2
    EXPOSURING = 3
    LIFTING = 4
    PAUSING = 5
    PAUSED = 6
    STOPPING = 7
    STOPPED = 8
    COMPLETE = 9
    FILE_CHECKING = 10

    @classmethod
    def from_int(cls, status_int: int) -> "PrintStatus | None":
        """Return the member for an integer, or None if it is not a known status."""
        try:
            return cls(status_int)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class PrintError(Enum):
    """Error numbers reported in PrintInfo.ErrorNumber."""

    NONE = 0
    MD5_CHECK_FAILED = 1
    FILE_READ_FAILED = 2
    RESOLUTION_MISMATCH = 3
    FORMAT_MISMATCH = 4
    MACHINE_MODEL_MISMATCH = 5

    @classmethod
    def from_int(cls, error_int: int) -> "PrintError | None":
        try:
            return cls(error_int)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        labels = {
            PrintError.NONE: "Normal",
            PrintError.MD5_CHECK_FAILED: "File MD5 Check Failed",
        }
        return labels.get(self, self.name.replace("_", " ").title())


class VideoStatus(Enum):
    """Acknowledgement codes for the enable video stream command."""

    SUCCESS = 0
    EXCEEDED_MAX_STREAMS = 1
    CAMERA_NOT_EXIST = 2
    UNKNOWN_ERROR = 3

    @classmethod
    def from_int(cls, status_int: int) -> "VideoStatus | None":
        try:
            return cls(status_int)
        except ValueError:
            return None


class Axis(Enum):
    """Axes accepted by the move and home commands."""

    X = "X"
    Y = "Y"
    Z = "Z"
    XYZ = "XYZ"


class Fan(Enum):
    """Fan names used in fan speed payloads."""

    MODEL_FAN = "ModelFan"
    MODE_FAN = "ModeFan"
    AUXILIARY_FAN = "AuxiliaryFan"
    BOX_FAN = "BoxFan"

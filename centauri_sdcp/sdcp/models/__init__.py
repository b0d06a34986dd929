"""SDCP models."""

from .enums import (
    Axis,
    ConnectionState,
    Fan,
    MachineStatus,
    PrintError,
    PrintStatus,
    VideoStatus,
)
from .printer import DiscoveredPrinter, Session
from .transfer import UploadTransfer, file_md5
from .video import Video

__all__ = [
    "Axis",
    "ConnectionState",
    "DiscoveredPrinter",
    "Fan",
    "MachineStatus",
    "PrintError",
    "PrintStatus",
    "Session",
    "UploadTransfer",
    "Video",
    "VideoStatus",
    "file_md5",
]

"""SDCP Video Model"""

from typing import Any

from .enums import VideoStatus


class Video:
    """Represents video stream information returned by the printer."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """
        Initialize a Video from the inner Data of a video stream response.

        Parameters:
            data: Dictionary holding "Ack" and "VideoUrl". Defaults are used
                for anything missing.
        """
        if data is None:
            data = {}

        self.status: VideoStatus | None = VideoStatus.from_int(data.get("Ack", 0))
        self.video_url: str = data.get("VideoUrl", "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "video_url": self.video_url,
        }

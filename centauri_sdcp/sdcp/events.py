"""Named event channels for printer sessions and discovery runs."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from .const import LOGGER

EventCallback = Callable[[Any], None]


class EventChannel(Enum):
    """
    Channels a client or discovery run emits on.

    Example:
        >>> EventChannel("video_url")
        <EventChannel.VIDEO_URL: 'video_url'>

    """

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    STATUS = "status"
    ATTRIBUTES = "attributes"
    ERROR = "error"
    NOTICE = "notice"
    RESPONSE = "response"
    VIDEO_URL = "video_url"
    DISCOVERED = "discovered"
    COMPLETE = "complete"


class EventBus:
    """
    Registry of subscriber callbacks per event channel.

    Callbacks run synchronously on the event loop in subscription order. A
    callback that raises is logged and does not stop delivery to the others.
    """

    def __init__(self, logger: Any = LOGGER) -> None:
        """Initialize an empty subscriber table for every channel."""
        self.logger = logger
        self._subscribers: dict[EventChannel, list[EventCallback]] = {
            channel: [] for channel in EventChannel
        }

    def subscribe(self, channel: EventChannel, callback: EventCallback) -> None:
        """Register a callback on a channel; duplicates are ignored."""
        subscribers = self._subscribers[EventChannel(channel)]
        if callback not in subscribers:
            subscribers.append(callback)

    def unsubscribe(self, channel: EventChannel, callback: EventCallback) -> None:
        """Remove a callback from a channel if it is registered."""
        subscribers = self._subscribers[EventChannel(channel)]
        if callback in subscribers:
            subscribers.remove(callback)

    def emit(self, channel: EventChannel, data: Any = None) -> None:
        """Deliver data to every subscriber of a channel."""
        # Copy so callbacks may unsubscribe themselves while being called
        for callback in list(self._subscribers[channel]):
            try:
                callback(data)
            except Exception:
                self.logger.exception("Subscriber for %s raised", channel.value)

    def subscriber_count(self, channel: EventChannel) -> int:
        """Return the number of callbacks registered on a channel."""
        return len(self._subscribers[channel])

    def clear(self) -> None:
        """Drop every subscriber on every channel."""
        for subscribers in self._subscribers.values():
            subscribers.clear()

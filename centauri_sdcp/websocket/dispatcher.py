"""Routing of inbound SDCP frames to event channels."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from centauri_sdcp.const import PONG_MESSAGE
from centauri_sdcp.sdcp.const import (
    CMD_RETRIEVE_FILE_LIST,
    DEBUG,
    LOGGER,
    TOPIC_ATTRIBUTES,
    TOPIC_ERROR,
    TOPIC_NOTICE,
    TOPIC_RESPONSE,
    TOPIC_STATUS,
)
from centauri_sdcp.sdcp.events import EventBus, EventChannel
from centauri_sdcp.sdcp.models.printer import Session


class MessageKind(Enum):
    """Categories an inbound frame can be routed to."""

    STATUS = "status"
    ATTRIBUTES = "attributes"
    RESPONSE = "response"
    ERROR = "error"
    NOTICE = "notice"


# First match wins, so the order matters
TOPIC_ROUTES: tuple[tuple[str, MessageKind], ...] = (
    (TOPIC_STATUS, MessageKind.STATUS),
    (TOPIC_ATTRIBUTES, MessageKind.ATTRIBUTES),
    (TOPIC_RESPONSE, MessageKind.RESPONSE),
    (TOPIC_ERROR, MessageKind.ERROR),
    (TOPIC_NOTICE, MessageKind.NOTICE),
)


@dataclass
class InboundMessage:
    """A decoded frame and the category its topic resolved to."""

    topic: str
    payload: dict[str, Any]
    kind: MessageKind


def classify_topic(topic: str) -> MessageKind | None:
    """Return the category for a topic, or None if it matches none."""
    for marker, kind in TOPIC_ROUTES:
        if marker in topic:
            return kind
    return None


def unwrap(message: dict[str, Any], key: str) -> Any:
    """
    Find a payload that firmware may nest at different depths.

    Prefers message[key], then message["Data"][key], then the message itself.
    """
    if message.get(key):
        return message[key]
    data = message.get("Data")
    if isinstance(data, dict) and data.get(key):
        return data[key]
    return message


def inner_data(message: dict[str, Any]) -> Any:
    """Return message["Data"]["Data"] if present, else the message."""
    data = message.get("Data")
    if isinstance(data, dict) and data.get("Data"):
        return data["Data"]
    return message


class MessageDispatcher:
    """
    Classifies inbound frames and emits them on the matching channel.

    Heartbeat replies are discarded. Frames that fail to decode are logged
    and dropped so that one bad frame never ends the session.
    """

    def __init__(
        self, session: Session, events: EventBus, logger: Any = LOGGER
    ) -> None:
        """Initialize a dispatcher that latches the mainboard id into session."""
        self.session = session
        self.events = events
        self.logger = logger

    def decode(self, frame: str) -> InboundMessage | None:
        """
        Decode a frame into an InboundMessage.

        Returns None for heartbeat replies and for topics matching no category.

        Raises:
            json.JSONDecodeError: If the frame is not JSON.
            TypeError: If the frame is JSON but not an object.

        """
        if frame.strip() == PONG_MESSAGE:
            return None
        message = json.loads(frame)
        if not isinstance(message, dict):
            msg = f"Expected a JSON object, got {type(message).__name__}"
            raise TypeError(msg)
        topic = message.get("Topic")
        if not isinstance(topic, str) or not topic:
            self.logger.debug("Received message without 'Topic': %s", frame)
            return None
        kind = classify_topic(topic)
        if kind is None:
            self.logger.debug("Dropping message with unknown topic %s", topic)
            return None
        return InboundMessage(topic=topic, payload=message, kind=kind)

    def dispatch(self, frame: str) -> MessageKind | None:
        """
        Route one inbound frame.

        Returns:
            The category the frame was emitted as, or None if it was dropped.

        """
        try:
            message = self.decode(frame)
        except (json.JSONDecodeError, TypeError):
            self.logger.warning("Dropping malformed frame: %.200s", frame)
            return None
        if message is None:
            return None

        match message.kind:
            case MessageKind.STATUS:
                self._status_handler(message.payload)
            case MessageKind.ATTRIBUTES:
                self._attributes_handler(message.payload)
            case MessageKind.RESPONSE:
                self._response_handler(message.payload)
            case MessageKind.ERROR:
                self._log_frame("error", message.payload)
                self.events.emit(EventChannel.ERROR, inner_data(message.payload))
            case MessageKind.NOTICE:
                self._log_frame("notice", message.payload)
                self.events.emit(EventChannel.NOTICE, inner_data(message.payload))
        return message.kind

    def _status_handler(self, message: dict[str, Any]) -> None:
        status = unwrap(message, "Status")
        self._log_frame("status", status)
        self.events.emit(EventChannel.STATUS, status)

    def _attributes_handler(self, message: dict[str, Any]) -> None:
        """Emit the attributes and latch the mainboard id the first time."""
        attributes = unwrap(message, "Attributes")
        self._log_frame("attributes", attributes)
        if isinstance(attributes, dict) and self.session.latch_mainboard_id(
            attributes.get("MainboardID")
        ):
            self.logger.info("Learned MainboardID %s", self.session.mainboard_id)
        self.events.emit(EventChannel.ATTRIBUTES, attributes)

    def _response_handler(self, message: dict[str, Any]) -> None:
        data = message.get("Data")
        if DEBUG and isinstance(data, dict) and data.get("Cmd") == CMD_RETRIEVE_FILE_LIST:  # noqa: E501
            listing = inner_data(message)
            if isinstance(listing, dict):
                self.logger.debug("filelist >> %s", listing.get("FileList"))
        self._log_frame("response", message)
        self.events.emit(EventChannel.RESPONSE, message)

    def _log_frame(self, kind: str, payload: Any) -> None:
        if DEBUG:
            self.logger.debug("%s >> \n%s", kind, json.dumps(payload, indent=5))

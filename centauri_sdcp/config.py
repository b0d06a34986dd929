"""Client configuration schema."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import voluptuous as vol

from .const import (
    COMMAND_TIMEOUT,
    CONF_COMMAND_SET,
    CONF_COMMAND_TIMEOUT,
    CONF_HEARTBEAT_INTERVAL,
    CONF_IP,
    CONF_MAX_RECONNECT_ATTEMPTS,
    CONF_RECONNECT_DELAY,
    CONF_VIDEO_PORT,
    CONF_WEBSOCKET_PORT,
    HEARTBEAT_INTERVAL,
    MAX_RECONNECT_ATTEMPTS,
    RECONNECT_DELAY,
    VIDEO_PORT,
    WEBSOCKET_PORT,
)
from .sdcp.commands import CommandSetVersion
from .sdcp.exceptions import SDCPConfigurationError

PORT = vol.All(vol.Coerce(int), vol.Range(min=1, max=65535))
SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_IP): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_WEBSOCKET_PORT, default=WEBSOCKET_PORT): PORT,
        vol.Optional(CONF_VIDEO_PORT, default=VIDEO_PORT): PORT,
        vol.Optional(CONF_COMMAND_SET, default=CommandSetVersion.V3.value): vol.In(
            [version.value for version in CommandSetVersion]
        ),
        vol.Optional(CONF_COMMAND_TIMEOUT, default=COMMAND_TIMEOUT): SECONDS,
        vol.Optional(CONF_HEARTBEAT_INTERVAL, default=HEARTBEAT_INTERVAL): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(
            CONF_MAX_RECONNECT_ATTEMPTS, default=MAX_RECONNECT_ATTEMPTS
        ): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional(CONF_RECONNECT_DELAY, default=RECONNECT_DELAY): SECONDS,
    },
    extra=vol.REMOVE_EXTRA,
)


def validate_config(config: Mapping[str, Any]) -> MappingProxyType[str, Any]:
    """
    Validate a client config and fill in defaults.

    Raises:
        SDCPConfigurationError: If a key is missing or has an invalid value.

    """
    try:
        validated = CONFIG_SCHEMA(dict(config))
    except vol.Invalid as e:
        msg = f"Invalid printer configuration: {e}"
        raise SDCPConfigurationError(msg) from e
    return MappingProxyType(validated)

"""Constants for the centauri_sdcp client."""

# Configuration keys
CONF_COMMAND_SET = "command_set"
CONF_COMMAND_TIMEOUT = "command_timeout"
CONF_HEARTBEAT_INTERVAL = "heartbeat_interval"
CONF_IP = "ip_address"
CONF_MAX_RECONNECT_ATTEMPTS = "max_reconnect_attempts"
CONF_RECONNECT_DELAY = "reconnect_delay"
CONF_VIDEO_PORT = "video_port"
CONF_WEBSOCKET_PORT = "websocket_port"

# Websocket and discovery settings
DEFAULT_BROADCAST_ADDRESS = "255.255.255.255"
DISCOVERY_PORT = 3000
DISCOVERY_TIMEOUT = 5.0
VIDEO_ENDPOINT = "video"
VIDEO_PORT = 3031
WEBSOCKET_PORT = 3030
WEBSOCKET_PATHS = ("/websocket", "/ws", "/", "/api/websocket", "/sdcp")

# Session timing
COMMAND_TIMEOUT = 10.0
CONNECT_TIMEOUT = 3.0
HEARTBEAT_INTERVAL = 30.0
MAX_RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY = 3.0

# Heartbeat literals
PING_MESSAGE = "ping"
PONG_MESSAGE = "pong"

# File transfer settings
UPLOAD_CHUNK_SIZE = 1024 * 1024
UPLOAD_ENDPOINT = "/uploadFile/upload"
UPLOAD_SUCCESS_CODE = "000000"

# Discovery defaults for fields a printer leaves out
DEFAULT_BRAND = "Elegoo"
DEFAULT_FIRMWARE_VERSION = "V1.0.0"
DEFAULT_MACHINE_NAME = "Unknown"
DEFAULT_MAINBOARD_ID = "unknown"
DEFAULT_PRINTER_NAME = "Unknown Printer"
DEFAULT_PROTOCOL_VERSION = "V3.0.0"

"""Debug script for poking at a printer over SDCP."""

import asyncio
import os
import sys

# Add project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, project_root)

import aiohttp  # noqa: E402
from loguru import logger  # noqa: E402

from centauri_sdcp import DiscoveryEngine, EventChannel, SDCPClient  # noqa: E402
from centauri_sdcp.const import (  # noqa: E402
    CONF_COMMAND_SET,
    CONF_IP,
    DEFAULT_BROADCAST_ADDRESS,
)
from centauri_sdcp.sdcp.const import DEBUG  # noqa: E402

LOG_LEVEL = "DEBUG"
PRINTER_IP = os.getenv("PRINTER_IP")
BROADCAST_ADDRESS = os.getenv("BROADCAST_ADDRESS", DEFAULT_BROADCAST_ADDRESS)
COMMAND_SET = os.getenv("COMMAND_SET", "v3")

logger.remove()
logger.add(sys.stdout, colorize=DEBUG, level=LOG_LEVEL)


async def main() -> None:
    """
    Discover, connect to and monitor a printer for debugging.

    Uses PRINTER_IP when set, otherwise connects to the first printer that
    answers a discovery broadcast. Every event channel is logged and the
    printer status is polled until interrupted.
    """
    stop_event = asyncio.Event()
    try:
        ip_address = PRINTER_IP
        if not ip_address:
            engine = DiscoveryEngine(logger=logger)
            printers = await engine.discover(BROADCAST_ADDRESS)
            if not printers:
                logger.error("No printers discovered.")
                return
            for printer in printers:
                logger.debug(f"Found {printer!r}")
            ip_address = printers[0].ip_address

        async with aiohttp.ClientSession() as session:
            client = SDCPClient(
                {CONF_IP: ip_address, CONF_COMMAND_SET: COMMAND_SET},
                session,
                logger=logger,
            )
            for channel in EventChannel:
                client.on(
                    channel,
                    lambda data, channel=channel: logger.debug(
                        f"{channel.value}: {data}"
                    ),
                )

            url = await client.connect()
            logger.debug(f"Connected via {url}")
            await client.get_printer_attributes()
            await asyncio.sleep(2)
            logger.debug(f"MainboardID: {client.mainboard_id}")
            logger.debug("Polling Started")
            try:
                while not stop_event.is_set():  # noqa: ASYNC110
                    await client.get_printer_status()
                    await asyncio.sleep(2)
            finally:
                await client.close()
    except asyncio.CancelledError:
        stop_event.set()


if __name__ == "__main__":
    asyncio.run(main())

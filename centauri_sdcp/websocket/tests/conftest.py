"""Fixtures for websocket tests."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from aiohttp import ClientSession


class FakeWebSocket:
    """Stand-in for ClientWebSocketResponse driven by the test."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send_str(self, data: str) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(data)

    def feed(self, frame: str | dict[str, Any]) -> None:
        """Queue an inbound text frame."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=frame))

    def drop(self) -> None:
        """Simulate the printer closing the connection."""
        self._inbox.put_nowait(None)

    async def close(self) -> bool:
        self.closed = True
        self._inbox.put_nowait(None)
        return True

    def exception(self) -> None:
        return None

    def sent_commands(self) -> list[dict[str, Any]]:
        """Return every JSON frame sent, skipping heartbeat probes."""
        return [json.loads(frame) for frame in self.sent if frame != "ping"]

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> SimpleNamespace:
        msg = await self._inbox.get()
        if msg is None:
            self.closed = True
            raise StopAsyncIteration
        return msg


@pytest.fixture
def fake_websocket_factory():
    """Return a factory for FakeWebSocket instances."""
    return FakeWebSocket


@pytest.fixture
def mock_client_session() -> MagicMock:
    """Fixture for a mock aiohttp client session."""
    session = MagicMock(spec=ClientSession)
    session.ws_connect = AsyncMock()
    return session


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the loop until predicate() is true."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


@pytest.fixture
def wait_for():
    """Return a helper that waits for a condition on the event loop."""
    return wait_until

"""
Pytest configuration and fixtures for relay tests.
"""

import asyncio
import json
import time

import pytest
from fastapi.testclient import TestClient

from chat_relay.components.connection.registry import ConnectionRegistry
from chat_relay.components.metrics.collector import MetricsCollector
from chat_relay.main import create_app
from chat_relay.relay_manager import RelayManager


class FakeWebSocket:
    """
    In-memory stand-in for a Starlette WebSocket.

    Inbound ASGI messages are pushed by the test; sent text frames are
    collected in .sent. With stall_sends=True every send hangs forever.
    """

    def __init__(self, origin: str | None = None, stall_sends: bool = False):
        self.headers = {"origin": origin} if origin else {}
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.accepted = False
        self.close_code: int | None = None
        self.stall_sends = stall_sends

    async def accept(self):
        self.accepted = True

    async def receive(self):
        return await self.inbound.get()

    async def send_text(self, data: str):
        if self.stall_sends:
            await asyncio.Event().wait()
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None):
        self.close_code = code

    def push(self, frame):
        """Queue a client frame (dict is JSON-encoded, bytes sent as binary)."""
        if isinstance(frame, bytes):
            self.inbound.put_nowait({"type": "websocket.receive", "bytes": frame})
            return
        text = frame if isinstance(frame, str) else json.dumps(frame)
        self.inbound.put_nowait({"type": "websocket.receive", "text": text})

    def hang_up(self, code: int = 1000):
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": code})

    def frames(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]


async def eventually(predicate, timeout: float = 1.0, interval: float = 0.01):
    """Await until predicate() is truthy or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01):
    """Blocking variant of eventually() for TestClient tests."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(interval)


def drain(connection) -> list[dict]:
    """Pop every queued frame from a connection's outbox."""
    frames = []
    while not connection.outbox.empty():
        frames.append(json.loads(connection.outbox.get_nowait()))
    return frames


def set_username(name):
    return {"type": "set-username", "payload": name}


def send_message(message, user_name=None):
    return {"type": "send-message", "payload": {"userName": user_name, "message": message}}


@pytest.fixture
def metrics():
    """Fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def registry():
    """Registry with small outboxes so backpressure is easy to reach."""
    return ConnectionRegistry(outbox_size=4)


@pytest.fixture
def manager():
    """Fresh relay manager per test."""
    return RelayManager(outbox_size=16, send_timeout=0.5)


@pytest.fixture
def client(manager):
    """
    Test client sharing one event loop across all of its WebSocket sessions.
    """
    app = create_app(manager)
    with TestClient(app) as test_client:
        yield test_client

import json

import pytest
from fastapi.testclient import TestClient

from deadzone.app import create_app
from deadzone.config import Settings
from deadzone.dispatcher import dispatch_message
from deadzone.game_logic import handle_disconnect
from deadzone.registry import RoomRegistry
from deadzone.session import Connection


class FakeTransport:
    """Records every payload the relay pushes to one client."""

    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)

    def types(self):
        return [m["type"] for m in self.sent]

    def of_type(self, msg_type):
        return [m for m in self.sent if m["type"] == msg_type]


class BrokenTransport(FakeTransport):
    async def send_json(self, data):
        raise RuntimeError("Cannot call send once a close message has been sent.")


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def connections():
    return []


@pytest.fixture()
def new_conn(connections):
    def _make(broken=False):
        conn = Connection(BrokenTransport() if broken else FakeTransport())
        connections.append(conn)
        return conn
    return _make


@pytest.fixture()
def flush(connections):
    """Write out every queued payload, standing in for the endpoint writer tasks."""
    async def _flush():
        for conn in connections:
            await conn.outbox.flush()
    return _flush


@pytest.fixture()
def send(registry, flush):
    """Push one raw JSON frame from *conn* through the dispatcher."""
    async def _send(conn, msg_type, **fields):
        await dispatch_message(registry, conn, json.dumps({"type": msg_type, **fields}))
        await flush()
    return _send


@pytest.fixture()
def disconnect(registry, flush):
    async def _disconnect(conn):
        await handle_disconnect(registry, conn)
        await flush()
    return _disconnect


@pytest.fixture()
def populate(registry, new_conn, send):
    """Create a room with *count* members; the first connection is the host.

    Transports are cleared before returning so tests only see what they cause.
    """
    async def _populate(count, **settings):
        host = new_conn()
        await send(host, "create", nickname="host", settings=settings or None)
        conns = [host]
        for i in range(1, count):
            conn = new_conn()
            await send(conn, "join", roomCode=host.room_code, nickname=f"guest{i}")
            conns.append(conn)
        for conn in conns:
            conn.transport.sent.clear()
        return registry.lookup(host.room_code), conns
    return _populate


@pytest.fixture()
def relay_app():
    return create_app(Settings(log_level="DEBUG"))


@pytest.fixture()
def client(relay_app):
    with TestClient(relay_app) as test_client:
        yield test_client

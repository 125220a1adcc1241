from __future__ import annotations

import asyncio
import uuid
from typing import Any, Dict, Optional, Protocol

from fastapi.websockets import WebSocketDisconnect, WebSocketState

from .constants import DEFAULT_NICKNAME, OUTBOX_SIZE, SPAWN_POSITION
from .logging_config import get_logger
from .schemas import PlayerSummary

logger = get_logger(__name__)


class Transport(Protocol):
    """The slice of a websocket the relay needs: push one JSON payload."""

    async def send_json(self, data: Any) -> None: ...


def new_session_id() -> str:
    return "p" + uuid.uuid4().hex


async def send_payload(transport: Transport, payload: dict) -> bool:
    """Write one payload. Returns *False* when the transport was skipped."""
    state = getattr(transport, "application_state", WebSocketState.CONNECTED)
    if state != WebSocketState.CONNECTED:
        return False
    try:
        await transport.send_json(payload)
    except (WebSocketDisconnect, RuntimeError, OSError) as exc:
        logger.debug("skipped %s send: %r", payload.get("type"), exc)
        return False
    return True


class Outbox:
    """Bounded queue of payloads waiting for one client.

    Room handlers only ``post`` here; the writer task owned by the websocket
    endpoint (``run``) does the actual socket writes. A client that cannot
    keep up fills its own queue and further payloads for it are dropped.
    """

    def __init__(self, transport: Transport, maxsize: int = OUTBOX_SIZE):
        self.transport = transport
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def post(self, payload: dict) -> bool:
        try:
            self.queue.put_nowait(payload)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug("outbox full, dropped %s (%d dropped so far)", payload.get("type"), self.dropped)
            return False
        return True

    async def run(self) -> None:
        while True:
            payload = await self.queue.get()
            await send_payload(self.transport, payload)

    async def flush(self) -> None:
        """Write everything currently queued, without waiting for more."""
        while not self.queue.empty():
            await send_payload(self.transport, self.queue.get_nowait())


class Session:
    """Server-side state of one participant inside a room.

    ``outbox`` is a back-reference only: the websocket endpoint owns the
    connection and its writer task; the session never closes either.
    """

    def __init__(self, session_id: str, nickname: Optional[str], outbox: Outbox):
        self.id = session_id
        self.nickname = nickname or DEFAULT_NICKNAME
        self.ready = False
        self.position: Dict[str, float] = dict(SPAWN_POSITION)
        self.outbox = outbox

    def toggle_ready(self) -> bool:
        self.ready = not self.ready
        return self.ready

    def move(self, x: float, y: float, z: float, yaw: float) -> None:
        self.position = {"x": x, "y": y, "z": z, "yaw": yaw}

    def summary(self) -> PlayerSummary:
        return PlayerSummary(id=self.id, nickname=self.nickname, ready=self.ready)

    def send(self, payload: dict) -> bool:
        return self.outbox.post(payload)

    def __repr__(self) -> str:
        return f"<Session {self.id} {self.nickname!r} ready={self.ready}>"


class Connection:
    """Per-websocket context: the session id assigned at accept time, the
    outbound queue and, once ``create`` or ``join`` succeeds, the code of the
    room it is bound to.
    """

    def __init__(
        self,
        transport: Transport,
        session_id: Optional[str] = None,
        outbox_size: int = OUTBOX_SIZE,
    ):
        self.transport = transport
        self.session_id = session_id or new_session_id()
        self.room_code: Optional[str] = None
        self.outbox = Outbox(transport, outbox_size)

    @property
    def bound(self) -> bool:
        return self.room_code is not None

    def bind(self, room_code: str) -> None:
        self.room_code = room_code

    def new_session(self, nickname: Optional[str]) -> Session:
        return Session(self.session_id, nickname, self.outbox)

    def send(self, payload: dict) -> bool:
        return self.outbox.post(payload)


__all__ = ["Transport", "Outbox", "Session", "Connection", "new_session_id", "send_payload"]

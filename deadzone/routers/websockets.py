from __future__ import annotations

import asyncio
from typing import Union

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..dispatcher import dispatch_message
from ..game_logic import handle_disconnect
from ..logging_config import get_logger
from ..registry import RoomRegistry
from ..session import Connection

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["ws"])


async def _receive_frame(ws: WebSocket) -> Union[str, bytes]:
    """Return the next text or binary frame; raise on close."""
    message = await ws.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000))
    if message.get("text") is not None:
        return message["text"]
    return message.get("bytes") or b""


@router.websocket("/")
@router.websocket("/ws")
async def relay_endpoint(ws: WebSocket):
    await ws.accept()
    registry: RoomRegistry = ws.app.state.registry
    conn = Connection(ws, outbox_size=ws.app.state.settings.outbox_size)
    # The only task that writes to this socket.
    writer = asyncio.create_task(conn.outbox.run())
    logger.info("connection %s accepted from %s", conn.session_id, ws.client)

    try:
        while True:
            raw = await _receive_frame(ws)
            try:
                await dispatch_message(registry, conn, raw)
            except Exception:
                # One bad message must not take the connection (or the room) down.
                logger.exception("error handling message from %s", conn.session_id)
    except WebSocketDisconnect:
        pass
    finally:
        await handle_disconnect(registry, conn)
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
        if conn.outbox.dropped:
            logger.warning("connection %s missed %d messages", conn.session_id, conn.outbox.dropped)
        logger.info("connection %s closed (room=%s)", conn.session_id, conn.room_code)

"""Inbound message dispatch.

``dispatch_message`` is the single entry point used by the websocket
endpoint. It parses the frame, runs ``create``/``join`` against the registry,
and routes every in-room message through ``ROUTES``: a table keyed by message
tag whose entries carry both the handler and who is allowed to send it.
Malformed, unauthorized and stale messages are dropped without a reply.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Union

from pydantic import BaseModel

from . import game_logic
from .lobby import handle_create, handle_join
from .logging_config import get_logger
from .registry import RoomRegistry
from .room import Room
from .schemas import CreateMessage, JoinMessage, parse_message
from .session import Connection, Session

logger = get_logger(__name__)


class Authority(str, Enum):
    ANY = "any"
    HOST = "host"
    NON_HOST = "non_host"

    def permits(self, room: Room, session_id: str) -> bool:
        if self is Authority.HOST:
            return room.is_host(session_id)
        if self is Authority.NON_HOST:
            return not room.is_host(session_id)
        return True


Handler = Callable[[Room, Session, Any], Awaitable[None]]


@dataclass(frozen=True)
class Route:
    authority: Authority
    handler: Handler


ROUTES: Dict[str, Route] = {
    "ready": Route(Authority.ANY, game_logic.handle_ready),
    "pos": Route(Authority.ANY, game_logic.handle_pos),
    "zombies": Route(Authority.HOST, game_logic.handle_zombies),
    "spawn": Route(Authority.HOST, game_logic.handle_spawn),
    "zombie_dead": Route(Authority.HOST, game_logic.handle_zombie_dead),
    "hit": Route(Authority.NON_HOST, game_logic.handle_hit),
    "bullet": Route(Authority.ANY, game_logic.handle_bullet),
    "wave": Route(Authority.HOST, game_logic.handle_wave),
    "player_dead": Route(Authority.ANY, game_logic.handle_player_dead),
}


async def dispatch_message(registry: RoomRegistry, conn: Connection, raw: Union[str, bytes]) -> None:
    msg = parse_message(raw)
    if msg is None:
        logger.debug("dropping malformed frame from %s", conn.session_id)
        return
    await dispatch(registry, conn, msg)


async def dispatch(registry: RoomRegistry, conn: Connection, msg: BaseModel) -> None:
    if isinstance(msg, CreateMessage):
        await handle_create(registry, conn, msg)
        return
    if isinstance(msg, JoinMessage):
        await handle_join(registry, conn, msg)
        return

    msg_type = getattr(msg, "type", None)
    route = ROUTES.get(msg_type)
    if route is None:
        return

    room = registry.lookup(conn.room_code)
    if room is None:
        logger.debug("dropping %s from %s: no room", msg_type, conn.session_id)
        return

    async with room.lock:
        session = room.members.get(conn.session_id)
        if room.closed or session is None:
            logger.debug("dropping %s from %s: not a member of %s", msg_type, conn.session_id, room.code)
            return
        if not route.authority.permits(room, session.id):
            logger.debug("dropping %s from %s: requires %s", msg_type, session.id, route.authority.value)
            return
        await route.handler(room, session, msg)


__all__ = ["Authority", "Route", "ROUTES", "dispatch_message", "dispatch"]

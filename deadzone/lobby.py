"""Room creation, joining and the lobby listing."""
from __future__ import annotations

from typing import List, Optional

from .constants import ErrorCode
from .logging_config import get_logger
from .registry import RoomRegistry
from .room import Room
from .schemas import (
    CreatedMessage,
    CreateMessage,
    ErrorMessage,
    JoinedMessage,
    JoinMessage,
    LobbySummary,
    PlayerJoinedMessage,
    RoomSettings,
)
from .session import Connection

logger = get_logger(__name__)


class JoinRejected(Exception):
    def __init__(self, code: ErrorCode, room_code: str):
        super().__init__(f"{code.name} ({room_code})")
        self.code = code
        self.room_code = room_code

    def to_message(self) -> ErrorMessage:
        return ErrorMessage(code=self.code.name, msg=self.code.value)


def normalize_room_code(raw: str) -> str:
    return raw.strip().upper()


async def handle_create(registry: RoomRegistry, conn: Connection, msg: CreateMessage) -> Optional[Room]:
    if conn.bound:
        logger.debug("ignoring create from %s: already in room %s", conn.session_id, conn.room_code)
        return None

    settings = msg.settings or RoomSettings()
    session = conn.new_session(msg.nickname)
    code, room = await registry.create(settings, session)
    conn.bind(code)

    async with room.lock:
        session.send(
            CreatedMessage(
                room_code=code,
                player_id=session.id,
                players=room.roster(),
                settings=room.settings,
            ).wire()
        )
    return room


async def handle_join(registry: RoomRegistry, conn: Connection, msg: JoinMessage) -> Optional[Room]:
    """Admit the connection into an existing room.

    Checks run in a fixed order: unknown code, already started, full. Only the
    requester hears about a rejection and the room is left untouched.
    """
    if conn.bound:
        logger.debug("ignoring join from %s: already in room %s", conn.session_id, conn.room_code)
        return None

    code = normalize_room_code(msg.room_code)
    try:
        return await _admit(registry, conn, code, msg.nickname)
    except JoinRejected as exc:
        logger.warning("join rejected for %s: %s", conn.session_id, exc)
        conn.send(exc.to_message().wire())
        return None


async def _admit(registry: RoomRegistry, conn: Connection, code: str, nickname: Optional[str]) -> Room:
    room = registry.lookup(code)
    if room is None:
        raise JoinRejected(ErrorCode.ROOM_NOT_FOUND, code)

    async with room.lock:
        # The room may have emptied out while we waited for the lock.
        if room.closed:
            raise JoinRejected(ErrorCode.ROOM_NOT_FOUND, code)
        if room.started:
            raise JoinRejected(ErrorCode.GAME_ALREADY_STARTED, code)
        if room.is_full:
            raise JoinRejected(ErrorCode.ROOM_FULL, code)

        session = conn.new_session(nickname)
        room.add_member(session)
        conn.bind(code)
        logger.info("%s joined room %s (%d/%d)", session.id, code, len(room.members), room.settings.max_players)

        session.send(
            JoinedMessage(
                room_code=code,
                player_id=session.id,
                players=room.roster(),
                settings=room.settings,
            ).wire()
        )
        room.broadcast(PlayerJoinedMessage(player=session.summary()).wire(), exclude=session.id)
    return room


def collect_lobby_summaries(registry: RoomRegistry, include_started: bool = False) -> List[LobbySummary]:
    """Return summaries of joinable rooms (all rooms with *include_started*)."""
    return [room.summary() for room in registry if include_started or not room.started]


__all__ = [
    "JoinRejected",
    "normalize_room_code",
    "handle_create",
    "handle_join",
    "collect_lobby_summaries",
]

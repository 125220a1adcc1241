"""In-room rules: ready/auto-start, world-state relay and departures.

Every coroutine here expects the caller to hold ``room.lock`` (except
``handle_disconnect``, which takes it itself). They only touch ``Room`` and
``Session`` objects, so they can be exercised without a websocket.
"""
from __future__ import annotations

from .logging_config import get_logger
from .registry import RoomRegistry
from .room import Room
from .schemas import (
    BulletMessage,
    GameStartMessage,
    HitMessage,
    NewHostMessage,
    PlayerDeadMessage,
    PlayerLeftMessage,
    PlayerReadyMessage,
    PosMessage,
    ReadyMessage,
    SpawnMessage,
    WaveMessage,
    ZombieDeadMessage,
    ZombiesMessage,
)
from .session import Connection, Session

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Lobby -> active transition
# ---------------------------------------------------------------------------


async def check_auto_start(room: Room) -> bool:
    """Start the room once half of its members (rounded up) are ready.

    Safe to call any number of times: a started room never starts again.
    """
    if room.started or not room.has_quorum():
        return False
    room.started = True
    logger.info(
        "room %s started (%d/%d ready)", room.code, room.ready_count(), len(room.members)
    )
    room.broadcast(GameStartMessage(settings=room.settings).wire())
    return True


async def handle_ready(room: Room, session: Session, msg: ReadyMessage) -> None:
    ready = session.toggle_ready()
    room.broadcast(PlayerReadyMessage(player_id=session.id, ready=ready).wire())
    await check_auto_start(room)


# ---------------------------------------------------------------------------
# Relay handlers
# ---------------------------------------------------------------------------


async def handle_pos(room: Room, session: Session, msg: PosMessage) -> None:
    session.move(msg.x, msg.y, msg.z, msg.yaw)
    room.broadcast({**msg.wire(), "id": session.id}, exclude=session.id)


async def handle_zombies(room: Room, session: Session, msg: ZombiesMessage) -> None:
    room.broadcast(msg.wire(), exclude=room.host_id)


async def handle_spawn(room: Room, session: Session, msg: SpawnMessage) -> None:
    room.broadcast(msg.wire(), exclude=room.host_id)


async def handle_zombie_dead(room: Room, session: Session, msg: ZombieDeadMessage) -> None:
    room.broadcast(msg.wire())


async def handle_hit(room: Room, session: Session, msg: HitMessage) -> None:
    room.send_to(room.host_id, {**msg.wire(), "shooterId": session.id})


async def handle_bullet(room: Room, session: Session, msg: BulletMessage) -> None:
    room.broadcast({**msg.wire(), "id": session.id}, exclude=session.id)


async def handle_wave(room: Room, session: Session, msg: WaveMessage) -> None:
    room.broadcast(msg.wire(), exclude=room.host_id)


async def handle_player_dead(room: Room, session: Session, msg: PlayerDeadMessage) -> None:
    room.broadcast({**msg.wire(), "id": session.id})


# ---------------------------------------------------------------------------
# Departures
# ---------------------------------------------------------------------------


async def handle_disconnect(registry: RoomRegistry, conn: Connection) -> None:
    """Drop the connection's session from its room and hand off host duty.

    A connection that never created or joined a room is ignored.
    """
    if not conn.bound:
        return
    room = registry.lookup(conn.room_code)
    if room is None:
        return

    async with room.lock:
        if room.closed:
            return
        session = room.remove_member(conn.session_id)
        if session is None:
            return
        logger.info("%s left room %s (%d remaining)", session.id, room.code, len(room.members))
        room.broadcast(PlayerLeftMessage(id=session.id).wire())

        if not room.members:
            registry.delete(room.code)
            return

        if room.is_host(session.id):
            new_host = room.pick_new_host()
            logger.info("room %s host migrated %s -> %s", room.code, session.id, new_host)
            room.broadcast(NewHostMessage(id=new_host).wire())


__all__ = [
    "check_auto_start",
    "handle_ready",
    "handle_pos",
    "handle_zombies",
    "handle_spawn",
    "handle_zombie_dead",
    "handle_hit",
    "handle_bullet",
    "handle_wave",
    "handle_player_dead",
    "handle_disconnect",
]

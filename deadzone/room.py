from __future__ import annotations

import asyncio
from math import ceil
from typing import Dict, List, Optional

from .schemas import LobbySummary, PlayerSummary, RoomSettings
from .session import Session

# NOTE: ``Room`` only holds state and fan-out helpers. The rules that mutate it
# live in ``lobby`` (create/join) and ``game_logic`` (relay, auto-start,
# disconnect), which always run while holding ``room.lock``.


class Room:
    """Runtime state and member sessions of a single game room."""

    def __init__(self, code: str, host: Session, settings: RoomSettings):
        self.code = code
        self.host_id = host.id
        self.settings = settings
        self.members: Dict[str, Session] = {host.id: host}
        self.started = False
        # Set once the registry drops the room; late handlers treat it as gone.
        self.closed = False
        self.lock = asyncio.Lock()

    # -------------------- Membership -------------------- #

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.settings.max_players

    @property
    def host(self) -> Optional[Session]:
        return self.members.get(self.host_id)

    def is_host(self, session_id: str) -> bool:
        return session_id == self.host_id

    def add_member(self, session: Session) -> None:
        self.members[session.id] = session

    def remove_member(self, session_id: str) -> Optional[Session]:
        return self.members.pop(session_id, None)

    def pick_new_host(self) -> Optional[str]:
        """Hand authority to the longest-standing remaining member."""
        if not self.members:
            return None
        self.host_id = next(iter(self.members))
        return self.host_id

    # -------------------- Readiness -------------------- #

    def ready_count(self) -> int:
        return sum(1 for s in self.members.values() if s.ready)

    def quorum(self) -> int:
        """Ready members needed to start: half the room, rounded up."""
        return ceil(len(self.members) / 2)

    def has_quorum(self) -> bool:
        return len(self.members) >= 1 and self.ready_count() >= self.quorum()

    # -------------------- Views -------------------- #

    def roster(self) -> List[PlayerSummary]:
        return [s.summary() for s in self.members.values()]

    def summary(self) -> LobbySummary:
        host = self.host
        return LobbySummary(
            room_code=self.code,
            host_id=self.host_id,
            host_nickname=host.nickname if host else "Unknown",
            player_count=len(self.members),
            max_players=self.settings.max_players,
            mode=self.settings.mode,
            started=self.started,
        )

    # -------------------- Broadcasting helpers -------------------- #

    def broadcast(self, payload: dict, exclude: Optional[str] = None) -> None:
        """Queue *payload* for every member except *exclude* (a session id)."""
        for session_id, session in list(self.members.items()):
            if session_id == exclude:
                continue
            session.send(payload)

    def send_to(self, session_id: str, payload: dict) -> bool:
        session = self.members.get(session_id)
        if session is None:
            return False
        return session.send(payload)

    def __repr__(self) -> str:
        return f"<Room {self.code} host={self.host_id} members={len(self.members)} started={self.started}>"


__all__ = ["Room"]

"""Room registry: the only owner of the code -> Room mapping.

One instance is built by the application factory and handed to the
dispatcher, so tests can run against an isolated registry.
"""
from __future__ import annotations

import asyncio
import secrets
from typing import Dict, Iterator, Optional, Tuple

from .constants import ROOM_CODE_ALPHABET, ROOM_CODE_ATTEMPTS, ROOM_CODE_LENGTH
from .logging_config import get_logger
from .room import Room
from .schemas import RoomSettings
from .session import Session

logger = get_logger(__name__)


class RoomCodeExhausted(RuntimeError):
    """No unused room code was found within the configured attempts."""


class RoomRegistry:
    def __init__(
        self,
        code_length: int = ROOM_CODE_LENGTH,
        max_attempts: int = ROOM_CODE_ATTEMPTS,
        alphabet: str = ROOM_CODE_ALPHABET,
    ):
        self.code_length = code_length
        self.max_attempts = max_attempts
        self.alphabet = alphabet
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

    def generate_code(self) -> str:
        """Draw codes until one is not in use.

        Raises
        ------
        RoomCodeExhausted
            If every attempt collided with an active room.
        """
        for _ in range(self.max_attempts):
            code = "".join(secrets.choice(self.alphabet) for _ in range(self.code_length))
            if code not in self._rooms:
                return code
        raise RoomCodeExhausted(
            f"no free room code after {self.max_attempts} attempts ({len(self._rooms)} rooms active)"
        )

    async def create(self, settings: RoomSettings, creator: Session) -> Tuple[str, Room]:
        """Allocate a code and register a new room with *creator* as host."""
        async with self._lock:
            code = self.generate_code()
            room = Room(code, creator, settings)
            self._rooms[code] = room
        logger.info(
            "room %s created by %s (mode=%s, max_players=%d)",
            code, creator.id, settings.mode, settings.max_players,
        )
        return code, room

    def lookup(self, code: Optional[str]) -> Optional[Room]:
        if not code:
            return None
        return self._rooms.get(code)

    def delete(self, code: str) -> None:
        room = self._rooms.pop(code, None)
        if room is None:
            return
        room.closed = True
        logger.info("room %s deleted", code)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        return code in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))


__all__ = ["RoomRegistry", "RoomCodeExhausted"]

from enum import Enum

# Room codes avoid I, O, 0 and 1 so they can be read aloud and typed back.
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6
ROOM_CODE_ATTEMPTS = 100

DEFAULT_MODE = "infinite"
DEFAULT_MAX_PLAYERS = 4
DEFAULT_NICKNAME = "PLAYER"

# Spawn point handed to every new session (eye height above the floor).
SPAWN_POSITION = {"x": 0.0, "y": 1.75, "z": 0.0, "yaw": 0.0}

# Payloads queued per client before further ones are dropped.
OUTBOX_SIZE = 256


class ErrorCode(str, Enum):
    """User-facing join rejections. The value is the text shown by clients."""

    ROOM_NOT_FOUND = "ROOM NOT FOUND"
    GAME_ALREADY_STARTED = "GAME ALREADY STARTED"
    ROOM_FULL = "ROOM IS FULL"


__all__ = [
    "ROOM_CODE_ALPHABET",
    "ROOM_CODE_LENGTH",
    "ROOM_CODE_ATTEMPTS",
    "DEFAULT_MODE",
    "DEFAULT_MAX_PLAYERS",
    "DEFAULT_NICKNAME",
    "SPAWN_POSITION",
    "OUTBOX_SIZE",
    "ErrorCode",
]

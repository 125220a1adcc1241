"""Pydantic wire schemas for the relay protocol.

Every unit on the websocket is a JSON object tagged by ``type``. Inbound
messages form a closed union discriminated on that tag; anything that does not
validate against it is treated as malformed and dropped by the dispatcher.
Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_MAX_PLAYERS, DEFAULT_MODE


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire(self) -> dict:
        """Return the JSON-ready payload with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# -----------------------------
# Shared pieces
# -----------------------------

class RoomSettings(WireModel):
    """Gameplay options chosen by the room creator.

    Keys the server does not know about are kept and echoed back untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    mode: str = DEFAULT_MODE
    max_players: int = Field(default=DEFAULT_MAX_PLAYERS, gt=0)


# Clients send whatever they have in the name box; numbers are taken as text.
DisplayName = Annotated[Optional[str], BeforeValidator(lambda v: None if v is None else str(v))]


class PlayerSummary(WireModel):
    """Roster entry. Position and transport are never exposed here."""

    id: str
    nickname: str
    ready: bool = False


# -----------------------------
# Client -> server
# -----------------------------

class CreateMessage(WireModel):
    type: Literal["create"]
    settings: Optional[RoomSettings] = None
    nickname: DisplayName = None


class JoinMessage(WireModel):
    type: Literal["join"]
    room_code: str
    nickname: DisplayName = None


class ReadyMessage(WireModel):
    type: Literal["ready"]


class PosMessage(WireModel):
    type: Literal["pos"]
    x: float
    y: float
    z: float
    yaw: float


class ZombiesMessage(WireModel):
    type: Literal["zombies"]
    data: Any = None


class SpawnMessage(WireModel):
    type: Literal["spawn"]
    net_id: Any = None
    ztype: Any = None
    x: Any = None
    z: Any = None


class ZombieDeadMessage(WireModel):
    type: Literal["zombie_dead"]
    net_id: Any = None


class HitMessage(WireModel):
    type: Literal["hit"]
    net_id: Any = None


class BulletMessage(WireModel):
    type: Literal["bullet"]
    ox: Any = None
    oy: Any = None
    oz: Any = None
    dx: Any = None
    dy: Any = None
    dz: Any = None


class WaveMessage(WireModel):
    type: Literal["wave"]
    wave_num: Any = None
    w_total: Any = None
    w_killed: Any = None
    wave_state: Any = None


class PlayerDeadMessage(WireModel):
    type: Literal["player_dead"]


InboundMessage = Annotated[
    Union[
        CreateMessage,
        JoinMessage,
        ReadyMessage,
        PosMessage,
        ZombiesMessage,
        SpawnMessage,
        ZombieDeadMessage,
        HitMessage,
        BulletMessage,
        WaveMessage,
        PlayerDeadMessage,
    ],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def parse_message(raw: Union[str, bytes]) -> Optional[BaseModel]:
    """Decode one inbound frame, or return ``None`` if it is malformed."""
    try:
        return _inbound_adapter.validate_json(raw)
    except ValidationError:
        return None


# -----------------------------
# Server -> client
# -----------------------------

class CreatedMessage(WireModel):
    type: Literal["created"] = "created"
    room_code: str
    player_id: str
    is_host: bool = True
    players: List[PlayerSummary]
    settings: RoomSettings


class JoinedMessage(WireModel):
    type: Literal["joined"] = "joined"
    room_code: str
    player_id: str
    is_host: bool = False
    players: List[PlayerSummary]
    settings: RoomSettings


class PlayerJoinedMessage(WireModel):
    type: Literal["player_joined"] = "player_joined"
    player: PlayerSummary


class PlayerReadyMessage(WireModel):
    type: Literal["player_ready"] = "player_ready"
    player_id: str
    ready: bool


class GameStartMessage(WireModel):
    type: Literal["game_start"] = "game_start"
    settings: RoomSettings


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    code: str
    msg: str


class PlayerLeftMessage(WireModel):
    type: Literal["player_left"] = "player_left"
    id: str


class NewHostMessage(WireModel):
    type: Literal["new_host"] = "new_host"
    id: str


# -----------------------------
# REST response models
# -----------------------------

class LobbySummary(WireModel):
    room_code: str
    host_id: str
    host_nickname: str
    player_count: int
    max_players: int
    mode: str
    started: bool = False


class HealthResponse(BaseModel):
    status: str = "ok"
    rooms: int


__all__ = [
    "WireModel",
    "RoomSettings",
    "PlayerSummary",
    # inbound
    "CreateMessage",
    "JoinMessage",
    "ReadyMessage",
    "PosMessage",
    "ZombiesMessage",
    "SpawnMessage",
    "ZombieDeadMessage",
    "HitMessage",
    "BulletMessage",
    "WaveMessage",
    "PlayerDeadMessage",
    "InboundMessage",
    "parse_message",
    # outbound
    "CreatedMessage",
    "JoinedMessage",
    "PlayerJoinedMessage",
    "PlayerReadyMessage",
    "GameStartMessage",
    "ErrorMessage",
    "PlayerLeftMessage",
    "NewHostMessage",
    # REST
    "LobbySummary",
    "HealthResponse",
]

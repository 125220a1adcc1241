from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..lobby import collect_lobby_summaries, normalize_room_code
from ..registry import RoomRegistry
from ..schemas import HealthResponse, LobbySummary

router = APIRouter(prefix="", tags=["rooms"])


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


@router.get("/health", response_model=HealthResponse)
async def health(registry: RoomRegistry = Depends(get_registry)):
    return HealthResponse(rooms=len(registry))


@router.get("/rooms", response_model=List[LobbySummary])
async def list_rooms(registry: RoomRegistry = Depends(get_registry)):
    """Rooms that can still be joined."""
    return collect_lobby_summaries(registry)


@router.get("/rooms/{room_code}", response_model=LobbySummary)
async def get_room(room_code: str, registry: RoomRegistry = Depends(get_registry)):
    room = registry.lookup(normalize_room_code(room_code))
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room.summary()

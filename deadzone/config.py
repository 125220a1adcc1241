from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import OUTBOX_SIZE, ROOM_CODE_ATTEMPTS, ROOM_CODE_LENGTH


class Settings(BaseSettings):
    """Process configuration, read from the environment (and ``.env``)."""

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")

    # Room codes
    room_code_length: int = Field(default=ROOM_CODE_LENGTH, gt=0, validation_alias="ROOM_CODE_LENGTH")
    room_code_attempts: int = Field(default=ROOM_CODE_ATTEMPTS, gt=0, validation_alias="ROOM_CODE_ATTEMPTS")

    # Queued payloads per client; a client that falls further behind misses messages
    outbox_size: int = Field(default=OUTBOX_SIZE, gt=0, validation_alias="OUTBOX_SIZE")

    cors_origins: List[str] = Field(default_factory=lambda: ["*"], validation_alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]

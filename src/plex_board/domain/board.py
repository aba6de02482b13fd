"""Persisted board configuration."""

from pydantic import BaseModel, Field


class PlexServerConfig(BaseModel):
    """Connection settings for one monitored server."""

    server_id: str
    token: str


class BoardConfig(BaseModel):
    """Single source of truth persisted to disk."""

    plex_servers: list[PlexServerConfig] = Field(default_factory=list)
    board_chat_id: int | None = None
    board_message_id: int | None = None

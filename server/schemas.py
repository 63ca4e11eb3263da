"""Pydantic request schemas for the local sync API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class NewGameRequest(BaseModel):
    """Request body for starting a game in seat one."""

    player_name: str = Field(min_length=1, max_length=64)
    player_id: str | None = None
    game_id: str | None = None


class JoinGameRequest(BaseModel):
    """Request body for taking seat two of a received game."""

    player_name: str = Field(min_length=1, max_length=64)
    player_id: str | None = None


class PlayMoveRequest(BaseModel):
    """Request body for playing a move and producing the outgoing link."""

    move: dict[str, Any]
    target: str | None = None
    full_state: bool = False


class ReceiveTokenRequest(BaseModel):
    fragment: str = Field(min_length=3)

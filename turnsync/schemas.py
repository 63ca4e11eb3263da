"""Pydantic schemas shared by every game's wire format."""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SchemaViolation
from .state import GameStatus, Player

SchemaT = TypeVar("SchemaT", bound=BaseModel)

HEX_DIGEST_PATTERN = r"^[0-9a-f]{64}$"
# game ids double as storage file names
GAME_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"


class WireModel(BaseModel):
    """Base for wire schemas: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PlayerSchema(WireModel):
    id: str = Field(min_length=1)
    name: str

    def to_player(self) -> Player:
        return Player(id=self.id, name=self.name)


class StateSchema(WireModel):
    """Fields common to every game state."""

    game_id: str = Field(alias="gameId", pattern=GAME_ID_PATTERN)
    current_turn: int = Field(alias="currentTurn", ge=0, strict=True)
    current_player: Literal[1, 2] = Field(alias="currentPlayer")
    player1: PlayerSchema
    player2: PlayerSchema | None = None
    status: GameStatus = GameStatus.PLAYING
    checksum: str = Field(pattern=HEX_DIGEST_PATTERN)


class MoveSchema(WireModel):
    """Fields common to every move."""

    player: Literal[1, 2]
    turn: int = Field(ge=1, strict=True)


class DeltaSchema(WireModel):
    game_id: str = Field(alias="gameId", pattern=GAME_ID_PATTERN)
    move: dict[str, Any]
    prev_checksum: str = Field(alias="prevChecksum", min_length=1)
    new_checksum: str = Field(alias="newChecksum", min_length=1)
    hmac: str = Field(min_length=1)


def validate(schema: type[SchemaT], raw: Any, *, what: str) -> SchemaT:
    """Validate `raw` against `schema`, translating failures to `SchemaViolation`."""
    if not isinstance(raw, dict):
        raise SchemaViolation(f"Invalid {what}: expected an object, got {type(raw).__name__}.")
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        raise SchemaViolation(f"Invalid {what}: {exc.error_count()} validation error(s).", errors) from exc

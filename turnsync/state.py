"""State conventions for immutable, checksummed game states."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, ClassVar


class Role(IntEnum):
    """Seat numbers; player one always moves first."""

    PLAYER_ONE = 1
    PLAYER_TWO = 2

    def opponent(self) -> Role:
        """Return the other seat."""
        return Role.PLAYER_TWO if self is Role.PLAYER_ONE else Role.PLAYER_ONE


class GameStatus(str, Enum):
    """Lifecycle status shared by every game."""

    PLAYING = "playing"
    PLAYER1_WINS = "player1_wins"
    PLAYER2_WINS = "player2_wins"
    DRAW = "draw"


@dataclass(frozen=True)
class Player:
    """A participant: persistent identity plus display name."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class GameState(ABC):
    """Base immutable state shared by all games.

    Subclasses add their game-specific body and implement `body_to_dict`.
    The wire form uses camelCase keys; the checksum is always the last field
    and is excluded from the canonical representation together with any
    key listed in `non_canonical_fields`.
    """

    game_id: str
    current_turn: int
    current_player: Role
    player1: Player
    player2: Player | None
    status: GameStatus
    checksum: str

    non_canonical_fields: ClassVar[frozenset[str]] = frozenset()

    @abstractmethod
    def body_to_dict(self) -> dict[str, Any]:
        """Return the game-specific fields in wire form."""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable wire form of the state."""
        payload: dict[str, Any] = {
            "gameId": self.game_id,
            "currentTurn": self.current_turn,
            "currentPlayer": int(self.current_player),
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict() if self.player2 is not None else None,
            "status": self.status.value,
        }
        payload.update(self.body_to_dict())
        payload["checksum"] = self.checksum
        return payload

    def canonical_fields(self) -> dict[str, Any]:
        """Return game-relevant fields only (no checksum, no UI-only data)."""
        excluded = {"checksum"} | set(self.non_canonical_fields)
        return {key: value for key, value in self.to_dict().items() if key not in excluded}

    def player_for(self, role: Role) -> Player | None:
        """Return the player seated in `role`, if any."""
        return self.player1 if role is Role.PLAYER_ONE else self.player2

    def role_of(self, player_id: str) -> Role | None:
        """Return the seat held by `player_id`, if any."""
        if self.player1.id == player_id:
            return Role.PLAYER_ONE
        if self.player2 is not None and self.player2.id == player_id:
            return Role.PLAYER_TWO
        return None

    def is_terminal(self) -> bool:
        return self.status is not GameStatus.PLAYING

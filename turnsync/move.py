"""Base move abstraction: one turn's action, tagged with its actor and turn."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, fields
from typing import Any, ClassVar

from .serialize import to_serializable
from .state import Role


@dataclass(frozen=True)
class Move(ABC):
    """Base class for a typed move.

    Every move records the acting role and the turn number it produces, so a
    delta can be sequenced and routed without knowing the game's rules.
    """

    player: Role
    turn: int

    move_type: ClassVar[str] = "Move"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the move."""
        payload = {field.name: to_serializable(getattr(self, field.name)) for field in fields(self)}
        payload["player"] = int(self.player)
        payload["type"] = self.move_type
        return payload

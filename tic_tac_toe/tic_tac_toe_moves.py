"""Move definitions for tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from turnsync.move import Move

from .tic_tac_toe_state import BOARD_SIZE, Mark


@dataclass(frozen=True)
class PlaceMark(Move):
    """Place the mover's mark on an empty cell."""

    cell_index: int
    mark: Mark
    move_type = "PlaceMark"

    def __post_init__(self) -> None:
        if self.cell_index < 0 or self.cell_index >= BOARD_SIZE:
            raise ValueError(f"PlaceMark.cell_index must be between 0 and {BOARD_SIZE - 1}.")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["cellIndex"] = payload.pop("cell_index")
        return payload

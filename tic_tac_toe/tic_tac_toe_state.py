"""State and enums for tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from turnsync.state import GameState, Role

BOARD_SIZE = 9


class Mark(str, Enum):
    """Board marks; player one plays X."""

    X = "X"
    O = "O"  # noqa: E741


Cell = Mark | None
Board = tuple[Cell, ...]

ROLE_MARKS: dict[Role, Mark] = {
    Role.PLAYER_ONE: Mark.X,
    Role.PLAYER_TWO: Mark.O,
}


def mark_for(role: Role) -> Mark:
    return ROLE_MARKS[role]


def empty_board() -> Board:
    """Return a board of nine empty cells, indexed row by row::

         0 | 1 | 2
        ---+---+---
         3 | 4 | 5
        ---+---+---
         6 | 7 | 8
    """
    return (None,) * BOARD_SIZE


@dataclass(frozen=True)
class TicTacToeState(GameState):
    """Immutable tic-tac-toe state."""

    board: Board

    def body_to_dict(self) -> dict[str, Any]:
        return {"board": [cell.value if cell is not None else None for cell in self.board]}

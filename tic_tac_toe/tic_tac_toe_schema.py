"""Pydantic wire schemas for tic-tac-toe states and moves."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from turnsync.schemas import MoveSchema, StateSchema
from turnsync.state import Role

from .tic_tac_toe_moves import PlaceMark
from .tic_tac_toe_state import BOARD_SIZE, Mark, TicTacToeState

CellValue = Literal["X", "O"] | None


class TicTacToeStateSchema(StateSchema):
    # 0 = game start, 9 = board full
    current_turn: int = Field(alias="currentTurn", ge=0, le=BOARD_SIZE, strict=True)
    board: list[CellValue] = Field(min_length=BOARD_SIZE, max_length=BOARD_SIZE)

    def to_state(self) -> TicTacToeState:
        return TicTacToeState(
            game_id=self.game_id,
            current_turn=self.current_turn,
            current_player=Role(self.current_player),
            player1=self.player1.to_player(),
            player2=self.player2.to_player() if self.player2 is not None else None,
            status=self.status,
            checksum=self.checksum,
            board=tuple(Mark(cell) if cell is not None else None for cell in self.board),
        )


class PlaceMarkSchema(MoveSchema):
    type: Literal["PlaceMark"] = "PlaceMark"
    turn: int = Field(ge=1, le=BOARD_SIZE, strict=True)
    cell_index: int = Field(alias="cellIndex", ge=0, lt=BOARD_SIZE, strict=True)
    mark: Literal["X", "O"]

    def to_move(self) -> PlaceMark:
        return PlaceMark(player=Role(self.player), turn=self.turn, cell_index=self.cell_index, mark=Mark(self.mark))

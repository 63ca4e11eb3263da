"""Tic-tac-toe package exports."""

from .tic_tac_toe_game import (
    WINNING_LINE_NAMES,
    WINNING_LINES,
    TicTacToeGame,
    WinResult,
    calculate_game_status,
    check_draw,
    check_winner,
)
from .tic_tac_toe_moves import PlaceMark
from .tic_tac_toe_schema import PlaceMarkSchema, TicTacToeStateSchema
from .tic_tac_toe_state import BOARD_SIZE, Board, Cell, Mark, TicTacToeState, empty_board, mark_for

__all__ = [
    "BOARD_SIZE",
    "Board",
    "Cell",
    "Mark",
    "PlaceMark",
    "PlaceMarkSchema",
    "TicTacToeGame",
    "TicTacToeState",
    "TicTacToeStateSchema",
    "WINNING_LINE_NAMES",
    "WINNING_LINES",
    "WinResult",
    "calculate_game_status",
    "check_draw",
    "check_winner",
    "empty_board",
    "mark_for",
]

"""Tic-tac-toe rules and game adapter."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from turnsync.checksum import with_checksum
from turnsync.game import GameAdapter, LegacyDeltaPolicy
from turnsync.schemas import validate
from turnsync.state import GameStatus, Player, Role

from .tic_tac_toe_moves import PlaceMark
from .tic_tac_toe_schema import PlaceMarkSchema, TicTacToeStateSchema
from .tic_tac_toe_state import BOARD_SIZE, Board, Mark, TicTacToeState, empty_board, mark_for

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)
WINNING_LINE_NAMES: tuple[str, ...] = (
    "Top Row",
    "Middle Row",
    "Bottom Row",
    "Left Column",
    "Center Column",
    "Right Column",
    "Diagonal \\",
    "Diagonal /",
)


@dataclass(frozen=True)
class WinResult:
    winner: Mark | None = None
    winning_line: tuple[int, int, int] | None = None
    winning_line_name: str | None = None


def check_winner(board: Board) -> WinResult:
    """Return the first completed line, scanning rows, then columns, then diagonals."""
    for line, name in zip(WINNING_LINES, WINNING_LINE_NAMES):
        a, b, c = line
        if board[a] is not None and board[a] == board[b] == board[c]:
            return WinResult(winner=board[a], winning_line=line, winning_line_name=name)
    return WinResult()


def check_draw(board: Board) -> bool:
    """A draw is a full board with no completed line."""
    return all(cell is not None for cell in board) and check_winner(board).winner is None


def calculate_game_status(board: Board) -> GameStatus:
    winner = check_winner(board).winner
    if winner is Mark.X:
        return GameStatus.PLAYER1_WINS
    if winner is Mark.O:
        return GameStatus.PLAYER2_WINS
    if check_draw(board):
        return GameStatus.DRAW
    return GameStatus.PLAYING


class TicTacToeGame(GameAdapter[TicTacToeState, PlaceMark]):
    """Classic 3x3 tic-tac-toe for two correspondents."""

    game_name = "tic_tac_toe"
    # TODO: decide whether role-numbered delta links should be inferred as the
    # emoji chain game does; they are refused until then.
    legacy_delta_policy = LegacyDeltaPolicy.REJECT

    def new_game(self, game_id: str, player1: Player) -> TicTacToeState:
        return with_checksum(
            TicTacToeState(
                game_id=game_id,
                current_turn=0,
                current_player=Role.PLAYER_ONE,
                player1=player1,
                player2=None,
                status=GameStatus.PLAYING,
                checksum="",
                board=empty_board(),
            )
        )

    def parse_state(self, raw: Any) -> TicTacToeState:
        return validate(TicTacToeStateSchema, raw, what="tic-tac-toe state").to_state()

    def parse_move(self, raw: Any) -> PlaceMark:
        return validate(PlaceMarkSchema, raw, what="tic-tac-toe move").to_move()

    def check_winner(self, state: TicTacToeState) -> Role | None:
        winner = check_winner(state.board).winner
        if winner is None:
            return None
        return Role.PLAYER_ONE if winner is Mark.X else Role.PLAYER_TWO

    def check_draw(self, state: TicTacToeState) -> bool:
        return check_draw(state.board)

    def _check_move(self, state: TicTacToeState, move: PlaceMark) -> str | None:
        if not isinstance(move, PlaceMark):
            return "Expected a PlaceMark move."
        if not 0 <= move.cell_index < BOARD_SIZE:
            return f"Cell {move.cell_index} is off the board."
        if move.mark is not mark_for(move.player):
            return f"Player {int(move.player)} plays {mark_for(move.player).value}, not {move.mark.value}."
        occupant = state.board[move.cell_index]
        if occupant is not None:
            return f"Cell {move.cell_index} is already occupied by {occupant.value}."
        return None

    def _advance(self, state: TicTacToeState, move: PlaceMark) -> TicTacToeState:
        board = list(state.board)
        board[move.cell_index] = move.mark
        next_board = tuple(board)
        return replace(
            state,
            board=next_board,
            current_turn=move.turn,
            current_player=move.player.opponent(),
            status=calculate_game_status(next_board),
        )

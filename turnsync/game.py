"""Game adapter interface: everything the protocol needs to know about a game."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from enum import Enum
from typing import Any, Generic, TypeVar

from .checksum import with_checksum
from .delta import Delta
from .errors import RuleViolation
from .move import Move
from .schemas import DeltaSchema, validate
from .state import GameState, Player, Role

StateT = TypeVar("StateT", bound=GameState)
MoveT = TypeVar("MoveT", bound=Move)


class LegacyDeltaPolicy(str, Enum):
    """What the delta codec does with tokens that predate identity routing."""

    INFER = "infer"
    REJECT = "reject"


class GameAdapter(ABC, Generic[StateT, MoveT]):
    """Specializes the generic protocol for one game.

    Implementations act as the schema validator (`parse_state`, `parse_move`)
    and the rule engine (`is_legal`, `apply_move`, `check_winner`,
    `check_draw`) collaborators.
    """

    game_name: str = "game"
    legacy_delta_policy: LegacyDeltaPolicy = LegacyDeltaPolicy.REJECT

    @abstractmethod
    def new_game(self, game_id: str, player1: Player) -> StateT:
        """Create a fresh, checksummed state with only seat one claimed."""

    @abstractmethod
    def parse_state(self, raw: Any) -> StateT:
        """Validate raw decoded data into a state or raise `SchemaViolation`."""

    @abstractmethod
    def parse_move(self, raw: Any) -> MoveT:
        """Validate raw decoded data into a move or raise `SchemaViolation`."""

    @abstractmethod
    def check_winner(self, state: StateT) -> Role | None:
        """Return the winning role, if any."""

    @abstractmethod
    def check_draw(self, state: StateT) -> bool:
        """Return whether the game ended without a winner."""

    @abstractmethod
    def _check_move(self, state: StateT, move: MoveT) -> str | None:
        """Return a reason when `move` breaks a game-specific rule."""

    @abstractmethod
    def _advance(self, state: StateT, move: MoveT) -> StateT:
        """Return the state after a legal move (checksum not yet updated)."""

    def is_legal(self, state: StateT, move: MoveT) -> tuple[bool, str | None]:
        """Return whether a move is legal and an optional reason when illegal."""
        if state.is_terminal():
            return False, "Game is already over."
        if move.player is not state.current_player:
            return False, f"It is not player {int(move.player)}'s turn."
        if state.player_for(move.player) is None:
            return False, f"Player {int(move.player)} has not joined the game."
        if move.turn != state.current_turn + 1:
            return False, f"Expected turn {state.current_turn + 1}, got {move.turn}."
        reason = self._check_move(state, move)
        return reason is None, reason

    def apply_move(self, state: StateT, move: MoveT) -> StateT:
        """Apply a legal move and return the next checksummed state."""
        legal, reason = self.is_legal(state, move)
        if not legal:
            raise RuleViolation(int(move.player), move, reason)
        return with_checksum(self._advance(state, move))

    def join(self, state: StateT, player: Player) -> StateT:
        """Seat `player` as player two; re-joining with the same identity is a no-op."""
        if state.player2 is not None:
            if state.player2.id == player.id:
                return state
            raise RuleViolation(int(Role.PLAYER_TWO), None, "Seat two is already taken.")
        if state.player1.id == player.id:
            raise RuleViolation(int(Role.PLAYER_TWO), None, "Player one cannot take seat two.")
        return with_checksum(replace(state, player2=player))

    def parse_delta(self, raw: Any) -> Delta[MoveT]:
        """Validate a raw delta payload; the tag is carried, not checked."""
        schema = validate(DeltaSchema, raw, what=f"{self.game_name} delta")
        return Delta(
            game_id=schema.game_id,
            move=self.parse_move(schema.move),
            prev_checksum=schema.prev_checksum,
            new_checksum=schema.new_checksum,
            tag=schema.hmac,
        )

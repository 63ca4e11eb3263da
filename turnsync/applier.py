"""Delta applier: verify a received delta against local state, then apply it."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Generic, TypeVar

from .checksum import calculate_checksum
from .delta import Delta
from .errors import ApplicationFailure, StateMismatch, TamperDetected
from .game import GameAdapter
from .integrity import TagSigner
from .move import Move
from .state import GameState

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=GameState)
MoveT = TypeVar("MoveT", bound=Move)


class DeltaApplier(Generic[StateT, MoveT]):
    """Runs the three ordered checks; each failure short-circuits the rest."""

    def __init__(self, game: GameAdapter[StateT, MoveT], signer: TagSigner):
        self.game = game
        self.signer = signer

    def apply(self, local_state: StateT, delta: Delta[MoveT]) -> StateT:
        """Return the next state, or raise without touching `local_state`.

        1. the tag must match the delta's other fields (`TamperDetected`);
        2. the local checksum must equal `prev_checksum` (`StateMismatch`);
        3. the rule engine's result must hash to `new_checksum`
           (`ApplicationFailure`, or `RuleViolation` for an illegal move).
        """
        if not self.signer.verify(delta.signed_fields(), delta.tag):
            logger.warning("Rejected %s delta for game %s: tag mismatch", self.game.game_name, delta.game_id)
            raise TamperDetected("URL has been tampered with - HMAC mismatch.")

        local_checksum = calculate_checksum(local_state)
        if local_checksum != delta.prev_checksum:
            logger.warning(
                "Rejected %s delta for game %s: local state diverged at turn %d",
                self.game.game_name,
                delta.game_id,
                local_state.current_turn,
            )
            raise StateMismatch(
                "Board state mismatch - current state does not match expected previous state.",
                expected=delta.prev_checksum,
                actual=local_checksum,
            )

        candidate = self.game.apply_move(local_state, delta.move)
        if calculate_checksum(candidate) != delta.new_checksum:
            logger.warning("Rejected %s delta for game %s: result checksum mismatch", self.game.game_name, delta.game_id)
            raise ApplicationFailure("Move application failed - checksum mismatch.")

        return replace(candidate, checksum=delta.new_checksum)


def apply_delta(game: GameAdapter[Any, Any], signer: TagSigner, local_state: GameState, delta: Delta[Any]) -> Any:
    """Functional shorthand for `DeltaApplier(game, signer).apply(...)`."""
    return DeltaApplier(game, signer).apply(local_state, delta)

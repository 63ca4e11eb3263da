"""Per-turn control flow for both parties of a correspondence game."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from uuid import uuid4

from .applier import DeltaApplier
from .checksum import calculate_checksum, has_valid_checksum
from .codec import DeltaCodec, FullStateCodec, TokenKind, peek_token_kind
from .delta import Delta, create_delta
from .envelope import EnvelopeVersion, Target
from .errors import CorruptState, StateMismatch
from .game import GameAdapter
from .integrity import TagSigner
from .move import Move
from .schemas import GAME_ID_PATTERN
from .state import GameState, Player
from .store import InMemoryStateStore, StateStore

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=GameState)
MoveT = TypeVar("MoveT", bound=Move)


@dataclass(frozen=True)
class Outgoing(Generic[StateT]):
    """The mover's new local state and the fragment to send."""

    state: StateT
    token: str
    kind: TokenKind
    delta: Delta[Any] | None = None


@dataclass(frozen=True)
class Incoming(Generic[StateT]):
    """The receiver's new local state and who the token was addressed to."""

    state: StateT
    target: Target
    kind: TokenKind
    version: EnvelopeVersion


class TurnSync(Generic[StateT, MoveT]):
    """Ties the codecs, applier and store together for one game.

    The store is read at most once and written exactly once per handled
    token, so a failure anywhere before the write leaves no partial effect.
    """

    def __init__(
        self,
        game: GameAdapter[StateT, MoveT],
        signer: TagSigner,
        store: StateStore[StateT] | None = None,
    ):
        self.game = game
        self.signer = signer
        self.store: StateStore[StateT] = store if store is not None else InMemoryStateStore()
        self.state_codec: FullStateCodec[StateT] = FullStateCodec(game)
        self.delta_codec: DeltaCodec[MoveT] = DeltaCodec(game)
        self.applier: DeltaApplier[StateT, MoveT] = DeltaApplier(game, signer)

    def start_game(self, player_name: str, *, player_id: str | None = None, game_id: str | None = None) -> StateT:
        """Create a game with the caller in seat one and store it."""
        game_id = game_id or str(uuid4())
        if not re.fullmatch(GAME_ID_PATTERN, game_id):
            raise ValueError(f"Game id must match {GAME_ID_PATTERN}, got {game_id!r}")
        player = Player(id=player_id or str(uuid4()), name=player_name)
        state = self.game.new_game(game_id, player)
        self.store.save(state)
        logger.info("Started %s game %s", self.game.game_name, state.game_id)
        return state

    def join_game(self, state: StateT, player_name: str, *, player_id: str | None = None) -> StateT:
        """Take seat two. The joined state differs from the inviter's copy,
        so the next token sent must be a full state."""
        joined = self.game.join(state, Player(id=player_id or str(uuid4()), name=player_name))
        self.store.save(joined)
        return joined

    def play(self, state: StateT, move: MoveT, target: str | None, *, full_state: bool = False) -> Outgoing[StateT]:
        """Apply the mover's own move and produce the token for the opponent."""
        next_state = self.game.apply_move(state, move)
        if full_state:
            token = self.state_codec.encode(next_state, target)
            outgoing: Outgoing[StateT] = Outgoing(state=next_state, token=token, kind=TokenKind.FULL_STATE)
        else:
            delta = create_delta(
                self.signer,
                state.game_id,
                move,
                calculate_checksum(state),
                next_state.checksum,
            )
            token = self.delta_codec.encode(delta, target)
            outgoing = Outgoing(state=next_state, token=token, kind=TokenKind.DELTA, delta=delta)
        self.store.save(next_state)
        return outgoing

    def share(self, state: StateT, target: str | None) -> str:
        """Return a fresh full-state token, e.g. after a `StateMismatch`."""
        return self.state_codec.encode(state, target)

    def receive(self, fragment: str) -> Incoming[StateT]:
        """Decode, verify and apply an incoming fragment, then store the result."""
        kind = peek_token_kind(fragment)
        if kind is TokenKind.FULL_STATE:
            decoded_state = self.state_codec.decode(fragment)
            if not has_valid_checksum(decoded_state.state):
                raise CorruptState("Full-state token checksum does not match its content.")
            incoming = Incoming(
                state=decoded_state.state,
                target=decoded_state.target,
                kind=kind,
                version=decoded_state.version,
            )
        else:
            decoded = self.delta_codec.decode(fragment)
            local_state = self.store.load(decoded.delta.game_id)
            if local_state is None:
                raise StateMismatch(
                    f"No local state for game {decoded.delta.game_id}; request a full-state link.",
                    expected=decoded.delta.prev_checksum,
                )
            incoming = Incoming(
                state=self.applier.apply(local_state, decoded.delta),
                target=decoded.target,
                kind=kind,
                version=decoded.version,
            )
        self.store.save(incoming.state)
        logger.info(
            "Applied %s %s token for game %s at turn %d",
            self.game.game_name,
            kind.name,
            incoming.state.game_id,
            incoming.state.current_turn,
        )
        return incoming

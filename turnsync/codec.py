"""Full-state and delta codecs: routed payload <-> URL fragment."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .compression import compress_payload, decompress_payload
from .delta import Delta
from .envelope import (
    DELTA_KEY,
    STATE_KEY,
    EnvelopeVersion,
    Target,
    check_delta_policy,
    open_envelope,
    resolve_delta_target,
    resolve_state_target,
    wrap,
)
from .errors import DecompressionFailure
from .game import GameAdapter
from .move import Move
from .serialize import json_dumps, json_loads
from .state import GameState

logger = logging.getLogger(__name__)

MAX_FRAGMENT_LENGTH = 2000

StateT = TypeVar("StateT", bound=GameState)
MoveT = TypeVar("MoveT", bound=Move)


class TokenKind(str, Enum):
    """Fragment markers distinguishing the two wire encodings."""

    FULL_STATE = "s"
    DELTA = "d"

    @property
    def prefix(self) -> str:
        return f"#{self.value}="


def peek_token_kind(fragment: str) -> TokenKind:
    """Return which codec a URL fragment belongs to without decoding it."""
    normalized = fragment if fragment.startswith("#") else f"#{fragment}"
    for kind in TokenKind:
        if normalized.startswith(kind.prefix):
            return kind
    raise DecompressionFailure("URL fragment is neither a full-state nor a delta token.")


def _strip_prefix(fragment: str, kind: TokenKind) -> str:
    if peek_token_kind(fragment) is not kind:
        raise DecompressionFailure(f"Expected a {kind.name.lower().replace('_', '-')} token.")
    return fragment.split("=", 1)[1]


def _pack(kind: TokenKind, envelope: dict[str, Any]) -> str:
    fragment = kind.prefix + compress_payload(json_dumps(envelope))
    if len(fragment) >= MAX_FRAGMENT_LENGTH:
        logger.warning(
            "%s token is %d characters long, at or above the %d character URL budget",
            kind.name,
            len(fragment),
            MAX_FRAGMENT_LENGTH,
        )
    return fragment


def _unpack(fragment: str, kind: TokenKind) -> Any:
    text = decompress_payload(_strip_prefix(fragment, kind))
    try:
        return json_loads(text)
    except json.JSONDecodeError as exc:
        raise DecompressionFailure(f"Token does not contain valid JSON: {exc}") from exc


@dataclass(frozen=True)
class DecodedState(Generic[StateT]):
    state: StateT
    target: Target
    version: EnvelopeVersion


@dataclass(frozen=True)
class DecodedDelta(Generic[MoveT]):
    delta: Delta[MoveT]
    target: Target
    version: EnvelopeVersion


class FullStateCodec(Generic[StateT]):
    """Encodes complete game states as ``#s=`` fragments."""

    def __init__(self, game: GameAdapter[StateT, Any]):
        self.game = game

    def encode(self, state: StateT, target: str | None) -> str:
        """Wrap `state` for `target` (None addresses the open seat)."""
        return _pack(TokenKind.FULL_STATE, wrap(STATE_KEY, state.to_dict(), target))

    def decode(self, fragment: str) -> DecodedState[StateT]:
        """Recover the state and its target; the checksum is not re-verified here."""
        envelope = open_envelope(_unpack(fragment, TokenKind.FULL_STATE), STATE_KEY)
        state = self.game.parse_state(envelope.payload)
        if envelope.is_legacy:
            logger.info("Decoded %s full-state token in legacy %s shape", self.game.game_name, envelope.version.name)
        return DecodedState(state=state, target=resolve_state_target(envelope, state), version=envelope.version)


class DeltaCodec(Generic[MoveT]):
    """Encodes signed deltas as ``#d=`` fragments; never computes or checks tags."""

    def __init__(self, game: GameAdapter[Any, MoveT]):
        self.game = game

    def encode(self, delta: Delta[MoveT], target: str | None) -> str:
        return _pack(TokenKind.DELTA, wrap(DELTA_KEY, delta.to_dict(), target))

    def decode(self, fragment: str) -> DecodedDelta[MoveT]:
        envelope = open_envelope(_unpack(fragment, TokenKind.DELTA), DELTA_KEY)
        check_delta_policy(envelope, self.game.legacy_delta_policy)
        delta = self.game.parse_delta(envelope.payload)
        target = resolve_delta_target(envelope, delta)
        if envelope.is_legacy:
            logger.info("Inferred target for %s delta token in legacy %s shape", self.game.game_name, envelope.version.name)
        return DecodedDelta(delta=delta, target=target, version=envelope.version)

"""Routing envelopes and the compatibility resolver for older token shapes.

Three envelope generations exist:

* ``IDENTITY`` (current): ``{"v": 3, "target": <player id | null>, <kind>: {...}}``.
  Tokens written before the version marker carried the identity as
  ``targetPlayerId`` and are read as the same version.
* ``ROLE``: ``{"targetPlayer": 1 | 2, <kind>: {...}}`` - the target is a seat
  number rather than a persistent identity.
* ``BARE``: no envelope at all; the payload is the state or delta itself.

Decoding classifies the raw object once, then dispatches on the version to a
dedicated opener; target resolution is a second dispatch per payload kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Mapping

from .delta import Delta
from .errors import SchemaViolation, UnsupportedLegacyFormat
from .game import LegacyDeltaPolicy
from .state import GameState, Role

VERSION_KEY = "v"
TARGET_KEY = "target"
LEGACY_IDENTITY_KEY = "targetPlayerId"
LEGACY_ROLE_KEY = "targetPlayer"

STATE_KEY = "state"
DELTA_KEY = "delta"


class EnvelopeVersion(IntEnum):
    BARE = 1
    ROLE = 2
    IDENTITY = 3


CURRENT_VERSION = EnvelopeVersion.IDENTITY


@dataclass(frozen=True)
class Target:
    """Who a token is meant for.

    Identity-routed tokens carry `player_id`. Legacy tokens only know a seat,
    so `role` is set and `player_id` is filled in when the decoded payload
    records who holds that seat. A target with neither addresses the open
    seat (an invitation to whoever joins).
    """

    player_id: str | None = None
    role: Role | None = None

    def resolve(self, state: GameState) -> str | None:
        """Return the persistent identity this target refers to in `state`."""
        if self.player_id is not None:
            return self.player_id
        if self.role is not None:
            seat = state.player_for(self.role)
            return seat.id if seat is not None else None
        return None

    def is_open_seat(self) -> bool:
        return self.player_id is None and self.role is None


@dataclass(frozen=True)
class Envelope:
    """A raw envelope normalized to one shape, whatever generation it came from."""

    version: EnvelopeVersion
    payload: Any
    player_id: str | None = None
    role: Role | None = None

    @property
    def is_legacy(self) -> bool:
        return self.version < CURRENT_VERSION


def wrap(payload_key: str, payload: Mapping[str, Any], target: str | None) -> dict[str, Any]:
    """Build a current-version envelope."""
    if target is not None and (not isinstance(target, str) or not target):
        raise ValueError("target must be a non-empty player id or None.")
    return {VERSION_KEY: int(CURRENT_VERSION), TARGET_KEY: target, payload_key: dict(payload)}


def classify(raw: Any) -> EnvelopeVersion:
    """Return the envelope generation of a decoded token object."""
    if not isinstance(raw, dict):
        raise SchemaViolation(f"Token payload must be an object, got {type(raw).__name__}.")
    if VERSION_KEY in raw:
        marker = raw[VERSION_KEY]
        if isinstance(marker, bool) or not isinstance(marker, int) or marker != int(CURRENT_VERSION):
            raise SchemaViolation(f"Unsupported envelope version: {marker!r}.")
        return EnvelopeVersion.IDENTITY
    if LEGACY_IDENTITY_KEY in raw:
        return EnvelopeVersion.IDENTITY
    if LEGACY_ROLE_KEY in raw:
        return EnvelopeVersion.ROLE
    return EnvelopeVersion.BARE


def _payload(raw: dict[str, Any], payload_key: str) -> Any:
    if payload_key not in raw:
        raise SchemaViolation(f"Envelope is missing its {payload_key!r} payload.")
    return raw[payload_key]


def _open_identity(raw: dict[str, Any], payload_key: str) -> Envelope:
    if VERSION_KEY in raw:
        if TARGET_KEY not in raw:
            raise SchemaViolation("Envelope is missing its target.")
        target = raw[TARGET_KEY]
        if target is not None and (not isinstance(target, str) or not target):
            raise SchemaViolation("Invalid target player ID in token payload.")
    else:
        target = raw[LEGACY_IDENTITY_KEY]
        if not isinstance(target, str) or not target:
            raise SchemaViolation("Invalid target player ID in token payload.")
    return Envelope(version=EnvelopeVersion.IDENTITY, payload=_payload(raw, payload_key), player_id=target)


def _open_role(raw: dict[str, Any], payload_key: str) -> Envelope:
    value = raw[LEGACY_ROLE_KEY]
    if isinstance(value, bool) or value not in (1, 2):
        raise SchemaViolation("Invalid target player in token payload.")
    return Envelope(version=EnvelopeVersion.ROLE, payload=_payload(raw, payload_key), role=Role(value))


def _open_bare(raw: dict[str, Any], payload_key: str) -> Envelope:
    return Envelope(version=EnvelopeVersion.BARE, payload=raw)


_OPENERS: dict[EnvelopeVersion, Callable[[dict[str, Any], str], Envelope]] = {
    EnvelopeVersion.IDENTITY: _open_identity,
    EnvelopeVersion.ROLE: _open_role,
    EnvelopeVersion.BARE: _open_bare,
}


def open_envelope(raw: Any, payload_key: str) -> Envelope:
    """Normalize any supported envelope generation."""
    return _OPENERS[classify(raw)](raw, payload_key)


# Full-state targets: every generation resolves, using the decoded state.


def _seat_target(state: GameState, role: Role) -> Target:
    seat = state.player_for(role)
    return Target(player_id=seat.id if seat is not None else None, role=role)


def _state_target_identity(envelope: Envelope, state: GameState) -> Target:
    role = state.role_of(envelope.player_id) if envelope.player_id is not None else None
    return Target(player_id=envelope.player_id, role=role)


def _state_target_role(envelope: Envelope, state: GameState) -> Target:
    assert envelope.role is not None
    return _seat_target(state, envelope.role)


def _state_target_bare(envelope: Envelope, state: GameState) -> Target:
    return _seat_target(state, state.current_player)


_STATE_TARGETS: dict[EnvelopeVersion, Callable[[Envelope, GameState], Target]] = {
    EnvelopeVersion.IDENTITY: _state_target_identity,
    EnvelopeVersion.ROLE: _state_target_role,
    EnvelopeVersion.BARE: _state_target_bare,
}


def resolve_state_target(envelope: Envelope, state: GameState) -> Target:
    return _STATE_TARGETS[envelope.version](envelope, state)


# Delta targets: legacy generations depend on the game's policy.


def check_delta_policy(envelope: Envelope, policy: LegacyDeltaPolicy) -> None:
    """Raise `UnsupportedLegacyFormat` when the policy refuses a legacy delta."""
    if envelope.is_legacy and policy is LegacyDeltaPolicy.REJECT:
        raise UnsupportedLegacyFormat("Old URL format not supported - please generate new URL.")


def _delta_target_identity(envelope: Envelope, delta: Delta[Any]) -> Target:
    return Target(player_id=envelope.player_id)


def _delta_target_role(envelope: Envelope, delta: Delta[Any]) -> Target:
    return Target(role=envelope.role)


def _delta_target_bare(envelope: Envelope, delta: Delta[Any]) -> Target:
    # the mover sends the delta to their opponent
    return Target(role=delta.move.player.opponent())


_DELTA_TARGETS: dict[EnvelopeVersion, Callable[[Envelope, Delta[Any]], Target]] = {
    EnvelopeVersion.IDENTITY: _delta_target_identity,
    EnvelopeVersion.ROLE: _delta_target_role,
    EnvelopeVersion.BARE: _delta_target_bare,
}


def resolve_delta_target(envelope: Envelope, delta: Delta[Any]) -> Target:
    """Return the recipient of a delta; run `check_delta_policy` first."""
    return _DELTA_TARGETS[envelope.version](envelope, delta)

"""Checksum engine: deterministic SHA-256 digest over canonical state fields."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, TypeVar

from .serialize import digest as _digest
from .state import GameState

CHECKSUM_HEX_LENGTH = 64

StateT = TypeVar("StateT", bound=GameState)


def digest(canonical: Mapping[str, Any]) -> str:
    """Return the hex checksum of an already-canonicalized mapping."""
    return _digest(canonical)


def calculate_checksum(state: GameState) -> str:
    """Return the checksum `state.checksum` must equal.

    Only game-relevant fields take part; the checksum field itself and any
    non-canonical field are excluded.
    """
    return digest(state.canonical_fields())


def with_checksum(state: StateT) -> StateT:
    """Return a copy of `state` whose checksum matches its content."""
    return replace(state, checksum=calculate_checksum(state))


def has_valid_checksum(state: GameState) -> bool:
    return state.checksum == calculate_checksum(state)

"""Checksum and integrity tag behavior."""

from __future__ import annotations

from dataclasses import replace

import pytest

from emoji_chain import AppendEmoji, EmojiChainGame
from turnsync.checksum import CHECKSUM_HEX_LENGTH, calculate_checksum, has_valid_checksum, with_checksum
from turnsync.delta import create_delta
from turnsync.errors import ConfigurationError
from turnsync.integrity import TAG_HEX_LENGTH, TagSigner, sign, verify
from turnsync.state import Player, Role


def _state():
    return EmojiChainGame().new_game("game-1", Player(id="alice", name="Alice"))


def test_checksum_is_deterministic_lowercase_hex() -> None:
    first = _state()
    second = _state()

    assert calculate_checksum(first) == calculate_checksum(second)
    assert len(first.checksum) == CHECKSUM_HEX_LENGTH
    assert first.checksum == first.checksum.lower()
    int(first.checksum, 16)
    assert has_valid_checksum(first)


def test_checksum_excludes_the_checksum_field() -> None:
    state = _state()
    stale = replace(state, checksum="0" * CHECKSUM_HEX_LENGTH)

    assert calculate_checksum(stale) == state.checksum
    assert not has_valid_checksum(stale)
    assert with_checksum(stale) == state


def test_any_game_relevant_change_alters_checksum() -> None:
    state = _state()
    variants = [
        replace(state, emoji_chain="🎉"),
        replace(state, current_turn=1),
        replace(state, current_player=Role.PLAYER_TWO),
        replace(state, player2=Player(id="bob", name="Bob")),
        replace(state, player1=Player(id="alice", name="Alicia")),
    ]

    checksums = {calculate_checksum(variant) for variant in variants}
    assert state.checksum not in checksums
    assert len(checksums) == len(variants)


def test_signed_delta_verifies_and_any_field_change_fails() -> None:
    signer = TagSigner("test-secret")
    move = AppendEmoji(player=Role.PLAYER_ONE, turn=1, emoji="🎉")
    delta = create_delta(signer, "game-1", move, "a" * 64, "b" * 64)

    assert len(delta.tag) == TAG_HEX_LENGTH
    assert signer.verify(delta.signed_fields(), delta.tag)

    forgeries = [
        replace(delta, game_id="game-2"),
        replace(delta, move=replace(move, emoji="💀")),
        replace(delta, move=replace(move, turn=2)),
        replace(delta, prev_checksum="c" * 64),
        replace(delta, new_checksum="c" * 64),
    ]
    for forged in forgeries:
        assert not signer.verify(forged.signed_fields(), forged.tag)


def test_tag_depends_on_secret() -> None:
    payload = {"gameId": "game-1", "move": {"player": 1}}

    assert sign("secret-a", payload) != sign("secret-b", payload)
    assert not verify("secret-b", payload, sign("secret-a", payload))
    assert not verify("secret-a", payload, None)  # type: ignore[arg-type]


def test_tag_ignores_key_order() -> None:
    assert sign("s", {"a": 1, "b": {"c": 2, "d": 3}}) == sign("s", {"b": {"d": 3, "c": 2}, "a": 1})


def test_empty_secret_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        TagSigner("")


def test_signer_repr_hides_secret() -> None:
    assert "hunter2" not in repr(TagSigner("hunter2"))

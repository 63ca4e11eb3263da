"""Full-state and delta codecs, including older token shapes."""

from __future__ import annotations

import logging
import secrets
from dataclasses import replace

import pytest

from emoji_chain import AppendEmoji, EmojiChainGame
from tic_tac_toe import Mark, PlaceMark, TicTacToeGame
import turnsync.codec as codec_module
import turnsync.envelope as envelope_module
from turnsync.checksum import with_checksum
from turnsync.codec import MAX_FRAGMENT_LENGTH, DeltaCodec, FullStateCodec, TokenKind, peek_token_kind
from turnsync.compression import compress_payload
from turnsync.delta import create_delta
from turnsync.envelope import EnvelopeVersion, Target
from turnsync.errors import DecompressionFailure, SchemaViolation, UnsupportedLegacyFormat
from turnsync.integrity import TagSigner
from turnsync.serialize import json_dumps
from turnsync.state import Player, Role

ALICE = Player(id="alice", name="Alice")
BOB = Player(id="bob", name="Bob")
SIGNER = TagSigner("test-secret")


def _token(kind: TokenKind, payload: object) -> str:
    return kind.prefix + compress_payload(json_dumps(payload))


def _emoji_state():
    game = EmojiChainGame()
    return game, game.join(game.new_game("game-1", ALICE), BOB)


def _emoji_delta():
    game, state = _emoji_state()
    move = AppendEmoji(player=Role.PLAYER_ONE, turn=1, emoji="🎉")
    next_state = game.apply_move(state, move)
    return game, state, create_delta(SIGNER, state.game_id, move, state.checksum, next_state.checksum)


def _tic_tac_toe_delta():
    game = TicTacToeGame()
    state = game.join(game.new_game("game-2", ALICE), BOB)
    move = PlaceMark(player=Role.PLAYER_ONE, turn=1, cell_index=4, mark=Mark.X)
    next_state = game.apply_move(state, move)
    return game, create_delta(SIGNER, state.game_id, move, state.checksum, next_state.checksum)


def test_full_state_round_trip_with_identity_target() -> None:
    game, state = _emoji_state()
    codec = FullStateCodec(game)

    fragment = codec.encode(state, "bob")
    decoded = codec.decode(fragment)

    assert fragment.startswith("#s=")
    assert decoded.state == state
    assert decoded.target == Target(player_id="bob", role=Role.PLAYER_TWO)
    assert decoded.version is EnvelopeVersion.IDENTITY


def test_invitation_token_addresses_the_open_seat() -> None:
    game = EmojiChainGame()
    state = game.new_game("game-1", ALICE)
    decoded = FullStateCodec(game).decode(FullStateCodec(game).encode(state, None))

    assert decoded.target.is_open_seat()
    assert decoded.target.resolve(decoded.state) is None


def test_tic_tac_toe_full_state_round_trip_keeps_board() -> None:
    game = TicTacToeGame()
    state = game.join(game.new_game("game-2", ALICE), BOB)
    state = game.apply_move(state, PlaceMark(player=Role.PLAYER_ONE, turn=1, cell_index=0, mark=Mark.X))
    state = game.apply_move(state, PlaceMark(player=Role.PLAYER_TWO, turn=2, cell_index=8, mark=Mark.O))

    decoded = FullStateCodec(game).decode(FullStateCodec(game).encode(state, "alice"))

    assert decoded.state == state
    assert decoded.state.board[0] is Mark.X
    assert decoded.state.board[8] is Mark.O


def test_legacy_role_full_state_resolves_seat_identity() -> None:
    game, state = _emoji_state()
    fragment = _token(TokenKind.FULL_STATE, {"targetPlayer": 2, "state": state.to_dict()})

    decoded = FullStateCodec(game).decode(fragment)

    assert decoded.version is EnvelopeVersion.ROLE
    assert decoded.target == Target(player_id="bob", role=Role.PLAYER_TWO)


def test_unversioned_identity_full_state_is_current_generation() -> None:
    game, state = _emoji_state()
    fragment = _token(TokenKind.FULL_STATE, {"targetPlayerId": "alice", "state": state.to_dict()})

    decoded = FullStateCodec(game).decode(fragment)

    assert decoded.version is EnvelopeVersion.IDENTITY
    assert decoded.target == Target(player_id="alice", role=Role.PLAYER_ONE)


def test_bare_full_state_targets_current_player() -> None:
    game, state = _emoji_state()
    state = game.apply_move(state, AppendEmoji(player=Role.PLAYER_ONE, turn=1, emoji="🎉"))

    decoded = FullStateCodec(game).decode(_token(TokenKind.FULL_STATE, state.to_dict()))

    assert decoded.version is EnvelopeVersion.BARE
    assert decoded.state == state
    assert decoded.target.resolve(decoded.state) == "bob"


def test_unknown_envelope_version_is_rejected() -> None:
    game, state = _emoji_state()
    fragment = _token(TokenKind.FULL_STATE, {"v": 9, "target": None, "state": state.to_dict()})

    with pytest.raises(SchemaViolation):
        FullStateCodec(game).decode(fragment)


def test_malformed_target_is_rejected() -> None:
    game, state = _emoji_state()
    fragment = _token(TokenKind.FULL_STATE, {"v": 3, "target": 5, "state": state.to_dict()})

    with pytest.raises(SchemaViolation):
        FullStateCodec(game).decode(fragment)


def test_state_payload_missing_fields_is_a_schema_violation() -> None:
    game, state = _emoji_state()
    payload = state.to_dict()
    del payload["checksum"]

    with pytest.raises(SchemaViolation) as info:
        FullStateCodec(game).decode(_token(TokenKind.FULL_STATE, {"v": 3, "target": None, "state": payload}))
    assert any(error["loc"] == "checksum" for error in info.value.errors)


def test_encode_rejects_empty_target() -> None:
    game, state = _emoji_state()
    with pytest.raises(ValueError):
        FullStateCodec(game).encode(state, "")


def test_delta_round_trip_carries_tag_unchecked() -> None:
    game, _, delta = _emoji_delta()
    codec = DeltaCodec(game)

    fragment = codec.encode(delta, "bob")
    decoded = codec.decode(fragment)
    forged = codec.decode(codec.encode(replace(delta, tag="f" * 64), "bob"))

    assert fragment.startswith("#d=")
    assert decoded.delta == delta
    assert decoded.target == Target(player_id="bob")
    assert forged.delta.tag == "f" * 64


def test_emoji_bare_delta_infers_opponent_of_mover() -> None:
    game, state, delta = _emoji_delta()

    decoded = DeltaCodec(game).decode(_token(TokenKind.DELTA, delta.to_dict()))

    assert decoded.version is EnvelopeVersion.BARE
    assert decoded.target == Target(role=Role.PLAYER_TWO)
    assert decoded.target.resolve(state) == "bob"


def test_emoji_role_delta_uses_seat_number() -> None:
    game, state, delta = _emoji_delta()

    decoded = DeltaCodec(game).decode(_token(TokenKind.DELTA, {"targetPlayer": 1, "delta": delta.to_dict()}))

    assert decoded.version is EnvelopeVersion.ROLE
    assert decoded.target.resolve(state) == "alice"


@pytest.mark.parametrize("envelope", ["bare", "role"])
def test_tic_tac_toe_refuses_legacy_deltas(envelope: str) -> None:
    game, delta = _tic_tac_toe_delta()
    payload = delta.to_dict() if envelope == "bare" else {"targetPlayer": 2, "delta": delta.to_dict()}

    with pytest.raises(UnsupportedLegacyFormat, match="Old URL format not supported"):
        DeltaCodec(game).decode(_token(TokenKind.DELTA, payload))


def test_tic_tac_toe_accepts_unversioned_identity_delta() -> None:
    game, delta = _tic_tac_toe_delta()

    decoded = DeltaCodec(game).decode(_token(TokenKind.DELTA, {"targetPlayerId": "bob", "delta": delta.to_dict()}))

    assert decoded.delta == delta
    assert decoded.target == Target(player_id="bob")


def test_codecs_reject_each_others_tokens() -> None:
    game, state, delta = _emoji_delta()

    with pytest.raises(DecompressionFailure):
        DeltaCodec(game).decode(FullStateCodec(game).encode(state, "bob"))
    with pytest.raises(DecompressionFailure):
        FullStateCodec(game).decode(DeltaCodec(game).encode(delta, "bob"))


def test_peek_token_kind_accepts_fragment_with_or_without_hash() -> None:
    assert peek_token_kind("#s=abc") is TokenKind.FULL_STATE
    assert peek_token_kind("d=abc") is TokenKind.DELTA
    with pytest.raises(DecompressionFailure):
        peek_token_kind("#x=abc")


def test_token_that_is_not_json_is_a_decompression_failure() -> None:
    game = EmojiChainGame()
    with pytest.raises(DecompressionFailure):
        FullStateCodec(game).decode("#s=" + compress_payload("{not json"))


def test_oversized_fragment_logs_warning_but_still_decodes(caplog) -> None:
    game, state = _emoji_state()
    big = with_checksum(replace(state, emoji_chain=secrets.token_hex(2000)))
    codec = FullStateCodec(game)

    with caplog.at_level(logging.WARNING, logger="turnsync.codec"):
        fragment = codec.encode(big, "bob")

    assert len(fragment) >= MAX_FRAGMENT_LENGTH
    assert "URL budget" in caplog.text
    assert codec.decode(fragment).state == big


def test_legacy_policy_is_checked_once_before_payload_validation(monkeypatch) -> None:
    game, _, delta = _emoji_delta()
    calls = []
    original = envelope_module.check_delta_policy

    def _counting(envelope, policy):
        calls.append(envelope.version)
        return original(envelope, policy)

    monkeypatch.setattr(codec_module, "check_delta_policy", _counting)
    monkeypatch.setattr(envelope_module, "check_delta_policy", _counting)
    DeltaCodec(game).decode(_token(TokenKind.DELTA, delta.to_dict()))

    assert calls == [EnvelopeVersion.BARE]
    # a refused shape is reported as such even when its payload is malformed
    with pytest.raises(UnsupportedLegacyFormat):
        DeltaCodec(TicTacToeGame()).decode(_token(TokenKind.DELTA, {"targetPlayer": 2, "delta": {"gameId": "g"}}))

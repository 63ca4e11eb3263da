"""Emoji chain game implementation."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from turnsync.checksum import with_checksum
from turnsync.game import GameAdapter, LegacyDeltaPolicy
from turnsync.schemas import validate
from turnsync.state import GameStatus, Player, Role

from .emoji_moves import AppendEmoji
from .emoji_schema import AppendEmojiSchema, EmojiChainStateSchema
from .emoji_state import EmojiChainState


class EmojiChainGame(GameAdapter[EmojiChainState, AppendEmoji]):
    """Two players alternately append emojis to a shared chain; there is no end state."""

    game_name = "emoji_chain"
    # Bare and role-numbered delta links predate player ids; the recipient is
    # inferred from the move instead.
    legacy_delta_policy = LegacyDeltaPolicy.INFER

    def new_game(self, game_id: str, player1: Player) -> EmojiChainState:
        return with_checksum(
            EmojiChainState(
                game_id=game_id,
                current_turn=0,
                current_player=Role.PLAYER_ONE,
                player1=player1,
                player2=None,
                status=GameStatus.PLAYING,
                checksum="",
                emoji_chain="",
            )
        )

    def parse_state(self, raw: Any) -> EmojiChainState:
        return validate(EmojiChainStateSchema, raw, what="emoji chain state").to_state()

    def parse_move(self, raw: Any) -> AppendEmoji:
        return validate(AppendEmojiSchema, raw, what="emoji chain move").to_move()

    def check_winner(self, state: EmojiChainState) -> Role | None:
        return None

    def check_draw(self, state: EmojiChainState) -> bool:
        return False

    def _check_move(self, state: EmojiChainState, move: AppendEmoji) -> str | None:
        if not isinstance(move, AppendEmoji):
            return "Expected an AppendEmoji move."
        return None

    def _advance(self, state: EmojiChainState, move: AppendEmoji) -> EmojiChainState:
        return replace(
            state,
            emoji_chain=state.emoji_chain + move.emoji,
            current_turn=move.turn,
            current_player=move.player.opponent(),
        )

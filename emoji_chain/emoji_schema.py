"""Pydantic wire schemas for emoji chain states and moves."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from turnsync.schemas import MoveSchema, StateSchema
from turnsync.state import Role

from .emoji_moves import MAX_EMOJI_LENGTH, AppendEmoji
from .emoji_state import EmojiChainState


class EmojiChainStateSchema(StateSchema):
    emoji_chain: str = Field(alias="emojiChain")

    def to_state(self) -> EmojiChainState:
        return EmojiChainState(
            game_id=self.game_id,
            current_turn=self.current_turn,
            current_player=Role(self.current_player),
            player1=self.player1.to_player(),
            player2=self.player2.to_player() if self.player2 is not None else None,
            status=self.status,
            checksum=self.checksum,
            emoji_chain=self.emoji_chain,
        )


class AppendEmojiSchema(MoveSchema):
    type: Literal["AppendEmoji"] = "AppendEmoji"
    emoji: str = Field(min_length=1, max_length=MAX_EMOJI_LENGTH)

    def to_move(self) -> AppendEmoji:
        return AppendEmoji(player=Role(self.player), turn=self.turn, emoji=self.emoji)

"""Emoji chain package exports."""

from .emoji_game import EmojiChainGame
from .emoji_moves import MAX_EMOJI_LENGTH, AppendEmoji
from .emoji_schema import AppendEmojiSchema, EmojiChainStateSchema
from .emoji_state import EmojiChainState

__all__ = [
    "AppendEmoji",
    "AppendEmojiSchema",
    "EmojiChainGame",
    "EmojiChainState",
    "EmojiChainStateSchema",
    "MAX_EMOJI_LENGTH",
]

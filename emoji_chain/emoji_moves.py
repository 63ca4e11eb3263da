"""Move definitions for the emoji chain game."""

from __future__ import annotations

from dataclasses import dataclass

from turnsync.move import Move

MAX_EMOJI_LENGTH = 16


@dataclass(frozen=True)
class AppendEmoji(Move):
    """Append one emoji to the end of the chain."""

    emoji: str
    move_type = "AppendEmoji"

    def __post_init__(self) -> None:
        if not self.emoji:
            raise ValueError("AppendEmoji.emoji must be non-empty.")
        if len(self.emoji) > MAX_EMOJI_LENGTH:
            raise ValueError(f"AppendEmoji.emoji must be at most {MAX_EMOJI_LENGTH} characters.")

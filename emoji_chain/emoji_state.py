"""State for the emoji chain game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from turnsync.state import GameState


@dataclass(frozen=True)
class EmojiChainState(GameState):
    """Immutable emoji chain state: players take turns appending one emoji."""

    emoji_chain: str

    def body_to_dict(self) -> dict[str, Any]:
        return {"emojiChain": self.emoji_chain}

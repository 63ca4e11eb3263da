"""Per-game synchronizers shared by the local API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from emoji_chain.emoji_game import EmojiChainGame
from tic_tac_toe.tic_tac_toe_game import TicTacToeGame
from turnsync.config import ProtocolSettings, load_settings
from turnsync.game import GameAdapter
from turnsync.integrity import TagSigner
from turnsync.store import InMemoryStateStore, JsonFileStateStore, StateStore
from turnsync.sync import TurnSync

GAME_FACTORIES: dict[str, Callable[[], GameAdapter[Any, Any]]] = {
    EmojiChainGame.game_name: EmojiChainGame,
    TicTacToeGame.game_name: TicTacToeGame,
}
SUPPORTED_GAMES = frozenset(GAME_FACTORIES)


def _normalize_game(game: str) -> str:
    normalized = game.strip().lower().replace("-", "_")
    if normalized not in SUPPORTED_GAMES:
        raise KeyError(f"Unsupported game '{game}'. Supported games: {sorted(SUPPORTED_GAMES)}")
    return normalized


class SyncRegistry:
    """Lazily builds one `TurnSync` per game from protocol settings."""

    def __init__(self, settings: ProtocolSettings):
        self.settings = settings
        self.signer = TagSigner(settings.secret)
        self._syncs: dict[str, TurnSync[Any, Any]] = {}

    def _build_store(self, game: GameAdapter[Any, Any]) -> StateStore[Any]:
        if self.settings.store_dir is None:
            return InMemoryStateStore()
        return JsonFileStateStore(
            directory=self.settings.store_dir,
            game=game,
            max_age_sec=self.settings.state_max_age_days * 24 * 60 * 60,
        )

    def get(self, game: str) -> TurnSync[Any, Any]:
        """Return the synchronizer for `game`; raises KeyError for unknown games."""
        name = _normalize_game(game)
        if name not in self._syncs:
            adapter = GAME_FACTORIES[name]()
            self._syncs[name] = TurnSync(adapter, self.signer, self._build_store(adapter))
        return self._syncs[name]


_registry: SyncRegistry | None = None


def get_registry() -> SyncRegistry:
    global _registry
    if _registry is None:
        _registry = SyncRegistry(load_settings())
    return _registry


def set_registry(registry: SyncRegistry | None) -> None:
    """Swap the process-wide registry (tests, embedding applications)."""
    global _registry
    _registry = registry

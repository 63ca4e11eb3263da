"""Local persistence for game states, keyed by game id."""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from .checksum import has_valid_checksum
from .errors import SchemaViolation
from .game import GameAdapter
from .schemas import GAME_ID_PATTERN
from .state import GameState

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=GameState)

DEFAULT_MAX_AGE_SEC = 30 * 24 * 60 * 60
_GAME_ID_PATTERN = re.compile(GAME_ID_PATTERN)


class StateStore(ABC, Generic[StateT]):
    """The store collaborator: one current state per game id."""

    @abstractmethod
    def load(self, game_id: str) -> StateT | None:
        """Return the stored state, or None when absent or unusable."""

    @abstractmethod
    def save(self, state: StateT) -> None:
        """Persist `state`, replacing any earlier state for the same game."""

    @abstractmethod
    def delete(self, game_id: str) -> None:
        """Forget a game; missing ids are ignored."""


class InMemoryStateStore(StateStore[StateT]):
    def __init__(self) -> None:
        self._states: dict[str, StateT] = {}

    def load(self, game_id: str) -> StateT | None:
        return self._states.get(game_id)

    def save(self, state: StateT) -> None:
        self._states[state.game_id] = state

    def delete(self, game_id: str) -> None:
        self._states.pop(game_id, None)

    def game_ids(self) -> list[str]:
        return sorted(self._states)


@dataclass
class JsonFileStateStore(StateStore[StateT]):
    """JSON file-backed store: one file per game, stale and corrupt files removed."""

    directory: Path
    game: GameAdapter[StateT, Any]
    max_age_sec: float = DEFAULT_MAX_AGE_SEC
    clock: Callable[[], float] = field(default=time.time)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory) / self.game.game_name
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, game_id: str) -> Path:
        if not _GAME_ID_PATTERN.match(game_id):
            raise ValueError(f"Unsupported game id for file storage: {game_id!r}")
        return self.directory / f"{game_id}.json"

    def _write(self, path: Path, payload: dict[str, Any]) -> None:
        temp = path.with_suffix(path.suffix + ".tmp")
        temp.write_text(json.dumps(payload, sort_keys=True, indent=2), encoding="utf-8")
        temp.replace(path)

    def save(self, state: StateT) -> None:
        path = self._path(state.game_id)
        payload = {"savedAt": self.clock(), "state": state.to_dict()}
        try:
            self._write(path, payload)
        except OSError:
            logger.warning("Saving %s failed, removing stale games and retrying", path.name)
            self.cleanup_old_games()
            self._write(path, payload)

    def load(self, game_id: str) -> StateT | None:
        path = self._path(game_id)
        if not path.exists():
            return None
        try:
            stored = json.loads(path.read_text(encoding="utf-8"))
            state = self.game.parse_state(stored["state"])
        except (OSError, ValueError, KeyError, TypeError, SchemaViolation) as exc:
            logger.error("Discarding unreadable stored state %s: %s", path.name, exc)
            path.unlink(missing_ok=True)
            return None
        if not has_valid_checksum(state):
            logger.error("Discarding stored state %s: checksum does not match content", path.name)
            path.unlink(missing_ok=True)
            return None
        return state

    def delete(self, game_id: str) -> None:
        self._path(game_id).unlink(missing_ok=True)

    def cleanup_old_games(self) -> int:
        """Remove states older than `max_age_sec` and unreadable files; return the count."""
        now = self.clock()
        removed = 0
        for path in sorted(self.directory.glob("*.json")):
            try:
                saved_at = float(json.loads(path.read_text(encoding="utf-8"))["savedAt"])
            except (OSError, ValueError, KeyError, TypeError):
                saved_at = None
            if saved_at is None or now - saved_at > self.max_age_sec:
                path.unlink(missing_ok=True)
                removed += 1
        if removed:
            logger.info("Removed %d stale %s game file(s)", removed, self.game.game_name)
        return removed

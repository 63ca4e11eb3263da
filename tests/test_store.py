"""Local state stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from emoji_chain import AppendEmoji, EmojiChainGame
from turnsync.errors import SchemaViolation
from turnsync.integrity import TagSigner
from turnsync.state import Player, Role
from turnsync.store import DEFAULT_MAX_AGE_SEC, InMemoryStateStore, JsonFileStateStore
from turnsync.sync import TurnSync

DAY = 24 * 60 * 60


class _Clock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _state(game_id: str = "game-1"):
    game = EmojiChainGame()
    state = game.join(game.new_game(game_id, Player(id="alice", name="Alice")), Player(id="bob", name="Bob"))
    return game.apply_move(state, AppendEmoji(player=Role.PLAYER_ONE, turn=1, emoji="🎉"))


def _file_store(tmp_path: Path, clock: _Clock | None = None) -> JsonFileStateStore:
    return JsonFileStateStore(directory=tmp_path, game=EmojiChainGame(), clock=clock or _Clock())


def test_in_memory_store_round_trip() -> None:
    store = InMemoryStateStore()
    state = _state()

    store.save(state)
    assert store.load("game-1") == state
    assert store.game_ids() == ["game-1"]

    store.delete("game-1")
    store.delete("game-1")
    assert store.load("game-1") is None


def test_file_store_round_trip(tmp_path: Path) -> None:
    store = _file_store(tmp_path)
    state = _state()

    store.save(state)
    stored = json.loads((tmp_path / "emoji_chain" / "game-1.json").read_text(encoding="utf-8"))

    assert stored["savedAt"] == 1_000_000.0
    assert stored["state"]["emojiChain"] == "🎉"
    assert store.load("game-1") == state
    assert _file_store(tmp_path).load("game-1") == state


def test_file_store_missing_game_is_none(tmp_path: Path) -> None:
    assert _file_store(tmp_path).load("nope") is None


def test_file_store_discards_unreadable_file(tmp_path: Path) -> None:
    store = _file_store(tmp_path)
    path = tmp_path / "emoji_chain" / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    assert store.load("broken") is None
    assert not path.exists()


def test_file_store_discards_state_with_bad_checksum(tmp_path: Path) -> None:
    store = _file_store(tmp_path)
    store.save(_state())
    path = tmp_path / "emoji_chain" / "game-1.json"
    stored = json.loads(path.read_text(encoding="utf-8"))
    stored["state"]["emojiChain"] = "💀"
    path.write_text(json.dumps(stored), encoding="utf-8")

    assert store.load("game-1") is None
    assert not path.exists()


def test_file_store_rejects_path_like_game_ids(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        _file_store(tmp_path).load("../outside")


def test_cleanup_removes_stale_and_unreadable_games(tmp_path: Path) -> None:
    clock = _Clock()
    store = _file_store(tmp_path, clock)
    store.save(_state("old"))
    clock.now += 20 * DAY
    store.save(_state("recent"))
    (tmp_path / "emoji_chain" / "junk.json").write_text("[]", encoding="utf-8")
    clock.now += 15 * DAY

    assert store.max_age_sec == DEFAULT_MAX_AGE_SEC
    assert store.cleanup_old_games() == 2
    assert store.load("old") is None
    assert store.load("recent") is not None


def test_token_with_unstorable_game_id_is_a_schema_violation(tmp_path: Path) -> None:
    game = EmojiChainGame()
    signer = TagSigner("test-secret")
    sender = TurnSync(game, signer)
    receiver = TurnSync(game, signer, _file_store(tmp_path))
    state = game.new_game("game one", Player(id="alice", name="Alice"))

    with pytest.raises(SchemaViolation) as info:
        receiver.receive(sender.share(state, None))

    assert any(error["loc"] == "gameId" for error in info.value.errors)
    assert list((tmp_path / "emoji_chain").iterdir()) == []


def test_start_game_refuses_unstorable_game_id(tmp_path: Path) -> None:
    sync = TurnSync(EmojiChainGame(), TagSigner("test-secret"), _file_store(tmp_path))

    with pytest.raises(ValueError):
        sync.start_game("Alice", game_id="../outside")

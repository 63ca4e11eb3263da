"""FastAPI server exposing a local API for playing games over shared links."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from server.registry import get_registry
from server.schemas import JoinGameRequest, NewGameRequest, PlayMoveRequest, ReceiveTokenRequest
from turnsync.errors import (
    ApplicationFailure,
    ConfigurationError,
    CorruptState,
    DecompressionFailure,
    RuleViolation,
    SchemaViolation,
    StateMismatch,
    SyncError,
    TamperDetected,
    UnsupportedLegacyFormat,
)
from turnsync.state import GameState
from turnsync.sync import TurnSync

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load settings once at startup; a missing secret stops the server here."""
    registry = get_registry()
    configure_logging(registry.settings.log_level)
    logger.info("Serving games with %s", "file storage" if registry.settings.store_dir else "in-memory storage")
    yield


app = FastAPI(title="Correspondence Games Local API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific first: RuleViolation is an ApplicationFailure.
ERROR_STATUS: list[tuple[type[SyncError], int]] = [
    (DecompressionFailure, 400),
    (UnsupportedLegacyFormat, 410),
    (SchemaViolation, 422),
    (CorruptState, 422),
    (RuleViolation, 422),
    (TamperDetected, 403),
    (StateMismatch, 409),
    (ApplicationFailure, 409),
    (ConfigurationError, 500),
]


def status_for(exc: SyncError) -> int:
    """Return the HTTP status used to report a protocol error."""
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 400


def _http_error(exc: SyncError) -> HTTPException:
    return HTTPException(status_code=status_for(exc), detail=exc.to_dict())


def _sync_for(game: str) -> TurnSync[Any, Any]:
    try:
        return get_registry().get(game)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    except ConfigurationError as exc:
        logger.error("Server is not configured: %s", exc)
        raise _http_error(exc) from exc


def _load_state(sync: TurnSync[Any, Any], game_id: str) -> GameState:
    try:
        state = sync.store.load(game_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if state is None:
        raise HTTPException(status_code=404, detail=f"Unknown game_id: {game_id}")
    return state


def _state_view(sync: TurnSync[Any, Any], state: GameState) -> dict[str, Any]:
    winner = sync.game.check_winner(state)
    return {
        "game": sync.game.game_name,
        "state": state.to_dict(),
        "winner": int(winner) if winner is not None else None,
        "draw": sync.game.check_draw(state),
    }


@app.get("/api/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


@app.post("/api/{game}/games")
def new_game(game: str, request: NewGameRequest) -> dict[str, Any]:
    """Start a game in seat one and return the invitation link (open seat)."""
    sync = _sync_for(game)
    try:
        state = sync.start_game(request.player_name, player_id=request.player_id, game_id=request.game_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    payload = _state_view(sync, state)
    payload["token"] = sync.share(state, None)
    return payload


@app.post("/api/{game}/games/{game_id}/join")
def join_game(game: str, game_id: str, request: JoinGameRequest) -> dict[str, Any]:
    """Take seat two; the returned full-state link goes back to seat one."""
    sync = _sync_for(game)
    state = _load_state(sync, game_id)
    try:
        joined = sync.join_game(state, request.player_name, player_id=request.player_id)
    except SyncError as exc:
        raise _http_error(exc) from exc
    payload = _state_view(sync, joined)
    payload["token"] = sync.share(joined, joined.player1.id)
    return payload


@app.post("/api/{game}/games/{game_id}/moves")
def play_move(game: str, game_id: str, request: PlayMoveRequest) -> dict[str, Any]:
    """Apply the caller's move locally and return the link for the opponent."""
    sync = _sync_for(game)
    state = _load_state(sync, game_id)
    try:
        move = sync.game.parse_move(request.move)
        outgoing = sync.play(state, move, request.target, full_state=request.full_state)
    except SyncError as exc:
        raise _http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    payload = _state_view(sync, outgoing.state)
    payload.update({"token": outgoing.token, "kind": outgoing.kind.name})
    return payload


@app.get("/api/{game}/games/{game_id}/share")
def share_state(game: str, game_id: str, target: str | None = Query(default=None)) -> dict[str, Any]:
    """Return a full-state link, used to recover after a state mismatch."""
    sync = _sync_for(game)
    state = _load_state(sync, game_id)
    try:
        token = sync.share(state, target)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    payload = _state_view(sync, state)
    payload["token"] = token
    return payload


@app.post("/api/{game}/receive")
def receive_token(game: str, request: ReceiveTokenRequest) -> dict[str, Any]:
    """Decode, verify and apply an incoming link fragment."""
    sync = _sync_for(game)
    try:
        incoming = sync.receive(request.fragment)
    except SyncError as exc:
        logger.warning("Rejected %s token: %s", sync.game.game_name, exc)
        raise _http_error(exc) from exc
    payload = _state_view(sync, incoming.state)
    payload.update(
        {
            "kind": incoming.kind.name,
            "version": int(incoming.version),
            "target": incoming.target.resolve(incoming.state),
            "openSeat": incoming.target.is_open_seat(),
        }
    )
    return payload


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)

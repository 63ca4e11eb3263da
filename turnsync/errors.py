"""Structured exceptions raised by the turn synchronization protocol."""

from __future__ import annotations

from typing import Any


class SyncError(Exception):
    """Base class for protocol-level exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class ConfigurationError(SyncError):
    """Raised when the protocol is configured incorrectly (e.g. missing secret)."""


class DecompressionFailure(SyncError):
    """Raised when a token cannot be unpacked into structured data."""


class SchemaViolation(SyncError):
    """Raised when decoded data does not match the expected shape."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class UnsupportedLegacyFormat(SyncError):
    """Raised when an old token shape is rejected by the game's policy."""


class TamperDetected(SyncError):
    """Raised when a delta's integrity tag does not match its contents."""


class StateMismatch(SyncError):
    """Raised when the local state is not the state a delta was built on."""

    def __init__(self, message: str, *, expected: str | None = None, actual: str | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"expected": self.expected, "actual": self.actual})
        return payload


class ApplicationFailure(SyncError):
    """Raised when applying a delta does not yield the declared result."""


class RuleViolation(ApplicationFailure):
    """Raised by a rule engine when a move is illegal for the given state."""

    def __init__(self, player: int | None, move: Any, reason: str | None = None):
        self.player = player
        self.move = move
        self.reason = reason
        message = f"Illegal move by player {player}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"player": self.player, "move": getattr(self.move, "to_dict", lambda: self.move)()})
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


class CorruptState(SyncError):
    """Raised when a state's checksum does not match its own content."""

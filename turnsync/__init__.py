"""Turn synchronization protocol: checksums, signed deltas and URL tokens."""

from .applier import DeltaApplier, apply_delta
from .checksum import calculate_checksum, has_valid_checksum, with_checksum
from .codec import DecodedDelta, DecodedState, DeltaCodec, FullStateCodec, TokenKind, peek_token_kind
from .delta import Delta, create_delta
from .envelope import EnvelopeVersion, Target
from .errors import (
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
from .game import GameAdapter, LegacyDeltaPolicy
from .integrity import TagSigner
from .move import Move
from .state import GameState, GameStatus, Player, Role
from .sync import Incoming, Outgoing, TurnSync

__all__ = [
    "ApplicationFailure",
    "ConfigurationError",
    "CorruptState",
    "DecodedDelta",
    "DecodedState",
    "DecompressionFailure",
    "Delta",
    "DeltaApplier",
    "DeltaCodec",
    "EnvelopeVersion",
    "FullStateCodec",
    "GameAdapter",
    "GameState",
    "GameStatus",
    "Incoming",
    "LegacyDeltaPolicy",
    "Move",
    "Outgoing",
    "Player",
    "Role",
    "RuleViolation",
    "SchemaViolation",
    "StateMismatch",
    "SyncError",
    "TagSigner",
    "TamperDetected",
    "Target",
    "TokenKind",
    "TurnSync",
    "UnsupportedLegacyFormat",
    "apply_delta",
    "calculate_checksum",
    "create_delta",
    "has_valid_checksum",
    "peek_token_kind",
    "with_checksum",
]

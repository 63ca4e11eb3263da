"""Delta: the authenticated description of one turn's transition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .integrity import TagSigner
from .move import Move

MoveT = TypeVar("MoveT", bound=Move)


@dataclass(frozen=True)
class Delta(Generic[MoveT]):
    """Applying `move` to the state with `prev_checksum` must yield `new_checksum`."""

    game_id: str
    move: MoveT
    prev_checksum: str
    new_checksum: str
    tag: str

    def signed_fields(self) -> dict[str, Any]:
        """Return every field except the tag, in wire form."""
        return signed_fields(self.game_id, self.move, self.prev_checksum, self.new_checksum)

    def to_dict(self) -> dict[str, Any]:
        payload = self.signed_fields()
        payload["hmac"] = self.tag
        return payload


def signed_fields(game_id: str, move: Move, prev_checksum: str, new_checksum: str) -> dict[str, Any]:
    return {
        "gameId": game_id,
        "move": move.to_dict(),
        "prevChecksum": prev_checksum,
        "newChecksum": new_checksum,
    }


def create_delta(
    signer: TagSigner,
    game_id: str,
    move: MoveT,
    prev_checksum: str,
    new_checksum: str,
) -> Delta[MoveT]:
    """Build and sign the delta for one turn."""
    tag = signer.sign(signed_fields(game_id, move, prev_checksum, new_checksum))
    return Delta(
        game_id=game_id,
        move=move,
        prev_checksum=prev_checksum,
        new_checksum=new_checksum,
        tag=tag,
    )

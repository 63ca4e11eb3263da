"""Integrity tag engine: HMAC-SHA256 over canonical delta fields.

The tag proves a delta was produced by someone holding the shared secret. It
does not hide anything; delta contents stay readable to whoever has the token.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Mapping

from .errors import ConfigurationError
from .serialize import canonical_bytes

TAG_HEX_LENGTH = 64


def _secret_bytes(secret: str | bytes) -> bytes:
    key = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
    if not key:
        raise ConfigurationError("Integrity secret must be a non-empty string.")
    return key


def sign(secret: str | bytes, canonical_delta: Mapping[str, Any]) -> str:
    """Return the hex tag for `canonical_delta` under `secret`."""
    return hmac.new(_secret_bytes(secret), canonical_bytes(canonical_delta), hashlib.sha256).hexdigest()


def verify(secret: str | bytes, canonical_delta: Mapping[str, Any], tag: str) -> bool:
    """Return whether `tag` was produced by `sign` over the same input and secret."""
    if not isinstance(tag, str):
        return False
    expected = sign(secret, canonical_delta)
    return hmac.compare_digest(expected.encode("ascii"), tag.encode("utf-8"))


class TagSigner:
    """Binds the shared secret once so codecs and appliers can share it."""

    def __init__(self, secret: str | bytes):
        self._secret = _secret_bytes(secret)

    def sign(self, canonical_delta: Mapping[str, Any]) -> str:
        return sign(self._secret, canonical_delta)

    def verify(self, canonical_delta: Mapping[str, Any], tag: str) -> bool:
        return verify(self._secret, canonical_delta, tag)

    def __repr__(self) -> str:
        return "TagSigner(secret=***)"

"""Compression codec: serialized payload text <-> compact URL-safe token."""

from __future__ import annotations

import base64
import binascii
import zlib

from .errors import DecompressionFailure

COMPRESSION_LEVEL = 9


def compress_payload(text: str) -> str:
    """Deflate `text` and return it as unpadded URL-safe base64."""
    packed = zlib.compress(text.encode("utf-8"), level=COMPRESSION_LEVEL)
    return base64.urlsafe_b64encode(packed).decode("ascii").rstrip("=")


def decompress_payload(token: str) -> str:
    """Reverse `compress_payload`.

    Raises `DecompressionFailure` for empty input, characters outside the
    URL-safe alphabet, truncated streams and non-UTF-8 content.
    """
    if not token:
        raise DecompressionFailure("Token is empty.")
    padded = token + "=" * (-len(token) % 4)
    try:
        packed = base64.urlsafe_b64decode(padded.encode("ascii"))
        # urlsafe_b64decode silently drops characters outside its alphabet
        if base64.urlsafe_b64encode(packed).decode("ascii").rstrip("=") != token:
            raise DecompressionFailure("Token contains characters outside the URL-safe alphabet.")
        return zlib.decompress(packed).decode("utf-8")
    except DecompressionFailure:
        raise
    except (binascii.Error, UnicodeError, ValueError, zlib.error) as exc:
        raise DecompressionFailure(f"Failed to decompress token: {exc}") from exc

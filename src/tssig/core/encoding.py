"""Unpadded base64url encoding for byte fields.

Every binary field on the wire (leaf key, signatures, digest) uses the
URL-safe alphabet without "=" padding. Decoding is strict: padded input,
characters outside the alphabet and impossible lengths are rejected, so each
byte string has exactly one accepted text form.
"""

from __future__ import annotations

import base64
import binascii
import re

from tssig.core.errors import EncodingError

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def encode_b64(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode_b64(text: str) -> bytes:
    """Decode unpadded base64url text.

    Raises:
        EncodingError: If the text is not canonical unpadded base64url.
    """
    if not _B64URL_RE.fullmatch(text):
        msg = "Invalid base64url text: only unpadded A-Z, a-z, 0-9, '-' and '_' are allowed"
        raise EncodingError(msg)
    if len(text) % 4 == 1:
        msg = f"Invalid base64url length: {len(text)}"
        raise EncodingError(msg)

    padded = text + "=" * (-len(text) % 4)
    try:
        data = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Invalid base64url text: {e}") from e

    # Reject non-zero trailing bits so each value has a single encoding
    if encode_b64(data) != text:
        raise EncodingError("Non-canonical base64url text")
    return data

"""SignedTimestamp entity.

A SignedTimestamp binds a caller-supplied digest to the time it was signed.
It is created unsigned from a digest and signed exactly once by
Issuer.sign_timestamp(), which fills in the issuer, the time and the leaf
signature.

The leaf key signs:
    digest || format_rfc3339_nanos(timestamp_ns)

The issuer's own signature is not part of the signed bytes, so a timestamp
stays valid independently of which issuer signature instance vouches for
its leaf key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tssig.core.encoding import decode_b64
from tssig.core.errors import PreconditionError, ValidationError
from tssig.core.timefmt import format_rfc3339_nanos, to_datetime

if TYPE_CHECKING:
    from datetime import datetime

    from tssig.services.issuer import Issuer

# SHA-224, SHA-256, SHA-384 and SHA-512 output sizes in bytes
DIGEST_SIZES = frozenset({224 // 8, 256 // 8, 384 // 8, 512 // 8})


@dataclass(slots=True)
class SignedTimestamp:
    """A digest, the time it was signed, and the leaf signature over both.

    Attributes:
        digest: Caller digest, 28, 32, 48 or 64 bytes.
        issuer: Issuer whose leaf key signed this timestamp.
        timestamp_ns: Signing time as UTC nanoseconds since the epoch.
        signature: Ed25519 leaf signature over bytes_to_sign().
    """

    digest: bytes
    issuer: Issuer | None = None
    timestamp_ns: int | None = None
    signature: bytes = b""

    def __post_init__(self) -> None:
        self.digest = bytes(self.digest)
        if len(self.digest) not in DIGEST_SIZES:
            msg = (
                "Digest must be exactly 224, 256, 384, or 512 bits. "
                f"{len(self.digest) * 8} bits found"
            )
            raise ValidationError(msg)

    @property
    def is_signed(self) -> bool:
        """Whether the leaf signature has been set."""
        return bool(self.signature)

    @property
    def signed_at(self) -> datetime | None:
        """Signing time as an aware datetime (microsecond precision)."""
        if self.timestamp_ns is None:
            return None
        return to_datetime(self.timestamp_ns)

    def bytes_to_sign(self) -> bytes:
        """Bytes covered by the leaf signature.

        Raises:
            PreconditionError: If no signing time has been assigned.
        """
        if self.timestamp_ns is None:
            raise PreconditionError("Timestamp has no signing time yet")
        return self.digest + format_rfc3339_nanos(self.timestamp_ns).encode("ascii")


def create_signed_timestamp(digest: str) -> SignedTimestamp:
    """Create an unsigned SignedTimestamp from a base64url digest.

    Args:
        digest: Unpadded base64url encoding of the digest bytes.

    Returns:
        Unsigned SignedTimestamp, ready for Issuer.sign_timestamp().

    Raises:
        EncodingError: If the digest is not valid base64url.
        ValidationError: If the decoded digest has an unsupported length.
    """
    return SignedTimestamp(digest=decode_b64(digest))

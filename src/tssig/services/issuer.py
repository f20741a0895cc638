"""Issuer entity: a leaf signing key vouched for by a root key.

An Issuer carries:
- the leaf public key (DER), which verifies SignedTimestamps,
- the URL of the DER-encoded root public key, which verifies the Issuer,
- the root signature over root_key_url || leaf_public_key.

Lifecycle:
1. create_issuer() / Issuer.generate() - unsigned, owns the leaf private key
2. sign_issuer(signer) - root key signs, exactly once
3. sign_timestamp(sts) / timestamp(digest) - leaf key signs timestamps

The leaf private key lives in a private slot. It is excluded from repr and
equality and is never written by the wire format, so an Issuer loaded from
the wire can be verified but cannot sign.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.asymmetric import ed25519

from tssig.core.errors import (
    PreconditionError,
    UnsupportedKeyTypeError,
    ValidationError,
)
from tssig.services.algorithms import encode_public_key
from tssig.services.stamp import SignedTimestamp

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

    from tssig.services.signers import Signer

logger = logging.getLogger(__name__)


class Issuer:
    """Binds a leaf Ed25519 key to a root-key signature."""

    __slots__ = ("root_key_url", "leaf_public_key", "issuer_signature", "_leaf_private_key")

    def __init__(
        self,
        leaf_public_key: bytes,
        *,
        root_key_url: str = "",
        issuer_signature: bytes = b"",
        leaf_private_key: ed25519.Ed25519PrivateKey | None = None,
    ) -> None:
        """Initialize an Issuer.

        Prefer create_issuer() or Issuer.generate() to build a signing
        Issuer; this constructor is also used when decoding from the wire,
        where no private key is available.

        Args:
            leaf_public_key: DER-encoded leaf public key.
            root_key_url: URL of the root public key (empty until signed).
            issuer_signature: Root signature (empty until signed).
            leaf_private_key: Leaf private key, if this Issuer signs.
        """
        self.root_key_url = root_key_url
        self.leaf_public_key = bytes(leaf_public_key)
        self.issuer_signature = bytes(issuer_signature)
        self._leaf_private_key = leaf_private_key

    @classmethod
    def generate(cls) -> Issuer:
        """Create an unsigned Issuer with a fresh Ed25519 leaf key."""
        private_key = ed25519.Ed25519PrivateKey.generate()
        return create_issuer(private_key.public_key(), private_key)

    @property
    def is_signed(self) -> bool:
        """Whether the root signature and key URL are both present."""
        return bool(self.root_key_url) and bool(self.issuer_signature)

    @property
    def can_sign(self) -> bool:
        """Whether this Issuer holds a leaf private key."""
        return self._leaf_private_key is not None

    def bytes_to_sign(self) -> bytes:
        """Bytes covered by the root signature: root_key_url || leaf_public_key."""
        return self.root_key_url.encode("utf-8") + self.leaf_public_key

    def sign_issuer(self, signer: Signer) -> None:
        """Sign the leaf public key with the root private key.

        Signing is append-only: once signed, an Issuer keeps its key URL and
        signature for life and a second call raises PreconditionError
        instead of overwriting them, so timestamps already issued keep the
        chain they were signed under.

        The key URL and signature are only stored once both signer calls
        have succeeded, so a failed attempt leaves the Issuer unsigned and
        can be retried.

        Args:
            signer: Signer holding the root private key.

        Raises:
            PreconditionError: If the Issuer is already signed.
            ValidationError: If the signer returns an empty URL or signature.
        """
        if self.is_signed:
            raise PreconditionError("Issuer is already signed")

        key_url = signer.key_url()
        if not key_url:
            raise ValidationError("Signer returned an empty key URL")

        signature = signer.sign(key_url.encode("utf-8") + self.leaf_public_key)
        if not signature:
            raise ValidationError("Signer returned an empty signature")

        self.root_key_url = key_url
        self.issuer_signature = bytes(signature)
        logger.info("Issuer signed by root key %s", key_url)

    def sign_timestamp(self, sts: SignedTimestamp) -> None:
        """Sign a timestamp with the leaf private key.

        Sets the issuer, the current UTC time and the leaf signature on sts.

        Raises:
            PreconditionError: If this Issuer is unsigned or has no private
                key, or if sts is already signed.
        """
        if not self.is_signed:
            raise PreconditionError("Issuer needs signing before it can be used")
        if self._leaf_private_key is None:
            raise PreconditionError("Issuer has no leaf private key")
        if sts.is_signed:
            raise PreconditionError("Timestamp is already signed")

        timestamp_ns = time.time_ns()
        signed = SignedTimestamp(digest=sts.digest, timestamp_ns=timestamp_ns)
        signature = self._leaf_private_key.sign(signed.bytes_to_sign())

        sts.issuer = self
        sts.timestamp_ns = timestamp_ns
        sts.signature = signature

    def timestamp(self, digest: bytes) -> SignedTimestamp:
        """Create and sign a timestamp for a digest in one step."""
        sts = SignedTimestamp(digest=digest)
        self.sign_timestamp(sts)
        return sts

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Issuer):
            return NotImplemented
        return (
            self.root_key_url == other.root_key_url
            and self.leaf_public_key == other.leaf_public_key
            and self.issuer_signature == other.issuer_signature
        )

    def __repr__(self) -> str:
        return (
            f"Issuer(root_key_url={self.root_key_url!r}, "
            f"leaf_public_key=<{len(self.leaf_public_key)} bytes>, "
            f"signed={self.is_signed})"
        )


def create_issuer(
    public_key: PublicKeyTypes,
    private_key: ed25519.Ed25519PrivateKey,
) -> Issuer:
    """Create an unsigned Issuer from an Ed25519 leaf key pair.

    Args:
        public_key: Leaf public key; DER-encoded into the Issuer.
        private_key: Matching leaf private key, kept private to the Issuer.

    Returns:
        Unsigned Issuer.

    Raises:
        EncodingError: If the public key cannot be DER-encoded.
        UnsupportedKeyTypeError: If the keys are not Ed25519.
        ValidationError: If the private key does not match the public key.
    """
    public_der = encode_public_key(public_key)

    if not isinstance(public_key, ed25519.Ed25519PublicKey) or not isinstance(
        private_key, ed25519.Ed25519PrivateKey
    ):
        msg = "Leaf keys must be Ed25519"
        raise UnsupportedKeyTypeError(msg)

    if encode_public_key(private_key.public_key()) != public_der:
        raise ValidationError("Leaf private key does not match the public key")

    return Issuer(public_der, leaf_private_key=private_key)

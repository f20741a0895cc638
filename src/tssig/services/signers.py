"""Root key signers used to sign Issuers.

A Signer holds (or fronts) a root private key and knows the URL where the
matching DER public key is published. Issuer.sign_issuer() only depends on
the Signer protocol, so key custody can be swapped (HSM, KMS, remote
service) without touching the signing protocol.

The two signers here hold the private key in process memory.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from tssig.core.errors import UnsupportedKeyTypeError
from tssig.services.algorithms import hash_for_curve, sign_message


@runtime_checkable
class Signer(Protocol):
    """Signs an Issuer's leaf key with a root private key."""

    def key_url(self) -> str:
        """URL of the DER-encoded root public key."""
        ...

    def sign(self, message: bytes) -> bytes:
        """Sign a message with the root private key."""
        ...


class LocalEcdsaSigner:
    """Signs with a local ECDSA private key on a 256, 384 or 521 bit curve.

    Example:
        key = ec.generate_private_key(ec.SECP384R1())
        signer = LocalEcdsaSigner("https://keys.example.com/root.der", key)
        issuer.sign_issuer(signer)
    """

    def __init__(self, public_key_url: str, private_key: ec.EllipticCurvePrivateKey) -> None:
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            msg = f"Expected an ECDSA private key, got {type(private_key).__name__}"
            raise UnsupportedKeyTypeError(msg)
        # Fail at construction rather than on first use
        hash_for_curve(private_key.curve.key_size)
        self._public_key_url = public_key_url
        self._private_key = private_key

    def key_url(self) -> str:
        return self._public_key_url

    def sign(self, message: bytes) -> bytes:
        return sign_message(self._private_key, message)


class LocalEd25519Signer:
    """Signs with a local Ed25519 private key."""

    def __init__(self, public_key_url: str, private_key: ed25519.Ed25519PrivateKey) -> None:
        if not isinstance(private_key, ed25519.Ed25519PrivateKey):
            msg = f"Expected an Ed25519 private key, got {type(private_key).__name__}"
            raise UnsupportedKeyTypeError(msg)
        self._public_key_url = public_key_url
        self._private_key = private_key

    def key_url(self) -> str:
        return self._public_key_url

    def sign(self, message: bytes) -> bytes:
        return sign_message(self._private_key, message)

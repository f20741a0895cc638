"""Signature algorithm dispatch shared by signers and the verifier.

Supported keys:
- ECDSA on 256, 384 and 521 bit curves, hashed with SHA-256, SHA-384 and
  SHA-512 respectively. Signatures are DER SEQUENCE{r, s}.
- Ed25519, pure (no pre-hash), 64 byte signatures.

Signing and verification must pick the same hash for a key, so both go
through hash_for_curve().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_der_public_key,
)

from tssig.core.errors import (
    EncodingError,
    InvalidSignatureError,
    KeyParseError,
    UnsupportedKeySizeError,
    UnsupportedKeyTypeError,
)

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )


_CURVE_HASHES: dict[int, type[hashes.HashAlgorithm]] = {
    256: hashes.SHA256,
    384: hashes.SHA384,
    521: hashes.SHA512,
}


def hash_for_curve(key_size: int) -> hashes.HashAlgorithm:
    """Select the ECDSA hash for a curve size.

    Raises:
        UnsupportedKeySizeError: If the curve is not 256, 384 or 521 bits.
    """
    hash_cls = _CURVE_HASHES.get(key_size)
    if hash_cls is None:
        raise UnsupportedKeySizeError(key_size)
    return hash_cls()


def sign_message(private_key: PrivateKeyTypes, message: bytes) -> bytes:
    """Sign a message with an ECDSA or Ed25519 private key.

    Raises:
        UnsupportedKeySizeError: ECDSA key on an unsupported curve.
        UnsupportedKeyTypeError: Any other key type.
    """
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        algorithm = hash_for_curve(private_key.curve.key_size)
        return private_key.sign(message, ec.ECDSA(algorithm))
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return private_key.sign(message)
    msg = f"Unsupported key type: {type(private_key).__name__}"
    raise UnsupportedKeyTypeError(msg)


def verify_signature(public_key: PublicKeyTypes, signature: bytes, message: bytes) -> None:
    """Verify a signature made by sign_message().

    Raises:
        InvalidSignatureError: If the signature does not match.
        UnsupportedKeySizeError: ECDSA key on an unsupported curve.
        UnsupportedKeyTypeError: Any other key type.
    """
    try:
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            algorithm = hash_for_curve(public_key.curve.key_size)
            public_key.verify(signature, message, ec.ECDSA(algorithm))
        elif isinstance(public_key, ed25519.Ed25519PublicKey):
            public_key.verify(signature, message)
        else:
            msg = f"Unsupported key type: {type(public_key).__name__}"
            raise UnsupportedKeyTypeError(msg)
    except InvalidSignature as e:
        raise InvalidSignatureError("Signature does not match") from e


def encode_public_key(public_key: PublicKeyTypes) -> bytes:
    """DER-encode a public key as SubjectPublicKeyInfo.

    Raises:
        EncodingError: If the object cannot be DER-encoded.
    """
    try:
        return public_key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)
    except (AttributeError, TypeError, ValueError, UnsupportedAlgorithm) as e:
        msg = f"Cannot DER-encode public key of type {type(public_key).__name__}"
        raise EncodingError(msg) from e


def load_public_key(der: bytes) -> PublicKeyTypes:
    """Parse a DER SubjectPublicKeyInfo public key.

    Raises:
        KeyParseError: If the DER is malformed or names an unknown algorithm.
    """
    try:
        return load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"Malformed DER public key: {e}") from e

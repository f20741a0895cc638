"""Error taxonomy for signed timestamp operations.

Every failure raised by tssig derives from TSSigError so callers can catch
the whole family in one place. Errors from cryptography, httpx and pydantic
are wrapped into these types (with the original chained as __cause__).

Nothing in tssig retries. TransportError is the only class that is usually
transient, and retry policy for it belongs to the caller.
"""

from __future__ import annotations


class TSSigError(Exception):
    """Base exception for tssig errors."""

    pass


class ValidationError(TSSigError):
    """A required field is empty or malformed (e.g. bad digest length)."""

    pass


class EncodingError(TSSigError):
    """DER, base64 or wire record encoding/decoding failed."""

    pass


class KeyParseError(EncodingError):
    """A DER public key could not be parsed or is not of the expected type."""

    pass


class UnsupportedAlgorithmError(TSSigError):
    """Key type or key size is not supported."""

    pass


class UnsupportedKeySizeError(UnsupportedAlgorithmError):
    """ECDSA curve size is not one of 256, 384 or 521 bits."""

    def __init__(self, key_size: int) -> None:
        super().__init__(f"Invalid key size - must be 256, 384 or 521. {key_size} found")
        self.key_size = key_size


class UnsupportedKeyTypeError(UnsupportedAlgorithmError):
    """Key is neither ECDSA nor Ed25519."""

    pass


class TrustDeniedError(TSSigError):
    """Root key URL is outside the configured trust policy."""

    def __init__(self, key_url: str) -> None:
        super().__init__(f"Issuer key {key_url} is not trusted")
        self.key_url = key_url


class TransportError(TSSigError):
    """Fetching a root key failed at the transport level."""

    pass


class ResourceTooLargeError(TSSigError):
    """A fetched root key exceeds the maximum allowed size."""

    pass


class InvalidSignatureError(TSSigError):
    """A signature does not verify against its message and key."""

    pass


class DigestMismatchError(TSSigError):
    """The expected digest differs from the one bound in the timestamp."""

    pass


class PreconditionError(TSSigError):
    """An operation was attempted out of order.

    For example signing a timestamp with an issuer that has not been signed,
    or signing an issuer or timestamp a second time.
    """

    pass

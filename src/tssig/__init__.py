"""tssig - signed trusted timestamps.

A short-lived Ed25519 leaf key, vouched for by a root key published at a
URL, signs caller digests together with the time of signing. Verifiers
check the leaf signature locally and the root signature against a trust
policy and the fetched root key.

Example:
    issuer = Issuer.generate()
    issuer.sign_issuer(LocalEcdsaSigner(root_key_url, root_private_key))
    sts = issuer.timestamp(hashlib.sha256(document).digest())

    verifier = Verifier(TrustedIssuerKeys([root_key_prefix]))
    await verifier.verify_with_digest(sts, hashlib.sha256(document).digest())
"""

from tssig.core.errors import (
    DigestMismatchError,
    EncodingError,
    InvalidSignatureError,
    KeyParseError,
    PreconditionError,
    ResourceTooLargeError,
    TransportError,
    TrustDeniedError,
    TSSigError,
    UnsupportedAlgorithmError,
    UnsupportedKeySizeError,
    UnsupportedKeyTypeError,
    ValidationError,
)
from tssig.services import (
    CachingKeyLookup,
    HttpKeyLookup,
    Issuer,
    LocalEcdsaSigner,
    LocalEd25519Signer,
    SignedTimestamp,
    TrustedIssuerKeys,
    Verifier,
    create_issuer,
    create_signed_timestamp,
    create_verifier,
    dump_signed_timestamp,
    load_signed_timestamp,
)

__version__ = "0.1.0"
__all__ = [
    "CachingKeyLookup",
    "DigestMismatchError",
    "EncodingError",
    "HttpKeyLookup",
    "InvalidSignatureError",
    "Issuer",
    "KeyParseError",
    "LocalEcdsaSigner",
    "LocalEd25519Signer",
    "PreconditionError",
    "ResourceTooLargeError",
    "SignedTimestamp",
    "TSSigError",
    "TransportError",
    "TrustDeniedError",
    "TrustedIssuerKeys",
    "UnsupportedAlgorithmError",
    "UnsupportedKeySizeError",
    "UnsupportedKeyTypeError",
    "ValidationError",
    "Verifier",
    "__version__",
    "create_issuer",
    "create_signed_timestamp",
    "create_verifier",
    "dump_signed_timestamp",
    "load_signed_timestamp",
]

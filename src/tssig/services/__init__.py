"""tssig service layer.

This package contains the signing protocol and the verification engine:
- Issuer / SignedTimestamp: leaf-key signing of caller digests
- LocalEcdsaSigner / LocalEd25519Signer: root key signers for Issuers
- HttpKeyLookup / CachingKeyLookup: bounded root public key download
- TrustedIssuerKeys: prefix allow-list trust policy
- Verifier: two-stage chain verification
- wire: versioned JSON wire format
"""

from tssig.services.issuer import Issuer, create_issuer
from tssig.services.key_lookup import (
    MAX_KEY_DOWNLOAD_SIZE,
    CachingKeyLookup,
    HttpKeyLookup,
    KeyLookup,
)
from tssig.services.signers import LocalEcdsaSigner, LocalEd25519Signer, Signer
from tssig.services.stamp import DIGEST_SIZES, SignedTimestamp, create_signed_timestamp
from tssig.services.trust_policy import TrustedIssuerKeyCheck, TrustedIssuerKeys
from tssig.services.verifier import Verifier, create_verifier
from tssig.services.wire import (
    WIRE_FORMAT_VERSION,
    dump_signed_timestamp,
    load_signed_timestamp,
)

__all__ = [
    "DIGEST_SIZES",
    "MAX_KEY_DOWNLOAD_SIZE",
    "WIRE_FORMAT_VERSION",
    "CachingKeyLookup",
    "HttpKeyLookup",
    "Issuer",
    "KeyLookup",
    "LocalEcdsaSigner",
    "LocalEd25519Signer",
    "SignedTimestamp",
    "Signer",
    "TrustedIssuerKeyCheck",
    "TrustedIssuerKeys",
    "Verifier",
    "create_issuer",
    "create_signed_timestamp",
    "create_verifier",
    "dump_signed_timestamp",
    "load_signed_timestamp",
]

"""Pytest configuration and shared fixtures.

Root keys are generated per test; no network access is needed. HTTP key
lookups are exercised with httpx.MockTransport in test_key_lookup.py,
everything else uses StaticKeyLookup.
"""

from __future__ import annotations

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from tssig.core.errors import TransportError
from tssig.services.algorithms import encode_public_key
from tssig.services.issuer import Issuer
from tssig.services.signers import LocalEcdsaSigner
from tssig.services.trust_policy import TrustedIssuerKeys
from tssig.services.verifier import Verifier

TRUSTED_PREFIX = "https://keys.example.com/root/"
ROOT_KEY_URL = TRUSTED_PREFIX + "2026.der"


class StaticKeyLookup:
    """KeyLookup serving DER keys from a dict and recording requested URLs."""

    def __init__(self, keys: dict[str, bytes] | None = None) -> None:
        self.keys = dict(keys or {})
        self.calls: list[str] = []

    async def get(self, url: str) -> bytes:
        self.calls.append(url)
        try:
            return self.keys[url]
        except KeyError:
            raise TransportError(f"No key published at {url}") from None


# ---------------------------------------------------------------------------
# Key and signer fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def root_private_key() -> ec.EllipticCurvePrivateKey:
    """ECDSA P-384 root key."""
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture
def root_der(root_private_key) -> bytes:
    """DER of the root public key, as published at ROOT_KEY_URL."""
    return encode_public_key(root_private_key.public_key())


@pytest.fixture
def root_signer(root_private_key) -> LocalEcdsaSigner:
    return LocalEcdsaSigner(ROOT_KEY_URL, root_private_key)


# ---------------------------------------------------------------------------
# Issuer and verifier fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def signed_issuer(root_signer) -> Issuer:
    """Issuer with a fresh leaf key, signed by the root key."""
    issuer = Issuer.generate()
    issuer.sign_issuer(root_signer)
    return issuer


@pytest.fixture
def digest() -> bytes:
    return hashlib.sha256(b"quarterly report, final version").digest()


@pytest.fixture
def key_lookup(root_der) -> StaticKeyLookup:
    return StaticKeyLookup({ROOT_KEY_URL: root_der})


@pytest.fixture
def verifier(key_lookup) -> Verifier:
    return Verifier(TrustedIssuerKeys([TRUSTED_PREFIX]), key_lookup=key_lookup)


@pytest.fixture
def root_key_url() -> str:
    return ROOT_KEY_URL


@pytest.fixture
def trusted_prefix() -> str:
    return TRUSTED_PREFIX


@pytest.fixture
def make_key_lookup():
    """Factory for StaticKeyLookup instances."""
    return StaticKeyLookup

"""Verification of SignedTimestamps and their Issuers.

Verification is a two-stage chain check:
1. Issuer: the root key URL is trusted, the root key is fetched, and the
   root signature over root_key_url || leaf_public_key verifies.
2. Timestamp: the leaf signature over digest || RFC 3339 time verifies.

verify() runs both. The issuer check waits on the network and the
timestamp check is local and fast, so the issuer check is started as an
asyncio task and given one loop step to reach its first suspension point
(normally the root key download). The local check then runs while the
download is in flight.

If the local check fails its error is raised at once and the issuer task
is abandoned: it keeps running to completion (bounded by the key lookup
timeout), its result is retrieved and discarded, and nothing waits on it.
Abandoned tasks are held in _abandoned_checks until they finish so the
event loop does not garbage-collect them mid-flight.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.asymmetric import ed25519

from tssig.core.errors import (
    DigestMismatchError,
    InvalidSignatureError,
    KeyParseError,
    TrustDeniedError,
    ValidationError,
)
from tssig.services.algorithms import load_public_key, verify_signature
from tssig.services.key_lookup import CachingKeyLookup, HttpKeyLookup, KeyLookup
from tssig.services.trust_policy import TrustedIssuerKeyCheck, TrustedIssuerKeys

if TYPE_CHECKING:
    from tssig.core.config import Settings
    from tssig.services.issuer import Issuer
    from tssig.services.stamp import SignedTimestamp

logger = logging.getLogger(__name__)

# Issuer checks whose caller returned early; kept alive until they finish
_abandoned_checks: set[asyncio.Task[None]] = set()


def _discard_result(task: asyncio.Task[None]) -> None:
    """Done callback for abandoned issuer checks."""
    _abandoned_checks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Discarded issuer check result: %s", exc)


def _abandon(task: asyncio.Task[None]) -> None:
    if task.done():
        _discard_result(task)
        return
    _abandoned_checks.add(task)
    task.add_done_callback(_discard_result)


class Verifier:
    """Verifies SignedTimestamps against a trust policy.

    A Verifier holds no mutable state; one instance can serve concurrent
    verifications as long as its key lookup and trust policy allow
    concurrent use.

    Example:
        verifier = Verifier(TrustedIssuerKeys(["https://keys.example.com/"]))
        await verifier.verify_with_digest(sts, expected_digest)
    """

    def __init__(
        self,
        trusted_issuers: TrustedIssuerKeyCheck,
        key_lookup: KeyLookup | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            trusted_issuers: Trust policy for root key URLs.
            key_lookup: Root key lookup; defaults to a direct HTTP download
                with a 5 second timeout.
        """
        if key_lookup is None:
            key_lookup = HttpKeyLookup()
        self._trusted_issuers = trusted_issuers
        self._key_lookup = key_lookup

    async def verify_issuer(self, issuer: Issuer) -> None:
        """Verify that the leaf public key is signed by the trusted root key.

        Raises:
            ValidationError: If the key URL or leaf public key is empty.
            TrustDeniedError: If the key URL is outside the trust policy.
            TransportError: If the root key cannot be fetched.
            ResourceTooLargeError: If the root key download is too large.
            KeyParseError: If the root key DER is malformed.
            UnsupportedAlgorithmError: If the root key type or size is unsupported.
            InvalidSignatureError: If the issuer signature does not verify.
        """
        if not issuer.root_key_url:
            raise ValidationError("Issuer key url has not been set")
        if not issuer.leaf_public_key:
            raise ValidationError("Leaf public key der has not been set")

        if not await self._trusted_issuers.trusted(issuer.root_key_url):
            logger.warning("Rejected issuer with untrusted root key %s", issuer.root_key_url)
            raise TrustDeniedError(issuer.root_key_url)

        der = await self._key_lookup.get(issuer.root_key_url)
        root_key = load_public_key(der)

        try:
            verify_signature(root_key, issuer.issuer_signature, issuer.bytes_to_sign())
        except InvalidSignatureError as e:
            raise InvalidSignatureError("Issuer has invalid signature") from e

    def verify_signed_timestamp(self, sts: SignedTimestamp) -> None:
        """Verify the leaf signature on a SignedTimestamp.

        This check is local; it does not consult the trust policy.

        Raises:
            ValidationError: If the timestamp is unsigned or has no issuer.
            KeyParseError: If the leaf key DER is malformed or not Ed25519.
            InvalidSignatureError: If the timestamp signature does not verify.
        """
        if sts.issuer is None or sts.timestamp_ns is None or not sts.signature:
            raise ValidationError("Timestamp has not been signed")

        leaf_key = load_public_key(sts.issuer.leaf_public_key)
        if not isinstance(leaf_key, ed25519.Ed25519PublicKey):
            msg = f"Leaf key must be Ed25519, found {type(leaf_key).__name__}"
            raise KeyParseError(msg)

        try:
            verify_signature(leaf_key, sts.signature, sts.bytes_to_sign())
        except InvalidSignatureError as e:
            raise InvalidSignatureError("Stamp has invalid signature") from e

    async def verify(self, sts: SignedTimestamp) -> None:
        """Verify both the SignedTimestamp and its Issuer.

        The timestamp check's failure takes precedence and is raised without
        waiting for the issuer check. Cancelling this coroutine does not
        cancel the issuer check.

        Raises:
            Any error from verify_signed_timestamp() or verify_issuer().
        """
        if sts.issuer is None:
            raise ValidationError("Timestamp has not been signed")

        issuer_check = asyncio.create_task(self.verify_issuer(sts.issuer))
        # Let the issuer check start its key download before the local check
        try:
            await asyncio.sleep(0)
        except asyncio.CancelledError:
            _abandon(issuer_check)
            raise

        try:
            self.verify_signed_timestamp(sts)
        except Exception:
            _abandon(issuer_check)
            raise

        try:
            await asyncio.shield(issuer_check)
        except asyncio.CancelledError:
            if not issuer_check.done():
                _abandon(issuer_check)
            raise

    async def verify_with_digest(self, sts: SignedTimestamp, digest: bytes) -> None:
        """Check the timestamp is for digest, then run verify().

        Raises:
            DigestMismatchError: If digest differs from the timestamp's digest.
        """
        if not hmac.compare_digest(digest, sts.digest):
            raise DigestMismatchError(
                "The passed digest does not match the one associated with the time stamp"
            )
        await self.verify(sts)


def create_verifier(settings: Settings | None = None) -> Verifier:
    """Build a Verifier from configuration.

    Args:
        settings: Settings to use; defaults to get_settings().

    Returns:
        Verifier using a prefix trust policy and an HTTP key lookup, cached
        when key_lookup.cache_ttl is positive.
    """
    if settings is None:
        from tssig.core.settings import get_settings

        settings = get_settings()

    key_lookup: KeyLookup = HttpKeyLookup(timeout=settings.key_lookup.timeout)
    if settings.key_lookup.cache_ttl > 0:
        key_lookup = CachingKeyLookup(key_lookup, ttl=settings.key_lookup.cache_ttl)

    return Verifier(
        TrustedIssuerKeys(settings.trust.key_prefixes),
        key_lookup=key_lookup,
    )

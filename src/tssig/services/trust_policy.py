"""Trust policy for root key URLs.

The verifier only fetches root keys from URLs the policy accepts. Trust is
default-deny: a policy with no prefixes accepts nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from tssig.core.errors import ValidationError

logger = logging.getLogger(__name__)


@runtime_checkable
class TrustedIssuerKeyCheck(Protocol):
    """Decides whether a root key URL is within policy."""

    async def trusted(self, url: str) -> bool:
        """Return True if root keys at url are trusted."""
        ...


class TrustedIssuerKeys:
    """Prefix allow-list of trusted root key URLs.

    Example:
        policy = TrustedIssuerKeys(["https://keys.example.com/root/"])
        await policy.trusted("https://keys.example.com/root/2026.der")  # True
    """

    def __init__(self, key_prefixes: Iterable[str] = ()) -> None:
        """Initialize with trusted URL prefixes.

        Raises:
            ValidationError: If any prefix is empty or whitespace.
        """
        prefixes = tuple(key_prefixes)
        # Same rule as validate_settings()
        if any(not prefix.strip() for prefix in prefixes):
            raise ValidationError("Trusted key prefixes must not be blank")
        self._key_prefixes = prefixes

    @property
    def key_prefixes(self) -> tuple[str, ...]:
        return self._key_prefixes

    async def trusted(self, url: str) -> bool:
        # Linear scan, fine for a small number of trusted issuers
        for prefix in self._key_prefixes:
            if url.startswith(prefix):
                return True
        logger.debug("No trusted prefix matches %s", url)
        return False

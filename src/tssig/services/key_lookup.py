"""Root public key lookup.

The verifier resolves an Issuer's root key URL to DER bytes through the
KeyLookup protocol. HttpKeyLookup downloads directly from the URL;
CachingKeyLookup can be layered on top of any lookup.

Root keys are small (ECDSA DER is about 90 bytes, Ed25519 less), so downloads
are capped at MAX_KEY_DOWNLOAD_SIZE bytes. The cap is enforced from the
declared Content-Length before reading, and again while streaming so a
missing or wrong Content-Length cannot make us buffer an unbounded body.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import httpx

from tssig.core.config import DEFAULT_KEY_LOOKUP_TIMEOUT
from tssig.core.errors import ResourceTooLargeError, TransportError

logger = logging.getLogger(__name__)

# Max size in bytes of the body returned from a root key URL
MAX_KEY_DOWNLOAD_SIZE = 128


@runtime_checkable
class KeyLookup(Protocol):
    """Resolves a root public key URL to DER bytes."""

    async def get(self, url: str) -> bytes:
        """Return the DER-encoded public key published at url."""
        ...


class HttpKeyLookup:
    """Downloads root public keys directly from their URL.

    A new client is opened per lookup; nothing is shared between calls.

    Example:
        lookup = HttpKeyLookup(timeout=2.0)
        der = await lookup.get("https://keys.example.com/root.der")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_KEY_LOOKUP_TIMEOUT,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the lookup.

        Args:
            timeout: Seconds allowed for one whole lookup, body included.
            transport: Optional httpx transport (used by tests).
        """
        self._timeout = timeout
        self._transport = transport

    @property
    def timeout(self) -> float:
        return self._timeout

    async def get(self, url: str) -> bytes:
        """Download the DER public key at url.

        The timeout bounds the whole download, body included, as well as
        each individual network operation.

        Raises:
            ResourceTooLargeError: If the body exceeds MAX_KEY_DOWNLOAD_SIZE.
            TransportError: On any other HTTP or network failure.
        """
        try:
            async with (
                asyncio.timeout(self._timeout),
                httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client,
                client.stream("GET", url) as response,
            ):
                response.raise_for_status()
                _check_declared_length(response, url)
                der = await _read_bounded(response, MAX_KEY_DOWNLOAD_SIZE + 1)
        except httpx.HTTPStatusError as e:
            msg = f"Root key request to {url} failed: {e.response.status_code}"
            raise TransportError(msg) from e
        except (httpx.TimeoutException, TimeoutError) as e:
            raise TransportError(f"Timed out fetching root key from {url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Cannot fetch root key from {url}: {e}") from e

        if len(der) > MAX_KEY_DOWNLOAD_SIZE:
            msg = (
                f"The maximum allowed key size is {MAX_KEY_DOWNLOAD_SIZE} bytes. "
                "The returned key is bigger"
            )
            raise ResourceTooLargeError(msg)

        logger.debug("Fetched root key from %s (%d bytes)", url, len(der))
        return der


def _check_declared_length(response: httpx.Response, url: str) -> None:
    """Reject a response whose Content-Length is over the limit, unread."""
    declared = response.headers.get("Content-Length")
    if declared is None:
        return
    try:
        size = int(declared)
    except ValueError:
        # Unparseable length is treated as unknown; the read is still bounded
        logger.debug("Ignoring invalid Content-Length %r from %s", declared, url)
        return
    if size > MAX_KEY_DOWNLOAD_SIZE:
        msg = (
            f"The maximum allowed key size is {MAX_KEY_DOWNLOAD_SIZE} bytes. "
            f"The returned key is {size} bytes"
        )
        raise ResourceTooLargeError(msg)


async def _read_bounded(response: httpx.Response, limit: int) -> bytes:
    """Read at most limit bytes of the body (possibly fewer)."""
    buffer = bytearray()
    async for chunk in response.aiter_bytes():
        buffer.extend(chunk[: limit - len(buffer)])
        if len(buffer) >= limit:
            break
    return bytes(buffer)


class CachingKeyLookup:
    """Caches successful lookups from another KeyLookup for a fixed TTL.

    Failures are never cached. Entries expire on the monotonic clock and
    expired entries are dropped on the next cache miss.
    """

    def __init__(
        self,
        inner: KeyLookup,
        ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            inner: Lookup used on cache misses.
            ttl: Seconds an entry stays valid.
            clock: Monotonic clock, injectable for tests.
        """
        self._inner = inner
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, bytes]] = {}

    async def get(self, url: str) -> bytes:
        entry = self._entries.get(url)
        now = self._clock()
        if entry is not None and entry[0] > now:
            logger.debug("Root key cache hit for %s", url)
            return entry[1]

        self._evict_expired(now)
        der = await self._inner.get(url)
        self._entries[url] = (self._clock() + self._ttl, der)
        return der

    def _evict_expired(self, now: float) -> None:
        expired = [url for url, (expires_at, _) in self._entries.items() if expires_at <= now]
        for url in expired:
            del self._entries[url]

    def invalidate(self, url: str | None = None) -> None:
        """Drop the cached key for url, or every cached key."""
        if url is None:
            self._entries.clear()
        else:
            self._entries.pop(url, None)

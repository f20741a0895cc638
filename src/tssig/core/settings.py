"""Singleton settings accessor for tssig configuration.

Usage:
    from tssig.core.settings import get_settings

    settings = get_settings()
    timeout = settings.key_lookup.timeout

The settings are loaded once and cached. To reload settings (e.g., in tests),
use clear_settings_cache().
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import ValidationError

from tssig.core.config import (
    ConfigValidationError,
    Settings,
    validate_settings,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings.

    Returns:
        Validated Settings instance.

    Raises:
        SystemExit: If settings cannot be loaded (fail-fast behavior).
    """
    try:
        logger.info("Loading tssig settings from environment")
        settings = Settings()
        validate_settings(settings)

        logger.info(
            "Configuration loaded: trusted_prefixes=%d, lookup_timeout=%.1fs, cache_ttl=%.0fs",
            len(settings.trust.key_prefixes),
            settings.key_lookup.timeout,
            settings.key_lookup.cache_ttl,
        )
        logger.debug("Configuration snapshot: %s", settings.get_policy_snapshot())
        return settings

    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        logger.critical(
            "Configuration validation failed:\n%s",
            "\n".join(error_messages),
        )
        raise SystemExit(1) from e

    except ConfigValidationError as e:
        logger.critical(
            "Configuration validation failed: %s (field: %s)",
            e.message,
            e.field or "unknown",
        )
        raise SystemExit(1) from e


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Use this function in tests to reset settings between test cases.
    """
    get_settings.cache_clear()
    logger.debug("Settings cache cleared")

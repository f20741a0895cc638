"""Configuration management for tssig verifiers.

This module provides centralized configuration using Pydantic Settings.
All configuration is loaded from environment variables with the TSSIG_
prefix. Nested settings use double underscore as delimiter
(e.g., TSSIG_KEY_LOOKUP__TIMEOUT).

List values are given as JSON in the environment.

Example:
    export TSSIG_TRUST__KEY_PREFIXES='["https://keys.example.com/"]'
    export TSSIG_KEY_LOOKUP__TIMEOUT=2.5
    export TSSIG_KEY_LOOKUP__CACHE_TTL=300
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Default timeout for root key downloads (seconds)
DEFAULT_KEY_LOOKUP_TIMEOUT = 5.0


class KeyLookupSettings(BaseSettings):
    """Root public key download settings."""

    model_config = SettingsConfigDict(
        env_prefix="TSSIG_KEY_LOOKUP__",
        extra="ignore",
    )

    timeout: Annotated[float, Field(gt=0, le=120)] = Field(
        default=DEFAULT_KEY_LOOKUP_TIMEOUT,
        description="Timeout in seconds for fetching a root public key",
    )
    cache_ttl: Annotated[float, Field(ge=0)] = Field(
        default=0,
        description="Seconds to cache fetched root keys (0 disables caching)",
    )


class TrustSettings(BaseSettings):
    """Trust policy settings.

    A root key URL is trusted when it starts with one of the configured
    prefixes. With no prefixes every issuer is rejected.
    """

    model_config = SettingsConfigDict(
        env_prefix="TSSIG_TRUST__",
        extra="ignore",
    )

    key_prefixes: list[str] = Field(
        default_factory=list,
        description="Trusted root key URL prefixes",
    )


class Settings(BaseSettings):
    """Main tssig configuration container.

    Example environment variables:
        TSSIG_TRUST__KEY_PREFIXES='["https://keys.example.com/root/"]'
        TSSIG_KEY_LOOKUP__TIMEOUT=5
    """

    model_config = SettingsConfigDict(
        env_prefix="TSSIG_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    key_lookup: KeyLookupSettings = Field(default_factory=KeyLookupSettings)
    trust: TrustSettings = Field(default_factory=TrustSettings)

    @model_validator(mode="after")
    def warn_on_weak_trust_policy(self) -> Self:
        """Flag trust policies that reject everything or trust plain HTTP."""
        if not self.trust.key_prefixes:
            logger.warning(
                "No trusted key prefixes configured. Every issuer will be rejected. "
                "Set TSSIG_TRUST__KEY_PREFIXES to trust root keys."
            )
        for prefix in self.trust.key_prefixes:
            if prefix.startswith("http://"):
                logger.warning(
                    "Trusted key prefix %s uses plain HTTP. Root keys fetched from it "
                    "can be substituted in transit.",
                    prefix,
                )
        return self

    def get_policy_snapshot(self) -> dict[str, Any]:
        """Return the non-sensitive configuration for startup logging."""
        return {
            "key_lookup": {
                "timeout": self.key_lookup.timeout,
                "cache_ttl": self.key_lookup.cache_ttl,
            },
            "trust": {
                "key_prefixes": list(self.trust.key_prefixes),
            },
        }


class ConfigValidationError(Exception):
    """Raised when configuration validation fails.

    This exception should cause fast failure at startup to prevent
    running with invalid configuration.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with error details.

        Args:
            message: Human-readable error description.
            field: Optional field name that failed validation.
        """
        self.message = message
        self.field = field
        super().__init__(message)


def validate_settings(settings: Settings) -> None:
    """Perform runtime validation that is not expressed in the models.

    Args:
        settings: Settings instance to validate.

    Raises:
        ConfigValidationError: If validation fails.
    """
    for prefix in settings.trust.key_prefixes:
        # An empty prefix matches every URL
        if not prefix.strip():
            raise ConfigValidationError(
                "Trusted key prefixes must not be blank.",
                field="trust.key_prefixes",
            )

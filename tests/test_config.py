"""Tests for configuration management.

Tests cover:
- Loading configuration from environment variables
- Validation of invalid configuration
- Startup warnings for weak trust policies
- Settings singleton behavior
- Policy snapshot generation
"""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tssig.core.config import (
    DEFAULT_KEY_LOOKUP_TIMEOUT,
    ConfigValidationError,
    KeyLookupSettings,
    Settings,
    TrustSettings,
    validate_settings,
)
from tssig.core.settings import clear_settings_cache, get_settings

PREFIXES_JSON = '["https://keys.example.com/root/", "https://backup.example.com/"]'


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Clear settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestKeyLookupSettings:
    """Tests for root key lookup settings."""

    def test_defaults(self):
        settings = KeyLookupSettings()
        assert settings.timeout == DEFAULT_KEY_LOOKUP_TIMEOUT == 5.0
        assert settings.cache_ttl == 0

    @pytest.mark.parametrize("timeout", [0, -1, 121])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            KeyLookupSettings(timeout=timeout)

    def test_negative_cache_ttl(self):
        with pytest.raises(ValidationError):
            KeyLookupSettings(cache_ttl=-1)


class TestSettingsFromEnvironment:
    """Tests for loading Settings from TSSIG_ variables."""

    def test_defaults(self):
        settings = Settings()
        assert settings.key_lookup.timeout == 5.0
        assert settings.trust.key_prefixes == []

    def test_nested_values(self):
        with patch.dict(
            os.environ,
            {
                "TSSIG_TRUST__KEY_PREFIXES": PREFIXES_JSON,
                "TSSIG_KEY_LOOKUP__TIMEOUT": "2.5",
                "TSSIG_KEY_LOOKUP__CACHE_TTL": "300",
            },
            clear=False,
        ):
            settings = Settings()

        assert settings.trust.key_prefixes == [
            "https://keys.example.com/root/",
            "https://backup.example.com/",
        ]
        assert settings.key_lookup.timeout == 2.5
        assert settings.key_lookup.cache_ttl == 300

    def test_invalid_timeout(self):
        with (
            patch.dict(os.environ, {"TSSIG_KEY_LOOKUP__TIMEOUT": "0"}, clear=False),
            pytest.raises(ValidationError),
        ):
            Settings()


class TestTrustPolicyWarnings:
    """Tests for startup warnings about the trust policy."""

    def test_empty_policy_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tssig.core.config"):
            Settings(trust=TrustSettings(key_prefixes=[]))
        assert "Every issuer will be rejected" in caplog.text

    def test_plain_http_prefix_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tssig.core.config"):
            Settings(trust=TrustSettings(key_prefixes=["http://keys.example.com/"]))
        assert "plain HTTP" in caplog.text

    def test_https_prefix_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tssig.core.config"):
            Settings(trust=TrustSettings(key_prefixes=["https://keys.example.com/"]))
        assert caplog.records == []


class TestValidateSettings:
    """Tests for validate_settings()."""

    def test_valid(self):
        validate_settings(Settings(trust=TrustSettings(key_prefixes=["https://k.example/"])))

    @pytest.mark.parametrize("prefix", ["", "   "])
    def test_blank_prefix_rejected(self, prefix):
        settings = Settings(trust=TrustSettings(key_prefixes=["https://k.example/", prefix]))
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_settings(settings)
        assert exc_info.value.field == "trust.key_prefixes"


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self):
        first = get_settings()
        clear_settings_cache()
        with patch.dict(os.environ, {"TSSIG_TRUST__KEY_PREFIXES": PREFIXES_JSON}, clear=False):
            second = get_settings()
        assert first is not second
        assert len(second.trust.key_prefixes) == 2

    def test_blank_prefix_exits(self):
        with (
            patch.dict(os.environ, {"TSSIG_TRUST__KEY_PREFIXES": '[""]'}, clear=False),
            pytest.raises(SystemExit) as exc_info,
        ):
            get_settings()
        assert exc_info.value.code == 1

    def test_invalid_value_exits(self):
        with (
            patch.dict(os.environ, {"TSSIG_KEY_LOOKUP__TIMEOUT": "soon"}, clear=False),
            pytest.raises(SystemExit),
        ):
            get_settings()


class TestPolicySnapshot:
    """Tests for get_policy_snapshot()."""

    def test_snapshot(self):
        settings = Settings(
            key_lookup=KeyLookupSettings(timeout=3, cache_ttl=60),
            trust=TrustSettings(key_prefixes=["https://keys.example.com/"]),
        )
        assert settings.get_policy_snapshot() == {
            "key_lookup": {"timeout": 3.0, "cache_ttl": 60.0},
            "trust": {"key_prefixes": ["https://keys.example.com/"]},
        }

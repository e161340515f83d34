"""Unit tests for :class:`AuthSettings`."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sessionauth.core.settings import AuthSettings
from sessionauth.services._shared.errors import ConfigurationError


class TestAuthSettings:
    def test_from_mapping_reads_lifetimes_and_urls(self):
        settings = AuthSettings.from_mapping(
            {
                "JWT_ACCESS_SECRET": "a",
                "JWT_REFRESH_SECRET": "r",
                "ACCESS_EXPIRES_IN": "15m",
                "REFRESH_EXPIRES_IN": "30d",
                "ACTIVATION_EXPIRES_IN": "2h",
                "BACKEND_URL": "https://api.example.com/",
                "FRONTEND_ACTIVATION_URL": "https://app.example.com/",
            }
        )
        assert settings.access_ttl == timedelta(minutes=15)
        assert settings.refresh_ttl == timedelta(days=30)
        assert settings.activation_ttl == timedelta(hours=2)
        assert settings.backend_url == "https://api.example.com"
        assert settings.frontend_activation_url == "https://app.example.com"

    def test_defaults(self):
        settings = AuthSettings.from_mapping({"JWT_ACCESS_SECRET": "a", "JWT_REFRESH_SECRET": "r"})
        assert settings.access_ttl == timedelta(minutes=30)
        assert settings.refresh_ttl == timedelta(days=7)
        assert settings.activation_ttl == timedelta(hours=24)
        assert settings.algorithm == "HS256"

    def test_malformed_lifetime_falls_back(self):
        settings = AuthSettings.from_mapping(
            {"JWT_ACCESS_SECRET": "a", "JWT_REFRESH_SECRET": "r", "ACCESS_EXPIRES_IN": "later"}
        )
        assert settings.access_ttl == timedelta(days=7)

    @pytest.mark.parametrize(
        "config",
        [
            {},
            {"JWT_ACCESS_SECRET": "a"},
            {"JWT_REFRESH_SECRET": "r"},
            {"JWT_ACCESS_SECRET": "same", "JWT_REFRESH_SECRET": "same"},
        ],
    )
    def test_missing_or_shared_secrets_are_rejected(self, config):
        with pytest.raises(ConfigurationError):
            AuthSettings.from_mapping(config)

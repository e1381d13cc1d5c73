# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import SecretStr

from localeve.core.config.settings import (
    DEFAULT_ACCESS_SECRET,
    DEFAULT_REFRESH_SECRET,
    JWTSettings,
    PasswordSettings,
    RedisSettings,
    RevocationSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestJWTSettings:
    """Tests for JWTSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = JWTSettings()

        assert settings.algorithm == "HS256"
        assert settings.access_token_expire_minutes == 15
        assert settings.refresh_token_expire_days == 7
        assert settings.issuer == "localeve-api"
        assert settings.audience == "localeve-users"

    def test_expire_seconds_properties(self) -> None:
        """Test lifetime conversions to seconds."""
        settings = JWTSettings(access_token_expire_minutes=30, refresh_token_expire_days=1)

        assert settings.access_token_expire_seconds == 1800
        assert settings.refresh_token_expire_seconds == 86400

    def test_secret_keys_from_env(self) -> None:
        """Test secrets are loaded from JWT_ prefixed variables."""
        env = {
            "JWT_SECRET_KEY": "env-access-secret",
            "JWT_REFRESH_SECRET_KEY": "env-refresh-secret",
            "JWT_ACCESS_TOKEN_EXPIRE_MINUTES": "5",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = JWTSettings()

        assert settings.secret_key.get_secret_value() == "env-access-secret"
        assert settings.refresh_secret_key.get_secret_value() == "env-refresh-secret"
        assert settings.access_token_expire_minutes == 5

    def test_legacy_secret_variable_names(self) -> None:
        """Test JWT_SECRET and REFRESH_SECRET are accepted."""
        env = {
            "JWT_SECRET": "legacy-access-secret",
            "REFRESH_SECRET": "legacy-refresh-secret",
        }

        with patch.dict(os.environ, env, clear=False):
            os.environ.pop("JWT_SECRET_KEY", None)
            os.environ.pop("JWT_REFRESH_SECRET_KEY", None)
            settings = JWTSettings()

        assert settings.secret_key.get_secret_value() == "legacy-access-secret"
        assert settings.refresh_secret_key.get_secret_value() == "legacy-refresh-secret"

    def test_secrets_are_masked(self) -> None:
        """Test that secrets do not leak through repr."""
        settings = JWTSettings(secret_key=SecretStr("very-secret-value"))

        assert "very-secret-value" not in repr(settings)


class TestPasswordSettings:
    """Tests for PasswordSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = PasswordSettings()

        assert settings.iterations == 100_000
        assert settings.salt_bytes == 16
        assert settings.key_length == 32


class TestRevocationSettings:
    """Tests for RevocationSettings."""

    def test_default_backend_is_memory(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("REVOCATION_BACKEND", None)
            settings = RevocationSettings()

        assert settings.backend == "memory"
        assert settings.key_prefix == "localeve:auth"

    def test_backend_from_env(self) -> None:
        """Test backend selection from environment."""
        with patch.dict(os.environ, {"REVOCATION_BACKEND": "redis"}, clear=False):
            settings = RevocationSettings()

        assert settings.backend == "redis"

    def test_unknown_backend_rejected(self) -> None:
        """Test that only known backends are accepted."""
        with pytest.raises(ValueError):
            RevocationSettings(backend="memcached")  # type: ignore[arg-type]


class TestRedisSettings:
    """Tests for RedisSettings."""

    def test_url_without_password(self) -> None:
        """Test URL property without password."""
        settings = RedisSettings(host="cache", port=6380, database=2)

        assert settings.url == "redis://cache:6380/2"

    def test_url_with_password(self) -> None:
        """Test URL property with password."""
        settings = RedisSettings(
            host="cache",
            password=SecretStr("s3cret"),
            database=1,
        )

        assert settings.url == "redis://:s3cret@cache:6379/1"

    def test_url_with_empty_password(self) -> None:
        """Test that an empty password is treated as none."""
        settings = RedisSettings(password=SecretStr(""))

        assert settings.url == "redis://localhost:6379/0"


class TestSettings:
    """Tests for main Settings class."""

    def test_environment_properties(self) -> None:
        """Test is_development and is_production properties."""
        settings = Settings(environment="development")

        assert settings.is_development is True
        assert settings.is_production is False

    def test_production_with_default_jwt_secret_raises_error(self) -> None:
        """Test that production environment with default JWT secret raises error."""
        jwt_settings = JWTSettings(
            secret_key=SecretStr(DEFAULT_ACCESS_SECRET),
            refresh_secret_key=SecretStr("prod-refresh-secret"),
        )

        with pytest.raises(ValueError) as exc_info:
            Settings(environment="production", jwt=jwt_settings)

        assert "JWT secret key must be changed" in str(exc_info.value)

    def test_production_with_default_refresh_secret_raises_error(self) -> None:
        """Test that production environment with default refresh secret raises error."""
        jwt_settings = JWTSettings(
            secret_key=SecretStr("prod-access-secret"),
            refresh_secret_key=SecretStr(DEFAULT_REFRESH_SECRET),
        )

        with pytest.raises(ValueError) as exc_info:
            Settings(environment="production", jwt=jwt_settings)

        assert "refresh secret key must be changed" in str(exc_info.value)

    def test_production_with_shared_secret_raises_error(self) -> None:
        """Test that production rejects one secret for both token kinds."""
        jwt_settings = JWTSettings(
            secret_key=SecretStr("same-secret"),
            refresh_secret_key=SecretStr("same-secret"),
        )

        with pytest.raises(ValueError) as exc_info:
            Settings(environment="production", jwt=jwt_settings)

        assert "different secrets" in str(exc_info.value)

    def test_production_with_custom_secrets(self) -> None:
        """Test that production accepts distinct custom secrets."""
        jwt_settings = JWTSettings(
            secret_key=SecretStr("prod-access-secret"),
            refresh_secret_key=SecretStr("prod-refresh-secret"),
        )

        settings = Settings(environment="production", jwt=jwt_settings)

        assert settings.is_production is True

    def test_development_allows_default_secrets(self) -> None:
        """Test that default secrets are accepted outside production."""
        jwt_settings = JWTSettings(
            secret_key=SecretStr(DEFAULT_ACCESS_SECRET),
            refresh_secret_key=SecretStr(DEFAULT_REFRESH_SECRET),
        )

        settings = Settings(environment="development", jwt=jwt_settings)

        assert settings.jwt.secret_key.get_secret_value() == DEFAULT_ACCESS_SECRET


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_settings_instance(self) -> None:
        """Test that get_settings returns Settings instance."""
        clear_settings_cache()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_returns_cached_instance(self) -> None:
        """Test that get_settings returns cached instance."""
        clear_settings_cache()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_clear_cache_creates_new_instance(self) -> None:
        """Test that clearing cache creates new instance."""
        clear_settings_cache()

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

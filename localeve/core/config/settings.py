# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for LocalEve.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from localeve.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.jwt.issuer)
    'localeve-api'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCESS_SECRET = "your-super-secret-jwt-key-change-this-in-production"
DEFAULT_REFRESH_SECRET = "your-super-secret-refresh-key-change-this-in-production"


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Access and refresh tokens are signed with different secrets so that a
    leaked access secret cannot be used to mint refresh tokens.

    Attributes:
        secret_key: Secret key for signing access tokens.
        refresh_secret_key: Secret key for signing refresh tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token lifetime.
        refresh_token_expire_days: Refresh token lifetime.
        issuer: Value of the ``iss`` claim.
        audience: Value of the ``aud`` claim.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
        populate_by_name=True,
    )

    secret_key: SecretStr = Field(
        default=SecretStr(DEFAULT_ACCESS_SECRET),
        validation_alias=AliasChoices("JWT_SECRET_KEY", "JWT_SECRET"),
    )
    refresh_secret_key: SecretStr = Field(
        default=SecretStr(DEFAULT_REFRESH_SECRET),
        validation_alias=AliasChoices("JWT_REFRESH_SECRET_KEY", "REFRESH_SECRET"),
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    issuer: str = "localeve-api"
    audience: str = "localeve-users"

    @property
    def access_token_expire_seconds(self) -> int:
        """Access token lifetime in seconds."""
        return self.access_token_expire_minutes * 60

    @property
    def refresh_token_expire_seconds(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.refresh_token_expire_days * 24 * 60 * 60


class PasswordSettings(BaseSettings):
    """Password hashing configuration (PBKDF2-HMAC-SHA256).

    Attributes:
        iterations: PBKDF2 iteration count.
        salt_bytes: Length of the random salt.
        key_length: Length of the derived key.
    """

    model_config = SettingsConfigDict(
        env_prefix="PASSWORD_",
        extra="ignore",
    )

    iterations: int = 100_000
    salt_bytes: int = 16
    key_length: int = 32


class RevocationSettings(BaseSettings):
    """Token revocation store configuration.

    The in-memory backend loses every revocation on restart. The redis
    backend keeps revocations across restarts and between processes.

    Attributes:
        backend: Which RevocationStore implementation to build.
        key_prefix: Prefix for keys written by the redis backend.
    """

    model_config = SettingsConfigDict(
        env_prefix="REVOCATION_",
        extra="ignore",
    )

    backend: Literal["memory", "redis"] = "memory"
    key_prefix: str = "localeve:auth"


class RedisSettings(BaseSettings):
    """Redis configuration for the durable revocation store.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0
    max_connections: int = 50

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password is not None and self.password.get_secret_value():
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        jwt: JWT authentication settings.
        password: Password hashing settings.
        revocation: Token revocation store settings.
        redis: Redis settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    password: PasswordSettings = Field(default_factory=PasswordSettings)
    revocation: RevocationSettings = Field(default_factory=RevocationSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            access_secret = self.jwt.secret_key.get_secret_value()
            refresh_secret = self.jwt.refresh_secret_key.get_secret_value()

            if access_secret == DEFAULT_ACCESS_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
            if refresh_secret == DEFAULT_REFRESH_SECRET:
                raise ValueError(
                    "JWT refresh secret key must be changed from default in production. "
                    "Set JWT_REFRESH_SECRET_KEY environment variable."
                )
            if access_secret == refresh_secret:
                raise ValueError(
                    "Access and refresh tokens must be signed with different secrets."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication stack composition.

Builds the AuthService from settings and keeps the process-wide instance
the middleware uses. The revocation backend is selected by
``settings.revocation.backend``.

Example:
    >>> from localeve.domains.auth.factory import init_auth_service
    >>> auth_service = init_auth_service(get_settings())
"""

import logging
from typing import Optional

from localeve.core.config.settings import Settings, get_settings
from localeve.domains.auth.jwt import JWTManager
from localeve.domains.auth.password import PasswordHasher
from localeve.domains.auth.revocation import (
    InMemoryRevocationStore,
    RedisRevocationStore,
    RevocationStore,
)
from localeve.domains.auth.service import AuthService
from localeve.infrastructure.cache.redis_client import RedisClient

logger = logging.getLogger(__name__)

# Module-level state
_auth_service: Optional[AuthService] = None


def build_revocation_store(
    settings: Settings,
    redis_client: Optional[RedisClient] = None,
) -> RevocationStore:
    """Build the configured revocation store.

    Args:
        settings: Application settings.
        redis_client: Connected Redis client, required for the redis backend.

    Returns:
        RevocationStore implementation.

    Raises:
        ValueError: If the redis backend is selected without a client.
    """
    if settings.revocation.backend == "redis":
        if redis_client is None:
            raise ValueError("Redis revocation backend requires a connected Redis client")
        logger.info("Using Redis token revocation store")
        return RedisRevocationStore(
            redis_client,
            key_prefix=settings.revocation.key_prefix,
            blacklist_ttl_seconds=settings.jwt.refresh_token_expire_seconds,
        )

    logger.info("Using in-memory token revocation store; revocations are lost on restart")
    return InMemoryRevocationStore()


def build_auth_service(
    settings: Settings,
    redis_client: Optional[RedisClient] = None,
) -> AuthService:
    """Build a complete AuthService from settings.

    Args:
        settings: Application settings.
        redis_client: Connected Redis client, required for the redis backend.

    Returns:
        AuthService wired with its JWT manager, store and hasher.
    """
    password_hasher = PasswordHasher(
        iterations=settings.password.iterations,
        salt_bytes=settings.password.salt_bytes,
        key_length=settings.password.key_length,
    )
    return AuthService(
        jwt_manager=JWTManager(settings.jwt),
        revocation_store=build_revocation_store(settings, redis_client),
        password_hasher=password_hasher,
    )


def init_auth_service(
    settings: Settings,
    redis_client: Optional[RedisClient] = None,
) -> AuthService:
    """Build the process-wide AuthService.

    This should be called once at application startup.

    Args:
        settings: Application settings.
        redis_client: Connected Redis client, required for the redis backend.

    Returns:
        The new AuthService.
    """
    global _auth_service

    _auth_service = build_auth_service(settings, redis_client)
    return _auth_service


def get_auth_service() -> AuthService:
    """Get the process-wide AuthService.

    Builds one from get_settings() on first use when the in-memory backend
    is configured.

    Returns:
        The AuthService instance.

    Raises:
        ValueError: If the redis backend is configured and init_auth_service()
            has not been called.
    """
    if _auth_service is None:
        return init_auth_service(get_settings())
    return _auth_service


def reset_auth_service() -> None:
    """Forget the process-wide AuthService. Useful for testing."""
    global _auth_service

    _auth_service = None

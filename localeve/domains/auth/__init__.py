# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

This module provides the authentication core:
- Password hashing (PBKDF2-HMAC-SHA256)
- JWT access and refresh token creation and validation
- Token revocation (single session and all sessions of a user)
- The AuthService façade used by route middleware

Exports:
    PasswordHasher: Salted password hashing.
    JWTManager: JWT token creation and validation.
    InMemoryRevocationStore: Process-local revocation store.
    RedisRevocationStore: Durable revocation store.
    AuthService: Authentication façade.
"""

from localeve.domains.auth.factory import build_auth_service, get_auth_service, init_auth_service
from localeve.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
    TokenPayload,
    TokenRevokedError,
)
from localeve.domains.auth.password import PasswordHasher
from localeve.domains.auth.revocation import (
    InMemoryRevocationStore,
    RedisRevocationStore,
    RevocationStore,
)
from localeve.domains.auth.service import AuthService, InvalidCredentialsError

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "TokenPair",
    "TokenPayload",
    "InvalidTokenError",
    "TokenExpiredError",
    "TokenRevokedError",
    "RevocationStore",
    "InMemoryRevocationStore",
    "RedisRevocationStore",
    "AuthService",
    "InvalidCredentialsError",
    "build_auth_service",
    "init_auth_service",
    "get_auth_service",
]

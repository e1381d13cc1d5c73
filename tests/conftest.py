# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from localeve.domains.auth.jwt import JWTManager
from localeve.domains.auth.password import PasswordHasher
from localeve.domains.auth.revocation import InMemoryRevocationStore
from localeve.domains.auth.service import AuthService


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Clock
# =============================================================================


class FrozenClock:
    """Controllable clock for token issuance and verification."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward by a timedelta built from kwargs."""
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    """Provide a clock frozen at a fixed instant."""
    return FrozenClock(datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-access-secret-for-jwt-testing")
    settings.refresh_secret_key = SecretStr("test-refresh-secret-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 15
    settings.refresh_token_expire_days = 7
    settings.issuer = "localeve-api"
    settings.audience = "localeve-users"
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock, clock: FrozenClock) -> JWTManager:
    """Create JWT manager with test settings and a frozen clock."""
    return JWTManager(jwt_settings, clock=clock)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Create a password hasher with a low iteration count for speed."""
    return PasswordHasher(iterations=1_000)


@pytest.fixture
def revocation_store() -> InMemoryRevocationStore:
    """Create an isolated in-memory revocation store."""
    return InMemoryRevocationStore()


@pytest.fixture
def auth_service(
    jwt_manager: JWTManager,
    revocation_store: InMemoryRevocationStore,
    password_hasher: PasswordHasher,
) -> AuthService:
    """Create an AuthService over isolated components."""
    return AuthService(jwt_manager, revocation_store, password_hasher)


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample user ID for testing."""
    return "u1"


@pytest.fixture
def sample_email() -> str:
    """Provide a sample user email for testing."""
    return "a@b.com"

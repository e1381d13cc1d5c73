# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication middleware.

Tests the middleware against a real AuthService with an in-memory
revocation store.
"""

import asyncio
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from localeve.api.app import create_app
from localeve.api.middleware.auth import (
    MISSING_TOKEN_MESSAGE,
    AuthMiddleware,
    CurrentUser,
    get_bearer_token,
    get_current_user,
    require_user,
)
from localeve.core.config import clear_settings_cache
from localeve.domains.auth.factory import reset_auth_service
from localeve.domains.auth.jwt import INVALID_TOKEN_MESSAGE, TokenPair
from localeve.domains.auth.service import AuthService
from localeve.infrastructure.cache.redis_client import RedisError


def _build_app(auth_service: AuthService) -> FastAPI:
    app = FastAPI()
    app.add_middleware(AuthMiddleware, auth_service=auth_service)

    @app.get("/api/public")
    async def public(request: Request) -> dict:
        user = get_current_user(request)
        return {"user_id": user.id if user else None}

    @app.get("/api/me")
    async def me(user: CurrentUser = Depends(require_user)) -> dict:
        return {"id": user.id, "email": user.email, "username": user.username}

    @app.post("/api/logout")
    async def logout(request: Request, user: CurrentUser = Depends(require_user)) -> dict:
        await auth_service.logout(user.id, get_bearer_token(request))
        return {"status": "logged_out"}

    return app


@pytest.fixture
def client(auth_service: AuthService) -> TestClient:
    """Create a test client for an app guarded by AuthMiddleware."""
    return TestClient(_build_app(auth_service))


@pytest.fixture
def tokens(auth_service: AuthService) -> TokenPair:
    """Issue a token pair for a sample user."""
    return asyncio.run(auth_service.issue_token_pair("u1", "a@b.com", "alice"))


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_public_path_without_token(self, client: TestClient) -> None:
        """Test that requests without a token continue anonymously."""
        response = client.get("/api/public")

        assert response.status_code == 200
        assert response.json() == {"user_id": None}

    def test_valid_token_sets_user(self, client: TestClient, tokens: TokenPair) -> None:
        """Test that a valid token sets request.state.user."""
        response = client.get("/api/public", headers=_bearer(tokens.access_token))

        assert response.status_code == 200
        assert response.json() == {"user_id": "u1"}

    def test_require_user_returns_claims(self, client: TestClient, tokens: TokenPair) -> None:
        """Test that protected endpoints see the token identity."""
        response = client.get("/api/me", headers=_bearer(tokens.access_token))

        assert response.status_code == 200
        assert response.json() == {"id": "u1", "email": "a@b.com", "username": "alice"}

    def test_missing_token_returns_401(self, client: TestClient) -> None:
        """Test that a protected endpoint without a token answers 401."""
        response = client.get("/api/me")

        assert response.status_code == 401
        assert response.json() == {"detail": MISSING_TOKEN_MESSAGE}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_non_bearer_scheme_treated_as_missing(self, client: TestClient) -> None:
        """Test that other authorization schemes are ignored."""
        response = client.get("/api/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.status_code == 401
        assert response.json() == {"detail": MISSING_TOKEN_MESSAGE}

    def test_invalid_token_returns_401(self, client: TestClient) -> None:
        """Test that a forged token answers 401 with the uniform message."""
        response = client.get("/api/me", headers=_bearer("invalid.token.here"))

        assert response.status_code == 401
        assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}

    def test_refresh_token_rejected_as_bearer(
        self,
        client: TestClient,
        tokens: TokenPair,
    ) -> None:
        """Test that refresh tokens do not authenticate requests."""
        response = client.get("/api/me", headers=_bearer(tokens.refresh_token))

        assert response.status_code == 401
        assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}

    def test_invalid_token_on_public_path(self, client: TestClient) -> None:
        """Test that a bad token on a public path is anonymous, not an error."""
        response = client.get("/api/public", headers=_bearer("invalid.token.here"))

        assert response.status_code == 200
        assert response.json() == {"user_id": None}

    def test_logged_out_token_rejected(self, client: TestClient, tokens: TokenPair) -> None:
        """Test that a token stops working after logout."""
        headers = _bearer(tokens.access_token)

        assert client.post("/api/logout", headers=headers).status_code == 200

        response = client.get("/api/me", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}

    def test_store_failure_leaves_request_unauthenticated(
        self,
        jwt_manager,
        password_hasher,
        tokens: TokenPair,
    ) -> None:
        """Test that an unavailable revocation store does not authenticate."""
        store = MagicMock()
        store.is_blacklisted = AsyncMock(side_effect=RedisError("Failed to check key existence"))
        service = AuthService(jwt_manager, store, password_hasher)
        client = TestClient(_build_app(service))

        response = client.get("/api/me", headers=_bearer(tokens.access_token))

        assert response.status_code == 401
        assert response.json() == {"detail": INVALID_TOKEN_MESSAGE}


class TestCreateApp:
    """Tests for the application factory."""

    @pytest.fixture(autouse=True)
    def _fresh_state(self, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
        """Use default in-memory settings and a fresh auth service."""
        monkeypatch.setenv("REVOCATION_BACKEND", "memory")
        monkeypatch.setenv("ENVIRONMENT", "development")
        clear_settings_cache()
        reset_auth_service()
        yield
        reset_auth_service()
        clear_settings_cache()

    def test_health_endpoint(self) -> None:
        """Test that the health endpoint reports revocation counters."""
        with TestClient(create_app()) as client:
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "development"
        assert data["revocation"] == {"blacklisted_count": 0, "active_users_count": 0}
        assert "redis" not in data

    @pytest.mark.parametrize(
        ("ping_result", "expected_status", "expected_redis"),
        [
            (True, "healthy", "healthy"),
            (False, "degraded", "unhealthy"),
        ],
    )
    def test_health_endpoint_with_redis_backend(
        self,
        monkeypatch: pytest.MonkeyPatch,
        ping_result: bool,
        expected_status: str,
        expected_redis: str,
    ) -> None:
        """Test that the health endpoint pings Redis when it backs revocation."""
        monkeypatch.setenv("REVOCATION_BACKEND", "redis")
        clear_settings_cache()

        redis_client = MagicMock()
        redis_client.ping = AsyncMock(return_value=ping_result)
        redis_client.count_keys = AsyncMock(return_value=0)

        with (
            patch("localeve.api.app.init_redis", AsyncMock(return_value=redis_client)),
            patch("localeve.api.app.get_redis", return_value=redis_client),
            patch("localeve.api.app.close_redis", AsyncMock()) as mock_close,
        ):
            with TestClient(create_app()) as client:
                response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == expected_status
        assert data["redis"] == expected_redis
        redis_client.ping.assert_awaited_once()
        mock_close.assert_awaited_once()

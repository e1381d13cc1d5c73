# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service.

This module provides the AuthService that route middleware talks to. It
composes the JWT manager, a revocation store and the password hasher:
- Token pair issuance (login, registration, OAuth, refresh)
- Bearer token verification with revocation checked first
- Logout of one session or of every session of a user
- Password hashing off the event loop

The service never touches the database. User records come from a
caller-supplied UserLookup.

Example:
    >>> auth_service = AuthService(jwt_manager, InMemoryRevocationStore(), PasswordHasher())
    >>> tokens = await auth_service.issue_token_pair("u1", "a@b.com")
    >>> claims = await auth_service.verify_bearer_token(tokens.access_token)
"""

import asyncio
import logging
from typing import Protocol

from localeve.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenFailureReason,
    TokenPair,
    TokenPayload,
    TokenRevokedError,
)
from localeve.domains.auth.password import PasswordHasher
from localeve.domains.auth.revocation import RevocationStats, RevocationStore

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair is rejected.

    Unknown user, password-less (OAuth only) account and wrong password all
    produce the same error.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UserRecord(Protocol):
    """Fields the auth core reads from a stored user."""

    id: str
    email: str
    username: str | None
    password_hash: str | None


class UserLookup(Protocol):
    """User store the caller provides. Implemented by the persistence layer."""

    async def get_user_by_id(self, user_id: str) -> UserRecord | None:
        """Return the user with this ID, or None."""
        ...

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return the user with this email, or None."""
        ...


class AuthService:
    """Authentication façade used by route middleware.

    Attributes:
        _jwt_manager: JWT token manager.
        _revocation_store: Revocation store consulted on every verification.
        _password_hasher: Password hasher.

    Example:
        >>> auth_service = AuthService(jwt_manager, store, hasher)
        >>> tokens = await auth_service.issue_token_pair("u1", "a@b.com")
        >>> await auth_service.logout("u1", tokens.access_token, tokens.refresh_token)
    """

    def __init__(
        self,
        jwt_manager: JWTManager,
        revocation_store: RevocationStore,
        password_hasher: PasswordHasher,
    ) -> None:
        """Initialize the authentication service.

        Args:
            jwt_manager: JWT token manager.
            revocation_store: Store tracking revoked and active tokens.
            password_hasher: Password hasher.
        """
        self._jwt_manager = jwt_manager
        self._revocation_store = revocation_store
        self._password_hasher = password_hasher

    async def issue_token_pair(
        self,
        user_id: str,
        email: str,
        username: str | None = None,
    ) -> TokenPair:
        """Issue a new access/refresh pair and track both tokens for the user.

        Call only after the caller has established the user's identity
        (password check, registration or OAuth lookup).

        Args:
            user_id: User identifier.
            email: User email address.
            username: Optional username.

        Returns:
            TokenPair with ``token_type="Bearer"`` and the access lifetime.
        """
        tokens = self._jwt_manager.create_token_pair(user_id, email, username)

        await self._revocation_store.track_for_user(user_id, tokens.access_token)
        await self._revocation_store.track_for_user(user_id, tokens.refresh_token)

        logger.info("Tokens issued for user: %s", user_id)

        return tokens

    async def _verify(self, token: str, token_type: str) -> TokenPayload:
        if not token:
            raise InvalidTokenError(TokenFailureReason.MALFORMED, "Empty token")

        # Revocation first: it is cheap and must win over a valid signature.
        if await self._revocation_store.is_blacklisted(token):
            logger.debug("Rejected revoked %s token", token_type)
            raise TokenRevokedError(f"{token_type} token has been revoked")

        if token_type == "refresh":
            return self._jwt_manager.decode_refresh_token(token)
        return self._jwt_manager.decode_access_token(token)

    async def verify_bearer_token(self, token: str) -> TokenPayload:
        """Verify an access token presented as ``Authorization: Bearer``.

        Args:
            token: Raw access token.

        Returns:
            Decoded claims of the token.

        Raises:
            InvalidTokenError: If the token is revoked, forged, expired or
                not an access token. The message does not say which.
        """
        return await self._verify(token, "access")

    async def verify_refresh_token(self, token: str) -> TokenPayload:
        """Verify a refresh token.

        Raises:
            InvalidTokenError: If the token is revoked, forged, expired or
                not a refresh token.
        """
        return await self._verify(token, "refresh")

    async def refresh_tokens(
        self,
        refresh_token: str,
        users: UserLookup | None = None,
    ) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The presented refresh token stays valid until it expires or is
        logged out; it is not rotated out here.

        Without ``users`` the new pair copies the identity claims of the
        refresh token. With ``users`` the user is re-read by ID so the new
        tokens carry the current email and username, and refresh fails for
        users that no longer exist.

        Args:
            refresh_token: Current refresh token.
            users: Optional user store to re-read the user from.

        Returns:
            New TokenPair for the same identity.

        Raises:
            InvalidTokenError: If the refresh token is rejected.
        """
        payload = await self.verify_refresh_token(refresh_token)
        user_id, email, username = payload.user_id, payload.email, payload.username

        if users is not None:
            user = await users.get_user_by_id(user_id)
            if user is None:
                raise TokenRevokedError(f"User no longer exists: {user_id}")
            email, username = user.email, user.username

        logger.info("Tokens refreshed for user: %s", user_id)

        return await self.issue_token_pair(user_id, email, username)

    async def login(self, email: str, password: str, users: UserLookup) -> TokenPair:
        """Authenticate with email and password and issue a token pair.

        Args:
            email: Email the user signs in with.
            password: Plain text password.
            users: User store to look the email up in.

        Returns:
            New TokenPair for the user.

        Raises:
            InvalidCredentialsError: If the credentials are rejected.
        """
        user = await users.get_user_by_email(email)
        if user is None or not user.password_hash:
            await asyncio.to_thread(self._password_hasher.dummy_verify, password)
            raise InvalidCredentialsError()

        if not await self.verify_password(password, user.password_hash):
            logger.info("Password rejected for user: %s", user.id)
            raise InvalidCredentialsError()

        return await self.issue_token_pair(user.id, user.email, user.username)

    async def logout(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str | None = None,
    ) -> None:
        """Revoke the tokens of the current session.

        Other sessions of the same user keep working.

        Args:
            user_id: User the tokens belong to.
            access_token: Access token of the session.
            refresh_token: Refresh token of the session, if the client sent it.
        """
        await self._revocation_store.blacklist_user_tokens(user_id, access_token, refresh_token)
        logger.info("Session logged out for user: %s", user_id)

    async def logout_all(self, user_id: str) -> None:
        """Revoke every tracked token of a user (log out on all devices).

        Args:
            user_id: User to log out everywhere.
        """
        await self._revocation_store.blacklist_all_for_user(user_id)
        logger.info("All sessions revoked for user: %s", user_id)

    async def hash_password(self, password: str) -> str:
        """Hash a password on a worker thread.

        Args:
            password: Plain text password.

        Returns:
            Stored password hash.
        """
        return await asyncio.to_thread(self._password_hasher.hash, password)

    async def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password on a worker thread. Never raises.

        Args:
            password: Plain text password.
            password_hash: Stored password hash.

        Returns:
            True if the password matches.
        """
        return await asyncio.to_thread(self._password_hasher.verify, password, password_hash)

    async def get_revocation_stats(self) -> RevocationStats:
        """Get revocation counters for monitoring."""
        return await self._revocation_store.get_stats()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

This module provides JWT token creation and validation using python-jose.
Access tokens and refresh tokens are signed with separate secrets and carry
a ``type`` claim that must match the verification path.

Every verification failure surfaces with the same message so callers cannot
tell an expired token from a forged one. The specific cause is kept on the
exception's ``reason`` attribute for logging.

Example:
    >>> from localeve.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="u1", email="a@b.com")
    >>> claims = jwt_manager.decode_access_token(token)
"""

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum
from typing import Literal

from jose import JWTError as JoseJWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from localeve.core.config.settings import JWTSettings
from localeve.utils.datetime import ensure_utc, to_timestamp, utc_from_timestamp, utc_now

logger = logging.getLogger(__name__)

TokenType = Literal["access", "refresh"]

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        email: User email address.
        username: Optional username.
        type: Token type (access or refresh).
        iss: Issuer.
        aud: Audience.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID, unique per issued token.
    """

    sub: str
    email: str
    username: str | None = None
    type: TokenType
    iss: str
    aud: str
    exp: int
    iat: int
    jti: str

    @property
    def user_id(self) -> str:
        """User identifier carried in the ``sub`` claim."""
        return self.sub

    @property
    def expires_at(self) -> datetime:
        """Expiry as a timezone-aware UTC datetime."""
        return utc_from_timestamp(self.exp)


class TokenPair(BaseModel):
    """Access and refresh token pair.

    Serialize with ``model_dump(by_alias=True)`` to get the camelCase keys
    the HTTP layer returns (accessToken, refreshToken, tokenType, expiresIn).

    Attributes:
        access_token: JWT access token string.
        refresh_token: JWT refresh token string.
        token_type: Token type (always "Bearer").
        expires_in: Access token lifetime in seconds.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class TokenFailureReason(str, Enum):
    """Internal cause of a token rejection. Never sent to clients."""

    MALFORMED = "malformed"
    CLAIMS = "claims"
    WRONG_TYPE = "wrong_type"
    EXPIRED = "expired"
    REVOKED = "revoked"


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is rejected for any reason.

    The message is always the same; inspect ``reason`` for the cause.

    Attributes:
        reason: Why the token was rejected.
        detail: Free-form diagnostic text for logs.
    """

    def __init__(
        self,
        reason: TokenFailureReason = TokenFailureReason.MALFORMED,
        detail: str | None = None,
    ) -> None:
        super().__init__(INVALID_TOKEN_MESSAGE)
        self.reason = reason
        self.detail = detail


class TokenExpiredError(InvalidTokenError):
    """Raised when a token has expired."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(TokenFailureReason.EXPIRED, detail)


class TokenRevokedError(InvalidTokenError):
    """Raised when a token has been explicitly revoked."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(TokenFailureReason.REVOKED, detail)


class JWTManager:
    """JWT token creation and validation manager.

    Pure computation over claims, secrets and a clock. It knows nothing
    about revocation; AuthService layers that on top.

    Attributes:
        _settings: JWT configuration settings.
        _clock: Returns the current UTC time.

    Example:
        >>> jwt_manager = JWTManager(settings)
        >>> tokens = jwt_manager.create_token_pair(user_id="u1", email="a@b.com")
        >>> claims = jwt_manager.decode_access_token(tokens.access_token)
        >>> claims.user_id
        'u1'
    """

    def __init__(
        self,
        settings: JWTSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
            clock: Callable returning the current time. Injected by tests.
        """
        self._settings = settings
        self._clock = clock

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == "refresh":
            return self._settings.refresh_secret_key.get_secret_value()
        return self._settings.secret_key.get_secret_value()

    def _encode(
        self,
        token_type: TokenType,
        lifetime: timedelta,
        user_id: str,
        email: str,
        username: str | None,
    ) -> str:
        now = self._clock()
        payload = {
            "sub": str(user_id),
            "email": email,
            "type": token_type,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": to_timestamp(now),
            "exp": to_timestamp(now + lifetime),
            "jti": secrets.token_urlsafe(16),
        }
        if username:
            payload["username"] = username

        return jwt.encode(
            payload,
            self._secret_for(token_type),
            algorithm=self._settings.algorithm,
        )

    def create_access_token(
        self,
        user_id: str,
        email: str,
        username: str | None = None,
    ) -> str:
        """Create an access token.

        Args:
            user_id: User identifier.
            email: User email address.
            username: Optional username.

        Returns:
            JWT access token string signed with the access secret.
        """
        return self._encode(
            "access",
            timedelta(minutes=self._settings.access_token_expire_minutes),
            user_id,
            email,
            username,
        )

    def create_refresh_token(
        self,
        user_id: str,
        email: str,
        username: str | None = None,
    ) -> str:
        """Create a refresh token.

        Args:
            user_id: User identifier.
            email: User email address.
            username: Optional username.

        Returns:
            JWT refresh token string signed with the refresh secret.
        """
        return self._encode(
            "refresh",
            timedelta(days=self._settings.refresh_token_expire_days),
            user_id,
            email,
            username,
        )

    def create_token_pair(
        self,
        user_id: str,
        email: str,
        username: str | None = None,
    ) -> TokenPair:
        """Create an access and refresh token pair.

        Args:
            user_id: User identifier.
            email: User email address.
            username: Optional username.

        Returns:
            TokenPair with access and refresh tokens.
        """
        return TokenPair(
            access_token=self.create_access_token(user_id, email, username),
            refresh_token=self.create_refresh_token(user_id, email, username),
            token_type="Bearer",
            expires_in=self._settings.access_token_expire_minutes * 60,
        )

    def decode_token(self, token: str, expected_type: TokenType) -> TokenPayload:
        """Decode and validate a JWT token.

        Checks, in order: signature (with the secret of ``expected_type``),
        issuer and audience, expiry against the injected clock with zero
        leeway (rejected once ``now >= exp``), and the ``type`` claim.

        Args:
            token: JWT token string.
            expected_type: Token class the caller expects.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or of the wrong type.
        """
        try:
            try:
                payload = jwt.decode(
                    token,
                    self._secret_for(expected_type),
                    algorithms=[self._settings.algorithm],
                    audience=self._settings.audience,
                    issuer=self._settings.issuer,
                    options={
                        # Expiry is checked below against self._clock. A
                        # require_exp flag would switch jose's wall-clock check
                        # back on; TokenPayload already requires exp.
                        "verify_exp": False,
                        "require_iat": True,
                        "require_iss": True,
                        "require_aud": True,
                        "require_sub": True,
                        "require_jti": True,
                    },
                )
            except JWTClaimsError as e:
                raise InvalidTokenError(TokenFailureReason.CLAIMS, str(e)) from e
            except JoseJWTError as e:
                raise InvalidTokenError(TokenFailureReason.MALFORMED, str(e)) from e

            try:
                claims = TokenPayload.model_validate(payload)
            except ValidationError as e:
                raise InvalidTokenError(TokenFailureReason.CLAIMS, str(e)) from e

            if ensure_utc(self._clock()).timestamp() >= claims.exp:
                raise TokenExpiredError(f"Token expired at {claims.expires_at.isoformat()}")

            if claims.type != expected_type:
                raise InvalidTokenError(
                    TokenFailureReason.WRONG_TYPE,
                    f"Expected {expected_type} token, got {claims.type}",
                )

            return claims

        except TokenExpiredError as e:
            logger.debug("Token rejected: %s", e.detail)
            raise
        except InvalidTokenError as e:
            logger.warning("Token rejected (%s): %s", e.reason.value, e.detail)
            raise

    def decode_access_token(self, token: str) -> TokenPayload:
        """Decode and validate an access token.

        Raises:
            InvalidTokenError: If the token is not a valid, unexpired access token.
        """
        return self.decode_token(token, "access")

    def decode_refresh_token(self, token: str) -> TokenPayload:
        """Decode and validate a refresh token.

        Raises:
            InvalidTokenError: If the token is not a valid, unexpired refresh token.
        """
        return self.decode_token(token, "refresh")

    def verify_token(self, token: str, expected_type: TokenType) -> bool:
        """Verify if a token is valid.

        Args:
            token: JWT token string.
            expected_type: Expected token type (access or refresh).

        Returns:
            True if token is valid, False otherwise.
        """
        try:
            self.decode_token(token, expected_type)
            return True
        except InvalidTokenError:
            return False

    @staticmethod
    def hash_token(token: str) -> str:
        """Create a SHA-256 hash of a token.

        Used as the storage key for revoked tokens so durable stores never
        hold usable bearer credentials.

        Args:
            token: Token string to hash.

        Returns:
            SHA-256 hash of the token as hex string.
        """
        return hashlib.sha256(token.encode()).hexdigest()

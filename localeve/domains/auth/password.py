# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing utilities using PBKDF2-HMAC-SHA256.

Stored hashes are the base64 encoding of ``salt || derived_key``: a random
16-byte salt followed by a 32-byte key derived with 100,000 iterations.
The format carries no algorithm marker, so the parameters used to verify
must match the ones used to hash.

Example:
    >>> hasher = PasswordHasher()
    >>> hashed = hasher.hash("my_password")
    >>> hasher.verify("my_password", hashed)
    True
"""

import base64
import binascii
import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 100_000
DEFAULT_SALT_BYTES = 16
DEFAULT_KEY_LENGTH = 32
DIGEST = "sha256"


class PasswordHasher:
    """Salted password hashing using PBKDF2-HMAC-SHA256.

    Hashing is deliberately slow (on the order of 100ms) to make offline
    brute force expensive. Callers on an event loop should run it in a
    worker thread.

    Attributes:
        _iterations: PBKDF2 iteration count.
        _salt_bytes: Length of the random salt.
        _key_length: Length of the derived key.

    Example:
        >>> hasher = PasswordHasher()
        >>> hashed = hasher.hash("secure_password")
        >>> hasher.verify("secure_password", hashed)
        True
        >>> hasher.verify("wrong_password", hashed)
        False
    """

    def __init__(
        self,
        iterations: int = DEFAULT_ITERATIONS,
        salt_bytes: int = DEFAULT_SALT_BYTES,
        key_length: int = DEFAULT_KEY_LENGTH,
    ) -> None:
        """Initialize the password hasher.

        Args:
            iterations: PBKDF2 iteration count.
            salt_bytes: Length of the random salt in bytes.
            key_length: Length of the derived key in bytes.
        """
        self._iterations = iterations
        self._salt_bytes = salt_bytes
        self._key_length = key_length
        # Well-formed hash that matches no password.
        self._dummy_hash = base64.b64encode(
            secrets.token_bytes(salt_bytes + key_length)
        ).decode("ascii")

    def _derive(self, password: str, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac(
            DIGEST,
            password.encode("utf-8"),
            salt,
            self._iterations,
            dklen=self._key_length,
        )

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt.

        No length or charset rules are enforced here.

        Args:
            password: Plain text password to hash.

        Returns:
            Base64 string of salt followed by the derived key.
        """
        salt = secrets.token_bytes(self._salt_bytes)
        derived = self._derive(password, salt)
        return base64.b64encode(salt + derived).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a stored hash.

        Never raises: a malformed stored hash counts as a mismatch.

        Args:
            password: Plain text password to verify.
            password_hash: Stored hash produced by hash().

        Returns:
            True if password matches the hash, False otherwise.
        """
        if not password_hash:
            return False

        try:
            combined = base64.b64decode(password_hash.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError, ValueError) as e:
            logger.warning("Password verification failed: %s", str(e))
            return False

        if len(combined) != self._salt_bytes + self._key_length:
            logger.warning(
                "Password verification failed: stored hash has %d bytes, expected %d",
                len(combined),
                self._salt_bytes + self._key_length,
            )
            return False

        salt = combined[: self._salt_bytes]
        stored_key = combined[self._salt_bytes :]

        try:
            candidate = self._derive(password, salt)
        except (UnicodeEncodeError, ValueError) as e:
            logger.warning("Password verification failed: %s", str(e))
            return False

        return hmac.compare_digest(candidate, stored_key)

    def dummy_verify(self, password: str) -> bool:
        """Run a full verification against a hash no password matches.

        Used when there is no stored hash to check (unknown user, OAuth-only
        account) so that path costs one key derivation like a wrong password.

        Args:
            password: Plain text password from the request.

        Returns:
            Always False.
        """
        self.verify(password, self._dummy_hash)
        return False


# Default instance for convenience
_default_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password using the default hasher.

    Args:
        password: Plain text password to hash.

    Returns:
        Base64 encoded salt and derived key.
    """
    return _default_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password using the default hasher.

    Args:
        password: Plain text password to verify.
        password_hash: Stored hash to verify against.

    Returns:
        True if password matches, False otherwise.
    """
    return _default_hasher.verify(password, password_hash)

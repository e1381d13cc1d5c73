# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Token revocation stores.

A revocation store tracks two things:
- the blacklist: tokens that must be rejected even while their signature
  and expiry are still valid
- the per-user index of active tokens, used to log a user out everywhere

Tokens leave the user index as soon as they are blacklisted, and a user
entry disappears once it has no active tokens.

Two implementations share the RevocationStore protocol:
- InMemoryRevocationStore: process-lifetime state, lost on restart. The
  blacklist is never pruned.
- RedisRevocationStore: survives restarts and is shared between processes.

Example:
    >>> store = InMemoryRevocationStore()
    >>> await store.track_for_user("u1", token)
    >>> await store.blacklist_all_for_user("u1")
    >>> await store.is_blacklisted(token)
    True
"""

import logging
import threading
from typing import NamedTuple, Protocol

from localeve.domains.auth.jwt import JWTManager
from localeve.infrastructure.cache.redis_client import RedisClient

logger = logging.getLogger(__name__)


class RevocationStats(NamedTuple):
    """Revocation counters for monitoring."""

    blacklisted_count: int
    active_users_count: int


class RevocationStore(Protocol):
    """Protocol for token revocation storage - allows swappable implementations."""

    async def is_blacklisted(self, token: str) -> bool:
        """Return True if the token has been revoked."""
        ...

    async def track_for_user(self, user_id: str, token: str) -> None:
        """Record an active token for a user."""
        ...

    async def blacklist_token(self, token: str) -> None:
        """Revoke a single token. Idempotent."""
        ...

    async def blacklist_user_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str | None = None,
    ) -> None:
        """Revoke specific tokens and drop them from the user's active set."""
        ...

    async def blacklist_all_for_user(self, user_id: str) -> None:
        """Revoke every active token of a user and forget the user entry."""
        ...

    async def get_stats(self) -> RevocationStats:
        """Return revocation counters."""
        ...


class InMemoryRevocationStore:
    """Revocation store held in process memory.

    All state is guarded by a single lock, so one instance may be shared by
    several threads, each running its own event loop. Nothing is persisted:
    a restart forgets every revocation.

    Attributes:
        _blacklist: Revoked token strings.
        _user_tokens: User ID to set of active token strings.
    """

    def __init__(self) -> None:
        self._blacklist: set[str] = set()
        self._user_tokens: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    async def is_blacklisted(self, token: str) -> bool:
        with self._lock:
            return token in self._blacklist

    async def track_for_user(self, user_id: str, token: str) -> None:
        with self._lock:
            if token in self._blacklist:
                return
            self._user_tokens.setdefault(user_id, set()).add(token)

    async def blacklist_token(self, token: str) -> None:
        with self._lock:
            self._blacklist.add(token)

    def _untrack(self, user_id: str, token: str) -> None:
        # Caller holds the lock.
        tokens = self._user_tokens.get(user_id)
        if tokens is None:
            return
        tokens.discard(token)
        if not tokens:
            del self._user_tokens[user_id]

    async def blacklist_user_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str | None = None,
    ) -> None:
        revoked = [access_token]
        if refresh_token:
            revoked.append(refresh_token)

        with self._lock:
            for token in revoked:
                self._blacklist.add(token)
                self._untrack(user_id, token)

        logger.debug("Revoked %d token(s) for user %s", len(revoked), user_id)

    async def blacklist_all_for_user(self, user_id: str) -> None:
        with self._lock:
            tokens = self._user_tokens.pop(user_id, set())
            self._blacklist.update(tokens)

        logger.debug("Revoked all %d active token(s) for user %s", len(tokens), user_id)

    async def get_stats(self) -> RevocationStats:
        with self._lock:
            return RevocationStats(
                blacklisted_count=len(self._blacklist),
                active_users_count=len(self._user_tokens),
            )


class RedisRevocationStore:
    """Revocation store backed by Redis.

    Tokens are stored by SHA-256 hash, never in raw form. Each revoked token
    is its own key with a TTL, normally the refresh-token lifetime: once it
    has elapsed every token issued before the revocation is expired anyway.
    Active tokens per user are kept in a Redis set.

    Key layout:
        {prefix}:blacklist:{token_hash}  -> "1" (with TTL)
        {prefix}:user:{user_id}          -> set of token hashes

    Attributes:
        _redis: Connected RedisClient.
        _prefix: Key prefix.
        _blacklist_ttl: Expiry in seconds applied to blacklist keys.
    """

    def __init__(
        self,
        redis_client: RedisClient,
        key_prefix: str,
        blacklist_ttl_seconds: int,
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Connected Redis client.
            key_prefix: Prefix for every key this store writes.
            blacklist_ttl_seconds: Lifetime of a blacklist entry.
        """
        self._redis = redis_client
        self._prefix = key_prefix
        self._blacklist_ttl = blacklist_ttl_seconds

    def _blacklist_key(self, token_hash: str) -> str:
        return f"{self._prefix}:blacklist:{token_hash}"

    def _user_key(self, user_id: str) -> str:
        return f"{self._prefix}:user:{user_id}"

    async def _blacklist_hash(self, token_hash: str) -> None:
        await self._redis.set(
            self._blacklist_key(token_hash),
            "1",
            expire_seconds=self._blacklist_ttl,
        )

    async def is_blacklisted(self, token: str) -> bool:
        return await self._redis.exists(self._blacklist_key(JWTManager.hash_token(token)))

    async def track_for_user(self, user_id: str, token: str) -> None:
        token_hash = JWTManager.hash_token(token)
        if await self._redis.exists(self._blacklist_key(token_hash)):
            return
        await self._redis.sadd(self._user_key(user_id), token_hash)

    async def blacklist_token(self, token: str) -> None:
        await self._blacklist_hash(JWTManager.hash_token(token))

    async def blacklist_user_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str | None = None,
    ) -> None:
        hashes = [JWTManager.hash_token(access_token)]
        if refresh_token:
            hashes.append(JWTManager.hash_token(refresh_token))

        for token_hash in hashes:
            await self._blacklist_hash(token_hash)
        await self._redis.srem(self._user_key(user_id), *hashes)

        logger.debug("Revoked %d token(s) for user %s", len(hashes), user_id)

    async def blacklist_all_for_user(self, user_id: str) -> None:
        user_key = self._user_key(user_id)
        hashes = await self._redis.smembers(user_key)

        for token_hash in hashes:
            await self._blacklist_hash(token_hash)
        await self._redis.delete(user_key)

        logger.debug("Revoked all %d active token(s) for user %s", len(hashes), user_id)

    async def get_stats(self) -> RevocationStats:
        return RevocationStats(
            blacklisted_count=await self._redis.count_keys(f"{self._prefix}:blacklist:*"),
            active_users_count=await self._redis.count_keys(f"{self._prefix}:user:*"),
        )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis client for durable authentication state.

This module provides an async Redis client wrapper exposing the handful of
key and set operations the Redis-backed revocation store needs.

Example:
    from localeve.infrastructure.cache import init_redis, get_redis

    # Initialize at startup
    await init_redis(settings)

    # Use the client
    redis = get_redis()
    await redis.set("key", "1", expire_seconds=60)
    await redis.sadd("user:u1", "token")
"""

from typing import TYPE_CHECKING, Optional, Set

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from localeve.core.config.settings import Settings

# Module-level state
_redis_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """Exception raised for Redis operation failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Redis error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the Redis error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Async Redis client wrapper.

    Wraps the redis-py async client and provides:
    - Connection pooling
    - Plain string keys with optional expiry
    - Set operations
    - Error translation to RedisError

    Example:
        client = RedisClient(settings)
        await client.connect()
        await client.set("key", "value", expire_seconds=30)
        await client.close()
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the Redis client.

        Args:
            settings: Application settings containing Redis configuration.
        """
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Create the Redis connection pool.

        Raises:
            RedisError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)

            # Verify connection
            await self._redis.ping()
        except BaseRedisError as e:
            raise RedisError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Close the Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _ensure_connected(self) -> Redis:
        """Ensure the client is connected.

        Returns:
            The Redis client instance.

        Raises:
            RedisError: If not connected.
        """
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    # ========== Key operations ==========

    async def set(
        self,
        key: str,
        value: str,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set a key-value pair.

        Args:
            key: The key.
            value: The value.
            expire_seconds: Optional expiration time in seconds.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            await redis.set(key, value, ex=expire_seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set key: {key}", e) from e

    async def exists(self, key: str) -> bool:
        """Check if a key exists.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            result = await redis.exists(key)
            return result > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to check key existence: {key}", e) from e

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the key was deleted, False if it didn't exist.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            result = await redis.delete(key)
            return result > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete key: {key}", e) from e

    async def count_keys(self, pattern: str) -> int:
        """Count keys matching a glob pattern.

        Uses SCAN, so it is safe on large databases but not atomic.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            count = 0
            async for _ in redis.scan_iter(match=pattern):
                count += 1
            return count
        except BaseRedisError as e:
            raise RedisError(f"Failed to scan keys: {pattern}", e) from e

    # ========== Set operations ==========

    async def sadd(self, key: str, *members: str) -> int:
        """Add members to a set.

        Returns:
            Number of members that were not already present.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.sadd(key, *members)
        except BaseRedisError as e:
            raise RedisError(f"Failed to add to set: {key}", e) from e

    async def srem(self, key: str, *members: str) -> int:
        """Remove members from a set.

        Redis deletes the key when its last member is removed.

        Returns:
            Number of members removed.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.srem(key, *members)
        except BaseRedisError as e:
            raise RedisError(f"Failed to remove from set: {key}", e) from e

    async def smembers(self, key: str) -> Set[str]:
        """Get all members of a set.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return set(await redis.smembers(key))
        except BaseRedisError as e:
            raise RedisError(f"Failed to read set: {key}", e) from e

    # ========== Health check ==========

    async def ping(self) -> bool:
        """Check if Redis is reachable.

        Returns:
            True if Redis responds to ping, False otherwise.
        """
        try:
            redis = self._ensure_connected()
            await redis.ping()
            return True
        except (RedisError, BaseRedisError):
            return False


# ========== Module-level functions ==========


async def init_redis(settings: "Settings") -> RedisClient:
    """Initialize the global Redis client.

    This should be called once at application startup.

    Args:
        settings: Application settings containing Redis configuration.

    Returns:
        The connected RedisClient.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    _redis_client = RedisClient(settings)
    await _redis_client.connect()
    return _redis_client


async def close_redis() -> None:
    """Close the global Redis client.

    This should be called at application shutdown.
    """
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_redis() -> RedisClient:
    """Get the global Redis client.

    Returns:
        The RedisClient instance.

    Raises:
        RedisError: If Redis has not been initialized.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized. Call init_redis() first.")
    return _redis_client

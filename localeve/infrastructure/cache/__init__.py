# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure using Redis.

This package provides the Redis client backing durable token revocation.

Example:
    from localeve.infrastructure.cache import init_redis, get_redis, close_redis

    # Initialize at application startup
    await init_redis(settings)

    # Get the Redis client
    redis = get_redis()

    # Cleanup at shutdown
    await close_redis()
"""

from localeve.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "init_redis",
]

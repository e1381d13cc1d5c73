# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the application factory for the LocalEve API. Feature
routers (users, events, groups, ...) are mounted by the deployment that
embeds this package.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI

from localeve import __version__
from localeve.api.middleware.auth import AuthMiddleware
from localeve.core.config import get_settings
from localeve.domains.auth.factory import get_auth_service, init_auth_service, reset_auth_service
from localeve.infrastructure.cache import close_redis, get_redis, init_redis
from localeve.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup connects Redis when the redis revocation backend is selected and
    builds the process-wide AuthService. Shutdown closes Redis.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    logger.info("Starting LocalEve API (environment=%s)", settings.environment)

    redis_client = None
    if settings.revocation.backend == "redis":
        redis_client = await init_redis(settings)
        logger.info("Redis connection initialized")

    init_auth_service(settings, redis_client)

    yield

    reset_auth_service()

    if redis_client is not None:
        await close_redis()
        logger.info("Redis connection closed")

    logger.info("Shutting down LocalEve API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="LocalEve API",
        description="Event platform backend",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # 307 redirects from /path to /path/ drop the Authorization header
        redirect_slashes=False,
    )

    app.add_middleware(AuthMiddleware)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": "healthy",
            "version": __version__,
            "environment": settings.environment,
            "revocation": None,
        }

        if settings.revocation.backend == "redis":
            redis_ok = await get_redis().ping()
            result["redis"] = "healthy" if redis_ok else "unhealthy"
            if not redis_ok:
                result["status"] = "degraded"
                return result

        stats = await get_auth_service().get_revocation_stats()
        result["revocation"] = stats._asdict()
        return result

    return app

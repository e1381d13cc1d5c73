# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for LocalEve.

Pydantic-based settings loaded from environment variables.

Example:
    >>> from localeve.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from localeve.core.config.settings import (
    JWTSettings,
    PasswordSettings,
    RedisSettings,
    RevocationSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "JWTSettings",
    "PasswordSettings",
    "RevocationSettings",
    "RedisSettings",
]

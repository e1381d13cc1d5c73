# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: Bearer token authentication middleware.
    CurrentUser: Authenticated user stored on request.state.
    get_current_user: Read the user, or None.
    require_user: Read the user or answer 401.
"""

from localeve.api.middleware.auth import (
    AuthMiddleware,
    CurrentUser,
    get_bearer_token,
    get_current_user,
    require_user,
)

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "get_bearer_token",
    "get_current_user",
    "require_user",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API Layer for LocalEve.

This module provides the FastAPI application factory and the
authentication middleware.
"""

from localeve.api.app import create_app

__all__ = ["create_app"]

"""LocalEve authentication core.

Credential hashing, access/refresh token issuance and verification, and
token revocation for the LocalEve event platform backend.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"

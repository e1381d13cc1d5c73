# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for LocalEve.

All datetimes handled by the authentication core are timezone-aware UTC.
Token claims carry integer Unix timestamps; these helpers convert between
the two representations.

Usage:
------
    from localeve.utils.datetime import utc_now, to_timestamp

    issued_at = to_timestamp(utc_now())
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def utc_from_timestamp(timestamp: float) -> datetime:
    """Create a timezone-aware UTC datetime from a Unix timestamp.

    Args:
        timestamp: Unix timestamp (seconds since epoch).

    Returns:
        Timezone-aware UTC datetime.

    Example:
        >>> dt = utc_from_timestamp(1703145600)
        >>> dt.tzinfo
        datetime.timezone.utc
    """
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware UTC.

    Naive datetimes are assumed to already be in UTC.

    Args:
        dt: A naive or aware datetime.

    Returns:
        Timezone-aware UTC datetime.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def to_timestamp(dt: datetime) -> int:
    """Convert a datetime to an integer Unix timestamp (JWT NumericDate).

    Args:
        dt: A naive (assumed UTC) or aware datetime.

    Returns:
        Whole seconds since the epoch.
    """
    return int(ensure_utc(dt).timestamp())

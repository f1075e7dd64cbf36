"""
TIME INFORMATION UTILITY
========================

Timestamps used across the gateway. Turns are stamped with an aware UTC
datetime by the history store; API responses carry an RFC 3339 string.
"""

import datetime


def utc_now() -> datetime.datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def utc_timestamp() -> str:
    """Return the current UTC time as an RFC 3339 string, e.g. 2026-02-05T14:03:22Z."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")

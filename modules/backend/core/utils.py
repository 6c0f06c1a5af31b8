"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

import re
from datetime import datetime, timezone

UNSAFE_NAME_CHARACTERS = re.compile(r'[<>:"/\\|?*]')


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_now() -> str:
    """Current UTC time as stored in records, e.g. ``2025-01-31T09:15:02.123Z``."""
    return utc_now().isoformat(timespec="milliseconds") + "Z"


def parse_timestamp(value: str | None) -> datetime:
    """
    Parse a stored ISO timestamp into a naive UTC datetime.

    Unparseable or missing values sort as the oldest possible time.
    """
    if not value:
        return datetime.min
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_short_date(value: str | None) -> str:
    """Format a stored timestamp as ``M/D/YYYY``; empty string if unparseable."""
    parsed = parse_timestamp(value)
    if parsed == datetime.min:
        return ""
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def sanitize_name(value: str, max_length: int) -> str:
    """
    Make a user-supplied title or folder name safe for filesystem use.

    Strips ``< > : " / \\ | ? *``, trims surrounding whitespace, then
    truncates to ``max_length`` characters (dropping whitespace the cut
    exposes). May return an empty string.
    """
    return UNSAFE_NAME_CHARACTERS.sub("", value).strip()[:max_length].rstrip()

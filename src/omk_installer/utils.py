"""Utility functions for omk-installer."""

from datetime import datetime, timezone
from typing import Optional


def get_iso_timestamp(now: Optional[datetime] = None) -> str:
    """Get timestamp in ISO 8601 UTC format with a trailing Z."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return now.isoformat() + "Z"


def format_iso_date(iso_string: str) -> str:
    """Clean up ISO 8601 timestamp for display.

    Examples:
        "2025-08-26T02:51:17.317839Z" -> "2025-08-26 02:51:17"
        "2025-08-26T02:51:17Z" -> "2025-08-26 02:51:17"
    """
    if "T" in iso_string and "." in iso_string:
        clean_date = iso_string.split(".")[0].replace("T", " ")
    elif "T" in iso_string:
        clean_date = iso_string.rstrip("Z").replace("T", " ")
    else:
        clean_date = iso_string
    return clean_date


def pluralize(count: int, noun: str) -> str:
    """Format a count with a naively pluralized noun."""
    return f"{count} {noun}{'' if count == 1 else 's'}"

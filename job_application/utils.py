"""
Utility functions for identifiers, timestamps, hashing and display formatting.
"""

import hashlib
import uuid
from datetime import datetime, timezone
from typing import Any, Optional


def generate_application_id() -> str:
    """Generate an opaque unique identifier for a stored application."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """
    Current time in UTC as a naive datetime.

    Naive values are what SQLite hands back, so storing naive UTC keeps
    fresh and reloaded records comparable.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a UTC datetime as ISO-8601 with millisecond precision.

    Args:
        dt: Naive UTC or timezone-aware datetime

    Returns:
        String like '2024-05-01T09:30:00.000Z', or None
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)

    return dt.isoformat(timespec='milliseconds') + 'Z'


def calculate_sha256(data: bytes) -> str:
    """
    Calculate SHA-256 hash of data.

    Args:
        data: Bytes to hash

    Returns:
        Hex-encoded hash string
    """
    return hashlib.sha256(data).hexdigest()


def format_yes_no(value: Any) -> str:
    """Format a 'yes'/'no' answer for display."""
    return 'Yes' if value == 'yes' else 'No'


def display_text(value: Any) -> str:
    """Format an arbitrary field value for display."""
    if value is None:
        return ''
    return str(value)

"""
Shared utility functions for Pizza Hunt.

Contains helper functions used across multiple modules including
ID generation, timestamp handling, and JSON helpers.
"""

import uuid
from datetime import datetime, timezone
from typing import Any
import json


def generate_id() -> str:
    """
    Generate a unique document identifier.

    Uses UUID4 for guaranteed uniqueness. The 24 hex characters keep ids
    the same length as the ObjectIds clients of the original API expect.

    Returns:
        A unique id string of 24 hex characters
    """
    return uuid.uuid4().hex[:24]


def get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO-formatted UTC timestamp string
    """
    return datetime.now(timezone.utc).isoformat()


def safe_json_loads(data: str | bytes | None, default: Any = None) -> Any:
    """
    Safely parse JSON with error handling.

    Args:
        data: JSON string or bytes to parse
        default: Value to return if parsing fails

    Returns:
        Parsed JSON data or default value on failure
    """
    try:
        if isinstance(data, bytes):
            data = data.decode('utf-8')
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return default


def truncate_string(s: str, max_length: int = 100) -> str:
    """
    Truncate a string to a maximum length for logging.

    Args:
        s: String to truncate
        max_length: Maximum allowed length

    Returns:
        Original string if short enough, otherwise truncated with ellipsis
    """
    if len(s) <= max_length:
        return s
    return s[:max_length - 3] + "..."

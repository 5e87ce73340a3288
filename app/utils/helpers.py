"""
Utility helper functions for safe data handling.
"""
from datetime import datetime, timezone
from typing import Any, Optional


def safe_str(value: Any, default: str = "") -> str:
    """
    Safely convert value to string, handling None.

    Args:
        value: Any value to convert
        default: Default string if value is None

    Returns:
        String representation or default
    """
    if value is None:
        return default
    return str(value)


def safe_upper(value: Any) -> str:
    """
    Safely uppercase a string value.

    Non-string values (including None) return an empty string rather than
    their repr, so they never match a lookup table by accident.
    """
    if not isinstance(value, str):
        return ""
    return value.upper()


def first_present(*candidates: Any, default: Any = None) -> Any:
    """
    Return the first candidate that is not None.

    Args:
        *candidates: Values in precedence order
        default: Returned when every candidate is None

    Returns:
        The winning candidate or default
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default


def non_empty_str(value: Any) -> Optional[str]:
    """
    Stringify a value exactly, returning None for None or an empty result.

    Whitespace is kept: " m1 " and "m1" are different IDs.
    """
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value)
    return text or None


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

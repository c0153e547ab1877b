"""
Helpers for assembling persisted document payloads.

Optional sub-objects are left out of a payload entirely when their source is
empty; they are never written as ``None`` or an empty container.
"""

from typing import Any, MutableMapping


def is_empty(value: Any) -> bool:
    """Return True for None, blank strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def put_if_present(target: MutableMapping[str, Any], key: str, value: Any) -> bool:
    """
    Insert ``value`` under ``key`` only when it is not empty.

    Returns:
        True if the key was written.
    """
    if is_empty(value):
        return False
    target[key] = value
    return True

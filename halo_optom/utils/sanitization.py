from typing import Any, Optional

import bleach


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Strip every HTML tag from user supplied free text (review comments, chat messages,
    clinical notes). Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()


def sanitize_dict(data: Optional[dict[str, Any]], fields: Optional[list[str]] = None) -> Optional[dict[str, Any]]:
    """
    Sanitize string values of a dictionary (nested dicts included).
    If fields is None, sanitizes all string values.
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, fields)
        elif isinstance(value, str) and (fields is None or key in fields):
            sanitized[key] = sanitize_text(value)
        else:
            sanitized[key] = value
    return sanitized

import html
import re
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def sanitize_dict(data: dict[str, Any], fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Escape string values of a flat dictionary.
    If fields is None, sanitizes all string values.
    """
    if not data:
        return data

    return {
        key: sanitize_string(value) if (fields is None or key in fields) else value
        for key, value in data.items()
    }


def validate_and_sanitize_input(value: str, max_length: int = 500) -> str:
    """
    Validate and sanitize free-text input such as template subjects.

    Raises:
        ValueError: If input exceeds max_length
    """
    if not value:
        return ""

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    # Strip control characters but keep newlines and tabs
    return re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", value)

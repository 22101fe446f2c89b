import html
from typing import Any, Optional


def sanitize_string(value: Optional[Any]) -> str:
    """
    Escape HTML special characters for safe interpolation into markup.
    ``None`` renders as an empty string.
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def sanitize_dict(data: dict[str, Any], fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Escape string values of a dictionary.
    If fields is None, every string value is escaped.
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if isinstance(value, str) and (fields is None or key in fields):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized

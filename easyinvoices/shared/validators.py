"""Shared validation utilities"""

import re
from typing import Any, Optional

from ..errors import BadArgumentError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

TRUTHY_VALUES = {"1", "true", "yes", "on"}
FALSY_VALUES = {"0", "false", "no", "off", ""}


def is_valid_email(email: Optional[str]) -> bool:
    """Syntactic email check used by both the API and the admin page"""
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if not isinstance(value, str):
        return False
    value = value.strip()
    # str.isdigit() also accepts superscripts and other digits int() rejects
    return value.isascii() and value.isdigit()


def parse_numeric_id(value: Any, name: str) -> int:
    """
    Coerce a record id coming from a form field.

    Raises:
        BadArgumentError: If the value is not a non-negative integer
    """
    if not is_numeric(value):
        raise BadArgumentError(f"Invalid argument type ${name} (value: {value!r})")
    return int(value)


def parse_flag(value: Any, name: str) -> int:
    """Parse a 0/1 checkbox flag"""
    if isinstance(value, str):
        value = value.strip()
    if value in (0, 1, "0", "1") and not isinstance(value, bool):
        return int(value)
    raise BadArgumentError(f"Flag ${name} must be 0 or 1 (value: {value!r})")


def parse_bool(value: Any, name: str) -> bool:
    """Parse loosely encoded form booleans such as "true", "0" or "on" """
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUTHY_VALUES:
        return True
    if normalized in FALSY_VALUES:
        return False
    raise BadArgumentError(f"Invalid boolean for ${name} (value: {value!r})")


def missing_required_fields(data: dict, required: tuple) -> list[str]:
    """Return the required fields that are absent or blank, in declaration order"""
    return [field for field in required if not str(data.get(field) or "").strip()]

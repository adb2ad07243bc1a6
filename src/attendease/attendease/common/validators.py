from __future__ import annotations

import re
from typing import Any

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str) -> str:
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email is not valid")
    return email


def coerce_positive_int(value: Any, field_name: str) -> int:
    """Coerce ints and integer-valued strings/floats ("3", "3.0") to a positive int."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")

    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        try:
            number = int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                raise ValidationError(f"{field_name} must be a number")
            if not as_float.is_integer():
                raise ValidationError(f"{field_name} must be a whole number")
            number = int(as_float)

    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return number


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value

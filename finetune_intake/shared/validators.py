"""Shared validation utilities"""

import re
from typing import Optional

from ..errors import ValidationError

PHONE_DIGITS = 10


def filter_phone_input(raw: Optional[str]) -> str:
    """
    Filter raw phone input down to at most 10 numeric digits.

    Non-digit characters are dropped wherever they appear, and digits past
    the tenth are ignored, e.g. "(555) 123-4567x9" -> "5551234567".
    """
    if not raw:
        return ""
    return re.sub(r"\D", "", raw)[:PHONE_DIGITS]


def validate_phone(phone: Optional[str]) -> str:
    """
    Validate a stored phone number.

    Raises:
        ValidationError: If the phone is not exactly 10 digits
    """
    if not phone or not phone.strip():
        raise ValidationError("phone", "Phone is required")

    if not re.fullmatch(r"\d{10}", phone):
        raise ValidationError("phone", "Phone number must be 10 digits")

    return phone


def validate_email(email: Optional[str]) -> str:
    """
    Validate email format.

    Returns:
        Trimmed, lowercase email address

    Raises:
        ValidationError: If the email is blank or has no "@"
    """
    if not email or not email.strip():
        raise ValidationError("email", "Email is required")

    email = email.strip().lower()

    if "@" not in email:
        raise ValidationError("email", "Invalid email address")

    return email


def require_text(field: str, value: Optional[str], label: Optional[str] = None) -> str:
    """Return the trimmed value, or raise if it is blank."""
    if value is None or not str(value).strip():
        raise ValidationError(field, f"{label or field} is required")
    return str(value).strip()


def names_match(typed: Optional[str], expected: str) -> bool:
    """
    Case-insensitive, whitespace-trimmed comparison of a typed legal name.

    When no expected name is known any non-blank entry is accepted.
    """
    typed = (typed or "").strip()
    if not expected.strip():
        return bool(typed)
    return typed.lower() == expected.strip().lower()

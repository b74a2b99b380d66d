"""Form field checks shared by the login and user forms."""

from __future__ import annotations

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 6


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value or ""))


def email_error(value: str | None) -> str | None:
    """Return the form error for an email field, or None when it is valid."""
    if not (value or "").strip():
        return "Email is required"
    if not is_valid_email(value.strip()):
        return "Invalid email format"
    return None


def password_error(value: str | None) -> str | None:
    if not value:
        return "Password is required"
    if len(value) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None

# flock/app/core/validation.py
"""
Field rules for user input. Never relies on the client application,
every value is re-validated here.
"""
import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email as _validate_email

LOGIN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{4,12}$")
PASSWORD_PATTERN = re.compile(r"^\w{4,12}$", re.ASCII)


def validate_login(login: Optional[str]) -> bool:
    return isinstance(login, str) and LOGIN_PATTERN.fullmatch(login) is not None


def validate_password(password: Optional[str]) -> bool:
    return isinstance(password, str) and PASSWORD_PATTERN.fullmatch(password) is not None


def validate_email(email: Optional[str]) -> bool:
    """RFC syntax check only, no DNS lookup."""
    if not isinstance(email, str):
        return False
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_message_text(text: Optional[str], max_length: int) -> bool:
    return isinstance(text, str) and bool(text.strip()) and len(text) <= max_length


# Ids are stored in 32-bit signed INTEGER columns on every backend
MAX_ID = 2 ** 31 - 1


def is_id(raw: Optional[str]) -> bool:
    """ASCII digits naming a value that fits an id column."""
    return (
        isinstance(raw, str)
        and raw.isascii()
        and raw.isdigit()
        and len(raw) <= len(str(MAX_ID))
        and int(raw) <= MAX_ID
    )

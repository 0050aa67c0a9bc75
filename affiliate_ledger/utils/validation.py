"""
Input validation helpers.

Normalizes and validates affiliate usernames, emails and amounts.
"""

import re
from decimal import Decimal, InvalidOperation

from affiliate_ledger.config.business_constants import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    USERNAME_PATTERN,
)
from affiliate_ledger.utils.exceptions import InvalidEmail, InvalidUsername


_USERNAME_RE = re.compile(USERNAME_PATTERN)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_username(username: str | None) -> str:
    """Lowercase and strip a username without validating it."""
    return (username or "").strip().lower()


def is_valid_username(username: str | None) -> bool:
    """
    Check username shape.

    Usernames are alphanumeric only, between USERNAME_MIN_LENGTH and
    USERNAME_MAX_LENGTH characters.
    """
    candidate = (username or "").strip()
    if not USERNAME_MIN_LENGTH <= len(candidate) <= USERNAME_MAX_LENGTH:
        return False
    return bool(_USERNAME_RE.match(candidate))


def validate_username(username: str | None) -> str:
    """
    Validate and normalize username.

    Args:
        username: Raw username

    Returns:
        Lowercase username

    Raises:
        InvalidUsername: If the username is too short, too long or not
            alphanumeric
    """
    if not is_valid_username(username):
        raise InvalidUsername(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} "
            f"letters or digits"
        )
    return normalize_username(username)


def validate_email(email: str | None) -> str:
    """Validate and lowercase an email address."""
    candidate = (email or "").strip().lower()
    if not _EMAIL_RE.match(candidate):
        raise InvalidEmail(f"Invalid email address: {email!r}")
    return candidate


def to_decimal(value: object) -> Decimal:
    """
    Convert a number-like value to Decimal.

    None and unparseable values become Decimal("0"); floats go through
    str() to avoid binary artefacts.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")

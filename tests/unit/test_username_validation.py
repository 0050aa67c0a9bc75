"""
Tests for username, email and amount helpers.
"""

from decimal import Decimal

import pytest

from affiliate_ledger.utils.exceptions import InvalidEmail, InvalidUsername
from affiliate_ledger.utils.validation import (
    is_valid_username,
    normalize_username,
    to_decimal,
    validate_email,
    validate_username,
)


class TestUsernameValidation:
    """Alphanumeric, 3-50 characters."""

    @pytest.mark.parametrize("username", ["kemi", "Kemi2024", "abc", "a" * 50])
    def test_valid(self, username):
        assert is_valid_username(username) is True

    @pytest.mark.parametrize(
        "username",
        ["", "ab", "kemi_a", "kemi-a", "kemi a", "kémi", "a" * 51, None],
    )
    def test_invalid(self, username):
        assert is_valid_username(username) is False

    def test_validate_lowercases(self):
        """Stored usernames are lowercase."""
        assert validate_username("  KeMi ") == "kemi"

    def test_validate_raises(self):
        """Malformed usernames raise InvalidUsername."""
        with pytest.raises(InvalidUsername):
            validate_username("no spaces")

    def test_normalize_does_not_validate(self):
        assert normalize_username(" Bad_Name ") == "bad_name"
        assert normalize_username(None) == ""


class TestEmailValidation:
    def test_lowercased(self):
        assert validate_email(" Kemi@Example.COM ") == "kemi@example.com"

    @pytest.mark.parametrize("email", ["", "kemi", "kemi@", "@example.com", None])
    def test_invalid(self, email):
        with pytest.raises(InvalidEmail):
            validate_email(email)


class TestToDecimal:
    """SQL sums come back as int, float, str or Decimal."""

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_str(self):
        assert to_decimal(2000) == Decimal("2000")
        assert to_decimal("4000.50") == Decimal("4000.50")

    def test_garbage_is_zero(self):
        assert to_decimal("not a number") == Decimal("0")

"""
Tests for commission calculation.

Covers:
- Fixed commission tiers per (plan, discount)
- Raw discount fallback for unknown pairs
- Input normalization
"""

from decimal import Decimal

import pytest

from affiliate_ledger.services.referral.commission import calculate_commission


class TestCommissionTiers:
    """Known (plan, discount) pairs."""

    @pytest.mark.parametrize(
        ("plan", "discount", "expected"),
        [
            ("test", Decimal("20"), Decimal("20")),
            ("business", Decimal("2000"), Decimal("2000")),
            ("pro", Decimal("4000"), Decimal("4000")),
        ],
    )
    def test_tier_lookup(self, plan, discount, expected):
        """Each tier pays its fixed commission."""
        assert calculate_commission(plan, discount) == expected

    def test_plan_is_case_insensitive(self):
        """Plan names are normalized before lookup."""
        assert calculate_commission(" Business ", Decimal("2000")) == Decimal("2000")

    def test_discount_with_cents_matches_tier(self):
        """2000.00 and 2000 are the same discount."""
        assert calculate_commission("pro", Decimal("4000.00")) == Decimal("4000")

    def test_string_and_int_discounts(self):
        """Discounts arriving as int or str still hit the table."""
        assert calculate_commission("business", 2000) == Decimal("2000")
        assert calculate_commission("business", "2000") == Decimal("2000")


class TestCommissionFallback:
    """Unknown pairs earn the raw discount."""

    def test_unknown_plan(self):
        """Unknown plan falls back to the discount amount."""
        assert calculate_commission("enterprise", Decimal("1500")) == Decimal("1500")

    def test_known_plan_unknown_discount(self):
        """Known plan with an off-table discount falls back too."""
        assert calculate_commission("business", Decimal("1000")) == Decimal("1000")

    def test_zero_discount(self):
        """No discount means no commission."""
        assert calculate_commission("business", Decimal("0")) == Decimal("0")

    def test_missing_plan(self):
        """Missing plan is handled, not raised."""
        assert calculate_commission(None, Decimal("500")) == Decimal("500")

    def test_plan_with_braces(self):
        """Plan text is logged verbatim, never used as a format string."""
        assert calculate_commission("pro{0}", Decimal("750")) == Decimal("750")

    @pytest.mark.parametrize("discount", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_non_finite_discount_earns_nothing(self, discount):
        """A discount that is not a number never reaches the ledger."""
        assert calculate_commission("business", discount) == Decimal("0")

"""
Business logic constants for the affiliate ledger.

Central location for commission tiers, coupon tables and affiliate rules.
"""

from decimal import Decimal

# Plans a referred business can pay for
PLAN_TEST = "test"
PLAN_BUSINESS = "business"
PLAN_PRO = "pro"
PLAN_TYPES = (PLAN_TEST, PLAN_BUSINESS, PLAN_PRO)

# Commission tiers keyed by (plan, discount applied at checkout).
# Business: N2,000 discount = N2,000 commission
# Pro: N4,000 discount = N4,000 commission
COMMISSION_TIERS: dict[tuple[str, Decimal], Decimal] = {
    (PLAN_TEST, Decimal("20")): Decimal("20"),
    (PLAN_BUSINESS, Decimal("2000")): Decimal("2000"),
    (PLAN_PRO, Decimal("4000")): Decimal("4000"),
}

# Discount table carried by every affiliate coupon
AFFILIATE_COUPON_DISCOUNTS: dict[str, Decimal] = {
    PLAN_BUSINESS: Decimal("2000"),
    PLAN_PRO: Decimal("4000"),
}
AFFILIATE_COUPON_PLAN_TYPE = "all"

# Username rules
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
USERNAME_PATTERN = r"^[a-zA-Z0-9]+$"

# Display
CURRENCY_SYMBOL = "₦"
UNKNOWN_BUSINESS_NAME = "Unknown Store"

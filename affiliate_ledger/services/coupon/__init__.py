"""
Coupon services package.

- discount: FixedDiscount / PerPlanDiscount variants
- coupon_binder: affiliate username -> coupon code
- coupon_resolver: checkout-side code resolution
"""

from affiliate_ledger.services.coupon.coupon_binder import (
    CouponBinder,
    affiliate_discount,
)
from affiliate_ledger.services.coupon.coupon_resolver import (
    CouponResolver,
    DiscountQuote,
)
from affiliate_ledger.services.coupon.discount import (
    Discount,
    FixedDiscount,
    PerPlanDiscount,
    discount_from_coupon,
)

__all__ = [
    "CouponBinder",
    "CouponResolver",
    "Discount",
    "DiscountQuote",
    "FixedDiscount",
    "PerPlanDiscount",
    "affiliate_discount",
    "discount_from_coupon",
]

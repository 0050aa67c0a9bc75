"""
Coupon discount variants.

A coupon discount is either one fixed amount for every plan or a table of
amounts per plan. Callers ask the variant for a plan's amount instead of
inspecting the stored shape.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from affiliate_ledger.models.coupon import Coupon
from affiliate_ledger.models.enums import DiscountKind
from affiliate_ledger.utils.validation import to_decimal


@dataclass(frozen=True)
class FixedDiscount:
    """Same amount off every plan."""

    amount: Decimal

    kind = DiscountKind.FIXED

    def amount_for(self, plan_id: str) -> Decimal | None:
        return self.amount


@dataclass(frozen=True)
class PerPlanDiscount:
    """Amount off depends on the plan; plans not listed get no discount."""

    amounts: Mapping[str, Decimal] = field(default_factory=dict)

    kind = DiscountKind.PER_PLAN

    def amount_for(self, plan_id: str) -> Decimal | None:
        return self.amounts.get((plan_id or "").strip().lower())


Discount = FixedDiscount | PerPlanDiscount


def discount_from_coupon(coupon: Coupon) -> Discount:
    """
    Build the discount variant stored on a coupon row.

    Args:
        coupon: Coupon entity

    Returns:
        FixedDiscount or PerPlanDiscount
    """
    if coupon.discount_kind == DiscountKind.FIXED.value:
        return FixedDiscount(amount=to_decimal(coupon.fixed_amount))

    return PerPlanDiscount(
        amounts={
            plan: to_decimal(value)
            for plan, value in (coupon.plan_amounts or {}).items()
        }
    )


def apply_discount_to_coupon(coupon: Coupon, discount: Discount) -> None:
    """Write a discount variant onto coupon columns."""
    coupon.discount_kind = discount.kind.value
    if discount.kind is DiscountKind.FIXED:
        coupon.fixed_amount = discount.amount
        coupon.plan_amounts = None
    else:
        coupon.fixed_amount = None
        # JSON column; amounts kept as strings to stay exact
        coupon.plan_amounts = {
            plan: str(value) for plan, value in discount.amounts.items()
        }

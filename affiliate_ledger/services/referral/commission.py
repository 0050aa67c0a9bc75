"""
Commission calculation.

Commission is looked up from a fixed table keyed by plan and the
discount applied at checkout.
"""

from decimal import Decimal

from loguru import logger

from affiliate_ledger.config.business_constants import COMMISSION_TIERS
from affiliate_ledger.utils.validation import to_decimal


def calculate_commission(plan_type: str, discount_amount: Decimal | int | str) -> Decimal:
    """
    Commission for a referral.

    Unknown (plan, discount) pairs earn the raw discount amount; a
    non-finite discount earns nothing.

    Args:
        plan_type: Plan paid for (test, business, pro)
        discount_amount: Discount applied at checkout

    Returns:
        Commission amount
    """
    plan = (plan_type or "").strip().lower()
    discount = to_decimal(discount_amount)
    if not discount.is_finite():
        logger.bind(plan_type=plan).warning(
            f"Discount {discount} is not a finite number, no commission"
        )
        return Decimal("0")

    commission = COMMISSION_TIERS.get((plan, discount))
    if commission is not None:
        return commission

    logger.bind(plan_type=plan, discount_amount=str(discount)).warning(
        f"No commission tier for plan={plan!r} discount={discount}, "
        f"using discount amount"
    )
    return discount

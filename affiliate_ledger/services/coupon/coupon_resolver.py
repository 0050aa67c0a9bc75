"""
Checkout coupon resolver.

Turns a code typed at checkout into the discount it grants for a plan.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.coupon_repository import CouponRepository
from affiliate_ledger.services.coupon.coupon_binder import affiliate_discount
from affiliate_ledger.services.coupon.discount import discount_from_coupon


@dataclass(frozen=True)
class DiscountQuote:
    """Normalized discount granted by a code for one plan."""

    code: str
    plan_id: str
    amount: Decimal
    affiliate_username: str | None = None


class CouponResolver:
    """
    Resolve checkout codes.

    A stored coupon wins; otherwise the code is tried as an active
    affiliate's username with the default affiliate table.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize resolver.

        Args:
            session: Database session
        """
        self.session = session
        self.coupon_repo = CouponRepository(session)
        self.affiliate_repo = AffiliateRepository(session)

    async def resolve(self, code: str, plan_id: str) -> DiscountQuote | None:
        """
        Resolve a code for a plan.

        Args:
            code: Code entered at checkout (case-insensitive)
            plan_id: Plan being purchased

        Returns:
            DiscountQuote, or None when the code grants nothing for the plan
        """
        normalized = (code or "").strip().lower()
        plan = (plan_id or "").strip().lower()
        if not normalized or not plan:
            return None

        try:
            coupon = await self.coupon_repo.get_by_code(normalized)
            if coupon is not None:
                if not coupon.is_active or coupon.is_exhausted:
                    logger.debug(f"Coupon {normalized} is inactive or exhausted")
                    return None
                amount = discount_from_coupon(coupon).amount_for(plan)
                if not amount:
                    return None

                username = None
                if coupon.affiliate_id is not None:
                    owner = await self.affiliate_repo.get_by_id(coupon.affiliate_id)
                    username = owner.username if owner else None
                return DiscountQuote(
                    code=normalized,
                    plan_id=plan,
                    amount=amount,
                    affiliate_username=username,
                )

            affiliate = await self.affiliate_repo.get_by_username(normalized)
        except SQLAlchemyError as e:
            logger.warning(f"Coupon lookup failed for {normalized}: {e}")
            return None

        if affiliate is None or not affiliate.is_active:
            return None

        amount = affiliate_discount().amount_for(plan)
        if not amount:
            return None

        return DiscountQuote(
            code=normalized,
            plan_id=plan,
            amount=amount,
            affiliate_username=affiliate.username,
        )

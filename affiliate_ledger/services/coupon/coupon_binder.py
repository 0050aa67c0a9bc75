"""
Coupon binder.

Exposes an affiliate's username as a redeemable coupon code.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import (
    AFFILIATE_COUPON_DISCOUNTS,
    AFFILIATE_COUPON_PLAN_TYPE,
)
from affiliate_ledger.models.coupon import Coupon
from affiliate_ledger.repositories.coupon_repository import CouponRepository
from affiliate_ledger.services.coupon.discount import (
    PerPlanDiscount,
    apply_discount_to_coupon,
)
from affiliate_ledger.utils.validation import normalize_username


# Concurrent binders racing on the same new code
MAX_BIND_ATTEMPTS = 2


def affiliate_discount() -> PerPlanDiscount:
    """Discount table carried by every affiliate coupon."""
    return PerPlanDiscount(amounts=dict(AFFILIATE_COUPON_DISCOUNTS))


class CouponBinder:
    """Creates or refreshes the coupon keyed by an affiliate username."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize coupon binder.

        Args:
            session: Database session
        """
        self.session = session
        self.coupon_repo = CouponRepository(session)

    async def bind_coupon_for_username(
        self, username: str, affiliate_id: int | None = None
    ) -> Coupon:
        """
        Create or overwrite the affiliate coupon for a username.

        Idempotent: binding the same username again rewrites the same row
        with the canonical discount table. Commits on success.

        Args:
            username: Affiliate username (coupon code)
            affiliate_id: Owning affiliate, if known

        Returns:
            The bound coupon
        """
        code = normalize_username(username)
        if not code:
            raise ValueError("Coupon code cannot be empty")

        attempt = 0
        while True:
            coupon = await self.coupon_repo.get_by_code(code)
            created = coupon is None
            if created:
                coupon = Coupon(code=code)
                self.session.add(coupon)

            apply_discount_to_coupon(coupon, affiliate_discount())
            coupon.plan_type = AFFILIATE_COUPON_PLAN_TYPE
            coupon.is_active = True
            coupon.usage_limit = None
            coupon.description = f"Affiliate discount - {code}"
            if affiliate_id is not None:
                coupon.affiliate_id = affiliate_id
            if created:
                coupon.used_count = 0

            try:
                await self.session.commit()
            except IntegrityError:
                # Someone else inserted the code first; retry as overwrite
                await self.session.rollback()
                attempt += 1
                if attempt >= MAX_BIND_ATTEMPTS:
                    raise
                continue

            logger.bind(code=code, affiliate_id=affiliate_id).info(
                f"Affiliate coupon {'created' if created else 'refreshed'}: {code}"
            )
            return coupon

"""
Coupon repository.

Data access layer for Coupon model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.coupon import Coupon
from affiliate_ledger.repositories.base import BaseRepository


class CouponRepository(BaseRepository[Coupon]):
    """Coupon repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize coupon repository."""
        super().__init__(Coupon, session)

    async def get_by_code(self, code: str) -> Coupon | None:
        """
        Get coupon by code (case-insensitive).

        Args:
            code: Coupon code

        Returns:
            Coupon or None if not found
        """
        normalized = (code or "").strip().lower()
        if not normalized:
            return None
        return await self.session.get(Coupon, normalized, populate_existing=True)

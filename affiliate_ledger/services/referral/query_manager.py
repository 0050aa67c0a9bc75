"""
Referral query management module.

Read models for referral lists. Store errors degrade to empty lists so
dashboards keep rendering.
"""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.referral import Referral
from affiliate_ledger.repositories.referral_repository import ReferralRepository


class ReferralQueryManager:
    """Manages referral query operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query manager."""
        self.session = session
        self.referral_repo = ReferralRepository(session)

    async def get_affiliate_referrals(
        self, affiliate_id: int, page: int = 1, limit: int = 50
    ) -> list[Referral]:
        """
        Get an affiliate's referrals, newest first.

        Args:
            affiliate_id: Affiliate ID
            page: Page number (1-based)
            limit: Items per page

        Returns:
            List of referrals (empty on store error)
        """
        offset = (max(page, 1) - 1) * limit
        try:
            return await self.referral_repo.list_by_affiliate(
                affiliate_id, limit=limit, offset=offset
            )
        except SQLAlchemyError as e:
            logger.warning(
                f"Failed to load referrals for affiliate {affiliate_id}: {e}"
            )
            return []

    async def get_recent_referrals(self, limit: int = 100) -> list[Referral]:
        """Get latest referrals across all affiliates (admin)."""
        try:
            return await self.referral_repo.list_recent(limit=limit)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to load recent referrals: {e}")
            return []

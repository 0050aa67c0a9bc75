"""
Referral repository.

Data access layer for Referral model.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import PaymentStatus
from affiliate_ledger.models.referral import Referral
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.utils.validation import to_decimal


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral repository."""
        super().__init__(Referral, session)

    async def get_by_transaction_ref(
        self, transaction_ref: str
    ) -> Referral | None:
        """
        Get referral created for a payment transaction.

        Args:
            transaction_ref: Payment gateway transaction reference

        Returns:
            Referral or None if not recorded
        """
        return await self.get_by(transaction_ref=transaction_ref)

    async def list_by_affiliate(
        self,
        affiliate_id: int,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Referral]:
        """
        Get referrals for an affiliate, newest first.

        Args:
            affiliate_id: Affiliate ID
            limit: Max number of results
            offset: Number of results to skip

        Returns:
            List of referrals
        """
        stmt = (
            select(Referral)
            .where(Referral.affiliate_id == affiliate_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int = 100) -> list[Referral]:
        """
        Get most recent referrals across all affiliates.

        Args:
            limit: Max number of results

        Returns:
            List of referrals
        """
        stmt = (
            select(Referral)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_completed_commission(self, affiliate_id: int) -> Decimal:
        """
        Sum commission of completed referrals for an affiliate.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            Total completed commission (0 if none)
        """
        stmt = select(
            func.coalesce(func.sum(Referral.commission_amount), 0)
        ).where(
            Referral.affiliate_id == affiliate_id,
            Referral.payment_status == PaymentStatus.COMPLETED.value,
        )
        result = await self.session.execute(stmt)
        return to_decimal(result.scalar())

    async def get_ledger_totals(
        self, affiliate_id: int | None = None
    ) -> dict[int, dict[str, int | Decimal]]:
        """
        Get referral count and completed commission per affiliate.

        Uses a single GROUP BY query instead of loading every referral.

        Args:
            affiliate_id: Restrict to one affiliate (all when None)

        Returns:
            Dict mapping affiliate ID to
            {"count": int, "completed_commission": Decimal}
        """
        completed = func.sum(
            case(
                (
                    Referral.payment_status == PaymentStatus.COMPLETED.value,
                    Referral.commission_amount,
                ),
                else_=0,
            )
        )
        stmt = select(
            Referral.affiliate_id,
            func.count(Referral.id).label("count"),
            func.coalesce(completed, 0).label("completed_commission"),
        ).group_by(Referral.affiliate_id)

        if affiliate_id is not None:
            stmt = stmt.where(Referral.affiliate_id == affiliate_id)

        result = await self.session.execute(stmt)

        return {
            row.affiliate_id: {
                "count": row.count,
                "completed_commission": to_decimal(row.completed_commission),
            }
            for row in result.all()
        }

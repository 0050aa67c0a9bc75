"""
Affiliate aggregate counters.

The only writer of Affiliate.total_referrals and Affiliate.total_earnings.
Every change is a single UPDATE with the arithmetic done in SQL, so
concurrent writers never lose an increment.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate


class AffiliateAggregates:
    """Atomic increments and decrements of affiliate totals."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize aggregates writer.

        Args:
            session: Database session (caller commits)
        """
        self.session = session

    async def credit_referral(
        self, affiliate_id: int, commission: Decimal
    ) -> bool:
        """
        Count one referral and add its commission.

        Args:
            affiliate_id: Affiliate ID
            commission: Commission credited for the referral

        Returns:
            True if the affiliate row was updated
        """
        stmt = (
            update(Affiliate)
            .where(Affiliate.id == affiliate_id)
            .values(
                total_referrals=Affiliate.total_referrals + 1,
                total_earnings=Affiliate.total_earnings + commission,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def debit_settlement(
        self, affiliate_id: int, amount: Decimal
    ) -> bool:
        """
        Take a settled withdrawal off total_earnings, floored at zero.

        Args:
            affiliate_id: Affiliate ID
            amount: Withdrawal amount

        Returns:
            True if the affiliate row was updated
        """
        stmt = (
            update(Affiliate)
            .where(Affiliate.id == affiliate_id)
            .values(
                total_earnings=case(
                    (
                        Affiliate.total_earnings > amount,
                        Affiliate.total_earnings - amount,
                    ),
                    else_=Decimal("0"),
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def overwrite(
        self,
        affiliate_id: int,
        total_referrals: int,
        total_earnings: Decimal,
    ) -> None:
        """
        Replace both counters with values recomputed from the ledger.

        Only used by TotalsRebuilder.
        """
        stmt = (
            update(Affiliate)
            .where(Affiliate.id == affiliate_id)
            .values(
                total_referrals=total_referrals,
                total_earnings=total_earnings,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        logger.bind(
            affiliate_id=affiliate_id,
            total_referrals=total_referrals,
            total_earnings=str(total_earnings),
        ).debug(
            "Affiliate totals overwritten"
        )

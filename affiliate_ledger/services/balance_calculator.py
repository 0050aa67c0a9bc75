"""
Balance calculator.

Spendable balance is always derived from the ledger, never from the
cached Affiliate.total_earnings:

    completed = sum of completed referral commission
    reserved  = sum of pending, approved and paid withdrawals
    available = max(0, completed - reserved)
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.repositories.referral_repository import ReferralRepository
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)


ZERO = Decimal("0")


@dataclass(frozen=True)
class BalanceSummary:
    """Balance figures for an affiliate dashboard."""

    completed_commission: Decimal
    pending_withdrawals: Decimal
    approved_withdrawals: Decimal
    paid_withdrawals: Decimal

    @property
    def reserved(self) -> Decimal:
        """Amount no longer spendable (pending + approved + paid)."""
        return (
            self.pending_withdrawals
            + self.approved_withdrawals
            + self.paid_withdrawals
        )

    @property
    def settled(self) -> Decimal:
        """Amount already taken off total earnings (approved + paid)."""
        return self.approved_withdrawals + self.paid_withdrawals

    @property
    def available(self) -> Decimal:
        """Spendable balance, never negative."""
        return max(ZERO, self.completed_commission - self.reserved)


class BalanceCalculator:
    """Derives affiliate balances from referrals and withdrawals."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize balance calculator.

        Args:
            session: Database session
        """
        self.session = session
        self.referral_repo = ReferralRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)

    async def available_balance(self, affiliate_id: int) -> Decimal:
        """
        Get spendable balance.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            max(0, completed commission - reserved withdrawals)
        """
        completed = await self.referral_repo.sum_completed_commission(
            affiliate_id
        )
        reserved = await self.withdrawal_repo.sum_reserved(affiliate_id)
        return max(ZERO, completed - reserved)

    async def get_balance_summary(self, affiliate_id: int) -> BalanceSummary:
        """
        Get every balance figure in two queries.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            BalanceSummary
        """
        completed = await self.referral_repo.sum_completed_commission(
            affiliate_id
        )
        by_status = await self.withdrawal_repo.get_totals_by_status(
            affiliate_id
        )
        return BalanceSummary(
            completed_commission=completed,
            pending_withdrawals=by_status[WithdrawalStatus.PENDING.value],
            approved_withdrawals=by_status[WithdrawalStatus.APPROVED.value],
            paid_withdrawals=by_status[WithdrawalStatus.PAID.value],
        )

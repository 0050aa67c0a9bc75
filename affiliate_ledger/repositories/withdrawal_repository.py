"""
Withdrawal request repository.

Data access layer for WithdrawalRequest model.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.utils.validation import to_decimal


# Statuses whose amount is no longer spendable
RESERVED_STATUSES = (
    WithdrawalStatus.PENDING.value,
    WithdrawalStatus.APPROVED.value,
    WithdrawalStatus.PAID.value,
)

# Statuses that have already been taken off total_earnings
SETTLED_STATUSES = (
    WithdrawalStatus.APPROVED.value,
    WithdrawalStatus.PAID.value,
)


class WithdrawalRepository(BaseRepository[WithdrawalRequest]):
    """Withdrawal request repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(WithdrawalRequest, session)

    async def get_by_id(self, id: Any) -> WithdrawalRequest | None:
        """Get withdrawal by ID, refreshing it from the database."""
        return await self.session.get(
            WithdrawalRequest, id, populate_existing=True
        )

    async def get_pending_for_affiliate(
        self, affiliate_id: int
    ) -> WithdrawalRequest | None:
        """
        Get the pending request of an affiliate, if any.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            Pending WithdrawalRequest or None
        """
        return await self.get_by(
            affiliate_id=affiliate_id,
            status=WithdrawalStatus.PENDING.value,
        )

    async def sum_by_statuses(
        self, affiliate_id: int, statuses: Iterable[str]
    ) -> Decimal:
        """
        Sum requested amounts in the given statuses.

        Args:
            affiliate_id: Affiliate ID
            statuses: Statuses to include

        Returns:
            Total amount (0 if none)
        """
        stmt = select(
            func.coalesce(func.sum(WithdrawalRequest.amount), 0)
        ).where(
            WithdrawalRequest.affiliate_id == affiliate_id,
            WithdrawalRequest.status.in_(list(statuses)),
        )
        result = await self.session.execute(stmt)
        return to_decimal(result.scalar())

    async def sum_reserved(self, affiliate_id: int) -> Decimal:
        """Sum of pending, approved and paid requests."""
        return await self.sum_by_statuses(affiliate_id, RESERVED_STATUSES)

    async def get_totals_by_status(
        self, affiliate_id: int
    ) -> dict[str, Decimal]:
        """
        Get requested amounts grouped by status in a single query.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            Dict mapping every status to its total (0 when absent)
        """
        stmt = (
            select(
                WithdrawalRequest.status,
                func.coalesce(func.sum(WithdrawalRequest.amount), 0).label("total"),
            )
            .where(WithdrawalRequest.affiliate_id == affiliate_id)
            .group_by(WithdrawalRequest.status)
        )
        result = await self.session.execute(stmt)

        totals = {status.value: Decimal("0") for status in WithdrawalStatus}
        for row in result.all():
            totals[row.status] = to_decimal(row.total)
        return totals

    async def get_settled_totals(
        self, affiliate_id: int | None = None
    ) -> dict[int, Decimal]:
        """
        Get approved + paid amounts per affiliate.

        Args:
            affiliate_id: Restrict to one affiliate (all when None)

        Returns:
            Dict mapping affiliate ID to settled amount
        """
        stmt = (
            select(
                WithdrawalRequest.affiliate_id,
                func.coalesce(func.sum(WithdrawalRequest.amount), 0).label("total"),
            )
            .where(WithdrawalRequest.status.in_(SETTLED_STATUSES))
            .group_by(WithdrawalRequest.affiliate_id)
        )
        if affiliate_id is not None:
            stmt = stmt.where(WithdrawalRequest.affiliate_id == affiliate_id)

        result = await self.session.execute(stmt)
        return {row.affiliate_id: to_decimal(row.total) for row in result.all()}

    async def list_by_affiliate(
        self, affiliate_id: int
    ) -> list[WithdrawalRequest]:
        """
        Get withdrawal history of an affiliate, newest first.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            List of withdrawal requests
        """
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.affiliate_id == affiliate_id)
            .order_by(
                WithdrawalRequest.requested_at.desc(),
                WithdrawalRequest.id.desc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(
        self, status: str | None = None
    ) -> list[WithdrawalRequest]:
        """
        Get all withdrawal requests (admin), newest first.

        Args:
            status: Optional status filter

        Returns:
            List of withdrawal requests
        """
        stmt = select(WithdrawalRequest).order_by(
            WithdrawalRequest.requested_at.desc(),
            WithdrawalRequest.id.desc(),
        )
        if status is not None:
            stmt = stmt.where(WithdrawalRequest.status == status)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def compare_and_set_status(
        self,
        withdrawal_id: int,
        expected_status: str,
        **values: Any,
    ) -> bool:
        """
        Atomically update a request only if it is still in expected_status.

        Args:
            withdrawal_id: Withdrawal request ID
            expected_status: Status the row must currently have
            **values: Columns to set (must include the new status)

        Returns:
            True if the row was updated, False if its status had changed
        """
        stmt = (
            update(WithdrawalRequest)
            .where(
                WithdrawalRequest.id == withdrawal_id,
                WithdrawalRequest.status == expected_status,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

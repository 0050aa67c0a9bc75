"""
Withdrawal query service module.

Lookups and listings of withdrawal requests for affiliates and admins.
"""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from affiliate_ledger.utils.exceptions import (
    LedgerValidationError,
    WithdrawalNotFound,
)


class WithdrawalQueryService:
    """Handles withdrawal query operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal query service.

        Args:
            session: Database session
        """
        self.session = session
        self.withdrawal_repo = WithdrawalRepository(session)

    async def get_withdrawal(self, withdrawal_id: int) -> WithdrawalRequest:
        """
        Get withdrawal request by ID.

        Raises:
            WithdrawalNotFound: Unknown withdrawal
        """
        withdrawal = await self.withdrawal_repo.get_by_id(withdrawal_id)
        if withdrawal is None:
            raise WithdrawalNotFound(withdrawal_id)
        return withdrawal

    async def list_affiliate_withdrawals(
        self, affiliate_id: int
    ) -> list[WithdrawalRequest]:
        """
        Get an affiliate's withdrawal history, newest first.

        Returns:
            List of withdrawal requests (empty on store error)
        """
        try:
            return await self.withdrawal_repo.list_by_affiliate(affiliate_id)
        except SQLAlchemyError as e:
            logger.warning(
                f"Failed to load withdrawals for affiliate {affiliate_id}: {e}"
            )
            return []

    async def list_all_withdrawals(
        self, status: str | None = None
    ) -> list[WithdrawalRequest]:
        """
        Get all withdrawal requests (admin), newest first.

        Args:
            status: Optional status filter

        Returns:
            List of withdrawal requests (empty on store error)

        Raises:
            LedgerValidationError: Unknown status filter
        """
        if status is not None:
            try:
                status = WithdrawalStatus(status).value
            except ValueError:
                raise LedgerValidationError(
                    f"Unknown withdrawal status: {status!r}"
                ) from None

        try:
            return await self.withdrawal_repo.list_all(status=status)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to load withdrawals: {e}")
            return []

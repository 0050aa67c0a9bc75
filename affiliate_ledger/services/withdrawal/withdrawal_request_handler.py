"""
Withdrawal request handling module.

Creates withdrawal requests. The affiliate row is locked while the
balance is checked so two requests cannot both spend the same balance;
the partial unique index on pending requests is the final arbiter.
"""

import asyncio
import random
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.settings import settings
from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from affiliate_ledger.services.balance_calculator import BalanceCalculator
from affiliate_ledger.utils.db_decorators import with_rollback_on_error
from affiliate_ledger.utils.exceptions import (
    AffiliateNotFound,
    InsufficientBalance,
    InvalidAmount,
    MissingBankDetails,
    PendingRequestExists,
)
from affiliate_ledger.utils.validation import to_decimal


LOCK_ERROR_MARKERS = ("could not obtain lock", "lock_not_available", "lock not available")


def _is_lock_conflict(error: OperationalError) -> bool:
    error_str = str(error).lower()
    return any(marker in error_str for marker in LOCK_ERROR_MARKERS)


class WithdrawalRequestHandler:
    """Handles withdrawal request creation and validation."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal request handler.

        Args:
            session: Database session
        """
        self.session = session
        self.affiliate_repo = AffiliateRepository(session)
        self.withdrawal_repo = WithdrawalRepository(session)
        self.balance_calculator = BalanceCalculator(session)

    @with_rollback_on_error
    async def request_withdrawal(
        self, affiliate_id: int, amount: Decimal | int | str
    ) -> WithdrawalRequest:
        """
        Create a pending withdrawal request.

        Args:
            affiliate_id: Requesting affiliate
            amount: Requested amount

        Returns:
            Created pending WithdrawalRequest

        Raises:
            AffiliateNotFound: Unknown affiliate
            MissingBankDetails: Bank details not recorded yet
            InvalidAmount: amount <= 0 or not a finite number
            PendingRequestExists: Affiliate already has a pending request
            InsufficientBalance: amount exceeds available balance
            OperationalError: Affiliate row stayed locked after all retries
        """
        amount = to_decimal(amount)
        max_retries = settings.withdrawal_lock_retries

        for attempt in range(max_retries):
            try:
                return await self._create_locked(affiliate_id, amount)
            except OperationalError as e:
                if not _is_lock_conflict(e) or attempt == max_retries - 1:
                    raise
                await self.session.rollback()
                delay = settings.withdrawal_lock_retry_delay * (2 ** attempt) + random.uniform(0, 0.5)
                logger.bind(attempt=attempt + 1).debug(
                    f"Affiliate {affiliate_id} locked, retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        raise RuntimeError("withdrawal_lock_retries must be at least 1")

    async def _create_locked(
        self, affiliate_id: int, amount: Decimal
    ) -> WithdrawalRequest:
        affiliate = await self.affiliate_repo.get_for_update(
            affiliate_id, nowait=True
        )
        if affiliate is None:
            raise AffiliateNotFound(affiliate_id)

        if not affiliate.has_bank_details:
            raise MissingBankDetails(affiliate_id)

        if not amount.is_finite() or amount <= 0:
            raise InvalidAmount(amount)

        if await self.withdrawal_repo.get_pending_for_affiliate(affiliate_id):
            raise PendingRequestExists(affiliate_id)

        available = await self.balance_calculator.available_balance(affiliate_id)
        if amount > available:
            raise InsufficientBalance(amount, available)

        try:
            withdrawal = await self.withdrawal_repo.create(
                affiliate_id=affiliate_id,
                affiliate_username=affiliate.username,
                affiliate_email=affiliate.email,
                amount=amount,
                bank_account_name=affiliate.bank_account_name,
                bank_name=affiliate.bank_name,
                bank_account_number=affiliate.bank_account_number,
                status=WithdrawalStatus.PENDING.value,
            )
        except IntegrityError:
            # Concurrent request won the partial unique index
            await self.session.rollback()
            raise PendingRequestExists(affiliate_id) from None

        await self.session.commit()

        logger.bind(
            withdrawal_id=withdrawal.id,
            affiliate_id=affiliate_id,
            amount=str(amount),
            available_before=str(available),
        ).info(
            "Withdrawal request created"
        )
        return withdrawal

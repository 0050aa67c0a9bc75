"""
Withdrawal lifecycle handling module.

Admin disposition of withdrawal requests: approve, reject, mark paid.
"""

from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import WithdrawalStatus
from affiliate_ledger.models.withdrawal_request import WithdrawalRequest
from affiliate_ledger.repositories.withdrawal_repository import (
    WithdrawalRepository,
)
from affiliate_ledger.services.ledger.aggregates import AffiliateAggregates
from affiliate_ledger.services.withdrawal.withdrawal_state_machine import (
    can_transition,
    settles_on_transition,
)
from affiliate_ledger.utils.db_decorators import with_rollback_on_error
from affiliate_ledger.utils.exceptions import (
    InvalidTransition,
    MissingRejectionReason,
    WithdrawalNotFound,
)


class WithdrawalLifecycleHandler:
    """Handles withdrawal lifecycle operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal lifecycle handler.

        Args:
            session: Database session
        """
        self.session = session
        self.withdrawal_repo = WithdrawalRepository(session)
        self.aggregates = AffiliateAggregates(session)

    @with_rollback_on_error
    async def update_withdrawal_status(
        self,
        withdrawal_id: int,
        new_status: str,
        admin: str,
        rejection_reason: str | None = None,
        transaction_reference: str | None = None,
    ) -> WithdrawalRequest:
        """
        Move a withdrawal request to a new status.

        The status change is a compare-and-set on the current status, so
        two admins acting on the same request cannot both settle it.

        Args:
            withdrawal_id: Withdrawal request ID
            new_status: approved, rejected or paid
            admin: Identity of the acting admin
            rejection_reason: Required when rejecting
            transaction_reference: Bank transfer reference (payouts)

        Returns:
            Updated withdrawal request

        Raises:
            WithdrawalNotFound: Unknown withdrawal
            InvalidTransition: Transition not allowed from current status
            MissingRejectionReason: Rejecting without a reason
        """
        withdrawal = await self.withdrawal_repo.get_by_id(withdrawal_id)
        if withdrawal is None:
            raise WithdrawalNotFound(withdrawal_id)

        current = withdrawal.status
        if not can_transition(current, new_status):
            raise InvalidTransition(withdrawal_id, current, new_status)

        values: dict[str, Any] = {
            "status": new_status,
            "processed_at": datetime.now(UTC),
            "processed_by": admin,
        }

        if new_status == WithdrawalStatus.REJECTED.value:
            reason = (rejection_reason or "").strip()
            if not reason:
                raise MissingRejectionReason()
            values["rejection_reason"] = reason

        reference = (transaction_reference or "").strip()
        if reference:
            values["transaction_reference"] = reference

        updated = await self.withdrawal_repo.compare_and_set_status(
            withdrawal_id, current, **values
        )
        if not updated:
            # Another admin moved it first
            await self.session.rollback()
            latest = await self.withdrawal_repo.get_by_id(withdrawal_id)
            raise InvalidTransition(
                withdrawal_id,
                latest.status if latest else current,
                new_status,
            )

        if settles_on_transition(current, new_status):
            await self.aggregates.debit_settlement(
                withdrawal.affiliate_id, withdrawal.amount
            )

        await self.session.commit()

        logger.bind(
            withdrawal_id=withdrawal_id,
            affiliate_id=withdrawal.affiliate_id,
            amount=str(withdrawal.amount),
            admin=admin,
        ).info(
            f"Withdrawal {withdrawal_id}: {current} -> {new_status}"
        )

        refreshed = await self.withdrawal_repo.get_by_id(withdrawal_id)
        return refreshed if refreshed is not None else withdrawal

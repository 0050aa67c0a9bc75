"""
Payment claim repository.

Data access layer for PaymentClaim idempotency markers.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.payment_claim import PaymentClaim
from affiliate_ledger.repositories.base import BaseRepository


class PaymentClaimRepository(BaseRepository[PaymentClaim]):
    """Payment claim repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payment claim repository."""
        super().__init__(PaymentClaim, session)

    async def try_claim(
        self, transaction_ref: str, affiliate_id: int
    ) -> bool:
        """
        Insert the claim marker for a payment transaction.

        The insert is flushed immediately so a primary-key conflict
        surfaces here. On conflict the session must be rolled back by the
        caller before it is used again.

        Args:
            transaction_ref: Payment gateway transaction reference
            affiliate_id: Affiliate being credited

        Returns:
            True if this call created the claim, False if it already existed
        """
        # Fast path for redeliveries; the flush below arbitrates races
        if await self.get_by_id(transaction_ref) is not None:
            return False

        self.session.add(
            PaymentClaim(
                transaction_ref=transaction_ref,
                affiliate_id=affiliate_id,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError:
            return False
        return True

    async def is_claimed(self, transaction_ref: str) -> bool:
        """Check whether a transaction reference was already processed."""
        return await self.exists(transaction_ref=transaction_ref)

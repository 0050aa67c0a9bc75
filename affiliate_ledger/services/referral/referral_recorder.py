"""
Referral recorder.

Converts a confirmed payment into a commission-bearing referral and
credits the affiliate. Safe against redelivery: a payment claim keyed by
the transaction reference is inserted in the same transaction as the
credit, so a transaction is credited at most once.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import UNKNOWN_BUSINESS_NAME
from affiliate_ledger.models.enums import PaymentStatus
from affiliate_ledger.models.referral import Referral
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.repositories.payment_claim_repository import (
    PaymentClaimRepository,
)
from affiliate_ledger.repositories.referral_repository import ReferralRepository
from affiliate_ledger.services.ledger.aggregates import AffiliateAggregates
from affiliate_ledger.services.referral.commission import calculate_commission
from affiliate_ledger.services.referral.payment_event import PaymentConfirmed
from affiliate_ledger.utils.db_decorators import with_rollback_on_error
from affiliate_ledger.utils.validation import normalize_username, to_decimal


class RecordStatus(StrEnum):
    """What happened to a payment event."""

    RECORDED = "recorded"
    SKIPPED = "skipped"
    UNKNOWN_AFFILIATE = "unknown_affiliate"
    INACTIVE_AFFILIATE = "inactive_affiliate"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass
class RecordOutcome:
    """Result of recording a payment event."""

    status: RecordStatus
    referral: Referral | None = None
    commission: Decimal | None = None
    retryable: bool = False
    error_message: str | None = None

    @property
    def credited(self) -> bool:
        """Whether this call credited the affiliate."""
        return self.status is RecordStatus.RECORDED


class ReferralRecorder:
    """Record referrals from payment confirmations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize referral recorder.

        Args:
            session: Database session
        """
        self.session = session
        self.affiliate_repo = AffiliateRepository(session)
        self.claim_repo = PaymentClaimRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.aggregates = AffiliateAggregates(session)

    @with_rollback_on_error
    async def record(self, event: PaymentConfirmed) -> RecordOutcome:
        """
        Credit the affiliate named on a payment, at most once.

        Args:
            event: Confirmed payment

        Returns:
            RecordOutcome; attribution misses and redeliveries are not
            errors

        Raises:
            SQLAlchemyError: Store failures (the session is rolled back)
        """
        username = normalize_username(event.affiliate_username)
        if not username:
            return RecordOutcome(status=RecordStatus.SKIPPED)

        if not event.transaction_ref:
            raise ValueError("Payment event has no transaction reference")

        affiliate = await self.affiliate_repo.get_by_username(username)
        if affiliate is None:
            logger.bind(transaction_ref=event.transaction_ref).warning(
                f"Affiliate not found for username: {username}"
            )
            return RecordOutcome(status=RecordStatus.UNKNOWN_AFFILIATE)

        if not affiliate.is_active:
            logger.bind(
                affiliate_id=affiliate.id,
                transaction_ref=event.transaction_ref,
            ).warning(
                f"Affiliate {username} is {affiliate.status}, not crediting"
            )
            return RecordOutcome(status=RecordStatus.INACTIVE_AFFILIATE)

        affiliate_id = affiliate.id
        discount = to_decimal(event.discount_amount)
        commission = calculate_commission(event.plan_type, discount)

        claimed = await self.claim_repo.try_claim(
            event.transaction_ref, affiliate_id
        )
        if not claimed:
            await self.session.rollback()
            logger.bind(
                transaction_ref=event.transaction_ref,
                affiliate_id=affiliate_id,
            ).info(
                "Payment already credited, skipping"
            )
            return RecordOutcome(status=RecordStatus.DUPLICATE)

        await self.aggregates.credit_referral(affiliate_id, commission)

        now = datetime.now(UTC)
        referral = await self.referral_repo.create(
            affiliate_id=affiliate_id,
            affiliate_username=username,
            transaction_ref=event.transaction_ref,
            referred_user_id=event.referred_user_id,
            referred_business_id=event.referred_business_id,
            referred_business_name=(
                event.referred_business_name or UNKNOWN_BUSINESS_NAME
            ),
            referred_user_phone=event.referred_contacts.phone or "",
            referred_user_whatsapp=event.referred_contacts.whatsapp or "",
            plan_type=(event.plan_type or "").strip().lower(),
            discount_amount=discount,
            commission_amount=commission,
            payment_status=PaymentStatus.COMPLETED.value,
            completed_at=now,
        )

        await self.session.commit()

        logger.bind(
            affiliate_id=affiliate_id,
            referral_id=referral.id,
            transaction_ref=event.transaction_ref,
            plan_type=referral.plan_type,
            commission=str(commission),
        ).info(
            f"Referral recorded for {username}: {commission}"
        )

        return RecordOutcome(
            status=RecordStatus.RECORDED,
            referral=referral,
            commission=commission,
        )

    async def handle_payment_confirmed(
        self, event: PaymentConfirmed
    ) -> RecordOutcome:
        """
        Payment callback entry point.

        Never raises: a payment that was already taken must not be shown
        as failed because crediting the affiliate failed. Store errors
        are logged and reported as a retryable failure.

        Args:
            event: Confirmed payment

        Returns:
            RecordOutcome
        """
        try:
            return await self.record(event)
        except SQLAlchemyError as e:
            logger.bind(
                transaction_ref=event.transaction_ref,
                affiliate_username=event.affiliate_username,
                error=str(e),
            ).exception(
                "Failed to record referral"
            )
            return RecordOutcome(
                status=RecordStatus.FAILED,
                retryable=True,
                error_message="Referral could not be recorded",
            )
        except Exception as e:
            logger.bind(transaction_ref=event.transaction_ref).exception(
                f"Unexpected error recording referral: {e}"
            )
            return RecordOutcome(
                status=RecordStatus.FAILED,
                retryable=False,
                error_message=str(e),
            )
